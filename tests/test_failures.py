# tests/test_failures.py
"""
Tests for the failure taxonomy, rendered messages and bucket mapping.
"""

import dataclasses

import pytest

from formatlint.failures import (
    FailureBucket,
    FailureKind,
    ValidationFailure,
    classify,
)

CORRECTNESS = [
    FailureKind.UNKNOWN_FAILURE,
    FailureKind.NULL_TEMPLATE,
    FailureKind.INVALID_CHAR_AFTER_OPEN_BRACE,
    FailureKind.UNBALANCED_BRACES,
    FailureKind.ITEM_MALFORMED,
    FailureKind.ITEM_INDEX_NOT_INTEGER,
    FailureKind.ITEM_ALIGNMENT_NOT_INTEGER,
    FailureKind.ITEM_INDEX_TOO_HIGH,
]

MAINTAINABILITY = [
    FailureKind.TRIVIAL_TEMPLATE,
    FailureKind.MISSING_ITEM_INDEX,
    FailureKind.UNUSED_ARGUMENT,
]


class TestClassify:

    @pytest.mark.parametrize("kind", CORRECTNESS)
    def test_correctness_bucket(self, kind):
        assert classify(ValidationFailure(kind)) is FailureBucket.CORRECTNESS

    @pytest.mark.parametrize("kind", MAINTAINABILITY)
    def test_maintainability_bucket(self, kind):
        assert classify(ValidationFailure(kind)) is FailureBucket.MAINTAINABILITY

    def test_buckets_cover_every_kind_once(self):
        assert sorted(CORRECTNESS + MAINTAINABILITY, key=lambda k: k.name) == \
            sorted(FailureKind, key=lambda k: k.name)

    def test_bucket_property(self):
        failure = ValidationFailure.of(FailureKind.UNUSED_ARGUMENT, ["x"])
        assert failure.bucket is FailureBucket.MAINTAINABILITY


class TestMessages:

    def test_every_kind_has_a_message(self):
        for kind in FailureKind:
            assert kind.message

    def test_plain_message(self):
        failure = ValidationFailure(FailureKind.NULL_TEMPLATE)
        assert failure.message == "Invalid string format, the format string cannot be null."
        assert str(failure) == failure.message

    def test_missing_indexes_rendered(self):
        failure = ValidationFailure.of(FailureKind.MISSING_ITEM_INDEX, [1, 3])
        assert failure.additional_data == ("1", "3")
        assert failure.message.endswith("missing: 1, 3.")

    def test_unused_arguments_rendered(self):
        failure = ValidationFailure.of(FailureKind.UNUSED_ARGUMENT, ["foo", "bar()"])
        assert failure.message.endswith("unused: foo, bar().")

    def test_only_two_kinds_carry_data(self):
        carrying = {k for k in FailureKind if k.carries_data}
        assert carrying == {FailureKind.MISSING_ITEM_INDEX, FailureKind.UNUSED_ARGUMENT}


class TestValueSemantics:

    def test_equal_failures_compare_equal(self):
        a = ValidationFailure.of(FailureKind.MISSING_ITEM_INDEX, ["1"])
        b = ValidationFailure.of(FailureKind.MISSING_ITEM_INDEX, ["1"])
        assert a == b
        assert hash(a) == hash(b)

    def test_immutable(self):
        failure = ValidationFailure(FailureKind.UNBALANCED_BRACES)
        with pytest.raises(dataclasses.FrozenInstanceError):
            failure.kind = FailureKind.ITEM_MALFORMED

    def test_data_on_plain_kind_rejected(self):
        with pytest.raises(ValueError):
            ValidationFailure(FailureKind.TRIVIAL_TEMPLATE, ("x",))

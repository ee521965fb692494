# tests/conftest.py
"""Shared fixtures and sample sources for the formatlint test-suite."""

from typing import List

import pytest

from formatlint.model import FormatArgument


def labels(*names: str) -> List[FormatArgument]:
    """Scalar arguments with the given labels."""
    return [FormatArgument.scalar(n) for n in names]


SAMPLE_SOURCE = '''\
using System;
using System.Globalization;
using System.IO;
using System.Text;

class Sample
{
    const string Greeting = "Hello {0}";
    const string Prefix = "[" + "{0}" + "]";

    void Run(object[] items, IFormatProvider provider, string name)
    {
        var sb = new StringBuilder();
        StreamWriter writer = null;

        string.Format("{0} {1}", 1);
        Console.WriteLine("{0}", 1, 2);
        sb.AppendFormat(Greeting, name);
        writer.WriteLine("{1}", name, name);
        string.Format(provider, "{0}", name);
        string.Format(CultureInfo.InvariantCulture, "{0}{1}", name);
        Console.WriteLine("{0}", items);
        string.Format("{0}{1}", new[] { name, name });
        Console.WriteLine("plain");
        string.Format("plain");
        Console.WriteLine(GetText());
        Console.Out.Write(Prefix, name);
        // string.Format("{9}");
    }
}
'''


@pytest.fixture
def sample_source() -> str:
    return SAMPLE_SOURCE


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "Sample.cs"
    path.write_text(SAMPLE_SOURCE, encoding="utf-8")
    return path

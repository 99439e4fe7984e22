"""
Pytest configuration and shared fixtures for protoannotate tests.
"""

import io
import sys
import tempfile
from pathlib import Path

import pytest

# Add project root to path so the tests run from a plain checkout
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def text_sink():
    """A text sink the annotator writes str to."""
    return io.StringIO()


@pytest.fixture
def binary_sink():
    """A byte sink the annotator writes UTF-8 to."""
    return io.BytesIO()


@pytest.fixture
def sample_message():
    """
    One field of every wire type except groups.

    field 1 varint 150, field 2 string "hello", field 3 fixed32 42,
    field 4 fixed64 1000, field 16 varint 5 (two byte tag).
    """
    return bytes.fromhex(
        "08 96 01"
        "12 05 68 65 6c 6c 6f"
        "1d 2a 00 00 00"
        "21 e8 03 00 00 00 00 00 00"
        "80 01 05"
    )


@pytest.fixture
def grouped_message():
    """
    A group around one varint, followed by a top-level varint.

    field 1 start group, field 2 varint 1, field 1 end group, field 3 varint 2.
    """
    return bytes.fromhex("0b 10 01 0c 18 02")

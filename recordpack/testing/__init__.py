"""Test framework integration for RecordKit."""

from recordpack.testing.assertions import RecordedAssertions
from recordpack.testing.files import assert_file_as_recorded

__all__ = [
    "RecordedAssertions",
    "assert_file_as_recorded",
]

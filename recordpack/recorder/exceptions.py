"""Recorder exceptions.

Every recorder failure is an `AssertionError`, so test runners report it as
a test failure instead of an error.
"""


class RecordedAssertionError(AssertionError):
    """Base class for recorded assertion failures."""


class UnexpectedAssertionError(RecordedAssertionError):
    """More values were asserted than were recorded."""


class RecordedValueMismatchError(RecordedAssertionError):
    """An asserted value differs from the recorded value."""


class PrematureEndError(RecordedAssertionError):
    """Fewer values were asserted than were recorded."""

"""Storage subsystem exceptions."""


class StorageError(Exception):
    """Base class for recording storage errors."""


class RecordingNotFoundError(StorageError):
    """No recording file exists for the requested test name."""


class RecordingFormatError(StorageError):
    """Recording file is not valid YAML or does not have the expected shape."""


class RecordingHeaderMismatchError(StorageError):
    """Stored test metadata does not match the current test call."""

"""Recording storage subsystem for RecordKit."""

from recordpack.storage.exceptions import (
    RecordingFormatError,
    RecordingHeaderMismatchError,
    RecordingNotFoundError,
    StorageError,
)
from recordpack.storage.io import (
    RECORDING_SUFFIX,
    AssertionValueStore,
    YamlAssertionValueStore,
    read_recording,
    read_yaml_document,
    sanitize_recording_name,
    write_recording,
    write_yaml_document,
)
from recordpack.storage.serialization import RecordingDumper, RecordingLoader, dump_yaml, load_yaml

__all__ = [
    "StorageError",
    "RecordingNotFoundError",
    "RecordingFormatError",
    "RecordingHeaderMismatchError",
    "RECORDING_SUFFIX",
    "AssertionValueStore",
    "YamlAssertionValueStore",
    "sanitize_recording_name",
    "read_recording",
    "write_recording",
    "read_yaml_document",
    "write_yaml_document",
    "RecordingDumper",
    "RecordingLoader",
    "dump_yaml",
    "load_yaml",
]

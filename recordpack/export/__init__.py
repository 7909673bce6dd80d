"""Structural value export subsystem for RecordKit."""

from recordpack.export.defaults import PLACEHOLDER_STRING, strictly_equal, synthesize_default_object
from recordpack.export.exceptions import ExportConfigError, ExportError
from recordpack.export.exporter import (
    DEFAULT_DEPTH,
    DedicatedExportCallback,
    DedicatedExporter,
    ExportScope,
    Exporter,
    export,
)

__all__ = [
    "DEFAULT_DEPTH",
    "DedicatedExportCallback",
    "DedicatedExporter",
    "ExportScope",
    "Exporter",
    "export",
    "ExportError",
    "ExportConfigError",
    "PLACEHOLDER_STRING",
    "strictly_equal",
    "synthesize_default_object",
]

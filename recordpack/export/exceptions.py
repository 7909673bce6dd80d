"""Export subsystem exceptions."""


class ExportError(Exception):
    """Base class for export errors."""


class ExportConfigError(ExportError):
    """Invalid exporter configuration, such as an unusable default object."""

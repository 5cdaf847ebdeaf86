"""Exception hierarchy for backup metadata handling."""

from typing import Optional


class MetadataError(Exception):
    """Base exception for all metadata errors."""
    pass


class MetadataFormatError(MetadataError):
    """Raised when a stored metadata document is malformed or incomplete."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        if field is not None:
            message = f"{field}: {message}"
        super().__init__(message)


class EmptyMetadataError(MetadataError):
    """Raised when a metadata document is empty or whitespace only."""
    pass


class MetadataIOError(MetadataError):
    """Raised when the metadata file cannot be read or written."""
    pass


class MetadataNotSetError(MetadataError):
    """Raised when an operation needs metadata that was never set."""
    pass


class MetadataInvariantError(MetadataError):
    """Raised when a metadata instance violates its structural invariants."""
    pass


class InvalidPackageFactsError(MetadataError, ValueError):
    """Raised when package facts or flags handed to the builder are incomplete."""
    pass


class UnsupportedVersionError(MetadataError):
    """Raised for a metadata format version this library does not know."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"Unsupported metadata version: {version}")

"""Metadata wire format.

A metadata file is a single JSON object with one key per :class:`Metadata`
attribute. Both directions are driven by :data:`FIELDS`, so a field added to
the table is written and read in the same way.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, NamedTuple, Optional, Union

from pydantic import ValidationError

from ..util.logging import get_logger
from ..util.paths import atomic_write_bytes
from .errors import (
    EmptyMetadataError,
    MetadataFormatError,
    MetadataInvariantError,
    MetadataIOError,
    MetadataNotSetError,
)
from .flags import BackupFlags
from .metadata import Metadata, TarType

logger = get_logger(__name__)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _parse_tar_type(value: Any) -> TarType:
    if not isinstance(value, str):
        raise TypeError("expected a string")
    try:
        return TarType(value)
    except ValueError:
        raise TypeError(f"unknown tar type {value!r}") from None


class FieldKind(NamedTuple):
    """How one kind of value is checked, decoded and encoded."""

    name: str
    check: Callable[[Any], bool]
    decode: Callable[[Any], Any]
    encode: Callable[[Any], Any]


STR = FieldKind("string", lambda v: isinstance(v, str), str, str)
INT = FieldKind("integer", _is_int, int, int)
BOOL = FieldKind("boolean", lambda v: isinstance(v, bool), bool, bool)
STR_LIST = FieldKind("array of strings", _is_str_list, list, list)
FLAGS = FieldKind("integer", _is_int, BackupFlags, int)
TAR_TYPE = FieldKind(
    "string",
    lambda v: isinstance(v, str),
    _parse_tar_type,
    lambda v: TarType(v).value,
)


class WireField(NamedTuple):
    """One entry of the wire format: key, value kind and whether it must be present."""

    key: str
    kind: FieldKind
    required: bool = True


FIELDS = (
    WireField("label", STR),
    WireField("package_name", STR),
    WireField("version_name", STR),
    WireField("version_code", INT),
    WireField("data_dirs", STR_LIST),
    WireField("is_system", BOOL),
    WireField("is_split_apk", BOOL),
    WireField("split_configs", STR_LIST),
    WireField("split_names", STR_LIST),
    WireField("has_rules", BOOL),
    WireField("backup_time", INT),
    WireField("cert_sha256_checksum", STR_LIST),
    WireField("source_sha256_checksum", STR),
    WireField("data_sha256_checksum", STR_LIST),
    WireField("mode", INT),
    WireField("version", INT),
    WireField("apk_name", STR),
    WireField("instruction_set", STR),
    WireField("flags", FLAGS),
    WireField("user_handle", INT),
    WireField("tar_type", TAR_TYPE),
    WireField("key_store", BOOL),
)


def to_document(metadata: Optional[Metadata]) -> Dict[str, Any]:
    """Convert metadata to the JSON-compatible document that gets stored."""
    if metadata is None:
        raise MetadataNotSetError("Metadata is not set")

    return {field.key: field.kind.encode(getattr(metadata, field.key)) for field in FIELDS}


def from_document(document: Any) -> Metadata:
    """Build metadata from a parsed document, checking every field in :data:`FIELDS`.

    Raises:
        MetadataFormatError: On the first missing or mistyped field, or when the
            values are inconsistent with each other
    """
    if not isinstance(document, dict):
        raise MetadataFormatError(f"expected a JSON object, got {type(document).__name__}")

    values = {}
    for field in FIELDS:
        if field.key not in document:
            if field.required:
                raise MetadataFormatError("missing required field", field=field.key)
            continue

        raw = document[field.key]
        if not field.kind.check(raw):
            raise MetadataFormatError(
                f"expected {field.kind.name}, got {type(raw).__name__}", field=field.key
            )
        try:
            values[field.key] = field.kind.decode(raw)
        except (TypeError, ValueError) as e:
            raise MetadataFormatError(str(e), field=field.key) from e

    try:
        return Metadata(**values)
    except MetadataInvariantError as e:
        raise MetadataFormatError(f"inconsistent metadata: {e}") from e
    except ValidationError as e:
        raise MetadataFormatError(f"invalid metadata: {e}") from e


def serialize(metadata: Optional[Metadata]) -> bytes:
    """Serialize metadata to compact UTF-8 JSON."""
    document = to_document(metadata)
    return json.dumps(document, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def deserialize(data: Union[bytes, str]) -> Metadata:
    """Parse a stored metadata document.

    Unknown keys are ignored. Nothing is returned unless every field parsed.

    Raises:
        EmptyMetadataError: If the input is empty or whitespace only
        MetadataFormatError: If the input is not a complete metadata document
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MetadataFormatError(f"not valid UTF-8: {e}") from e
    else:
        text = data

    if not text.strip():
        raise EmptyMetadataError("Empty metadata document")

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise MetadataFormatError(f"malformed JSON: {e}") from e

    return from_document(document)


def write_metadata_file(metadata: Optional[Metadata], path: Path) -> None:
    """Serialize metadata and atomically replace the file at path.

    Raises:
        MetadataNotSetError: If metadata is None; the file is not touched
        MetadataIOError: If the file cannot be written
    """
    data = serialize(metadata)

    try:
        atomic_write_bytes(Path(path), data)
    except OSError as e:
        raise MetadataIOError(f"Failed to write metadata to {path}: {e}") from e

    logger.debug(f"Saved metadata for {metadata.package_name} to {path}")


def read_metadata_file(path: Path) -> Metadata:
    """Read and parse the metadata file at path.

    Raises:
        MetadataIOError: If the file cannot be read
        EmptyMetadataError, MetadataFormatError: As for :func:`deserialize`
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise MetadataIOError(f"Failed to read metadata from {path}: {e}") from e

    metadata = deserialize(data)
    logger.debug(f"Loaded metadata for {metadata.package_name} from {path}")
    return metadata

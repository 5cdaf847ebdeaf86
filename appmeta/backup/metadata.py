"""Backup metadata model."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..util.logging import get_logger
from ..util.timeutil import now_timestamp
from .errors import MetadataInvariantError
from .flags import BackupFlags

logger = get_logger(__name__)

META_FILE = "meta.am.v1"
METADATA_VERSION = 1


class TarType(str, Enum):
    """Compression applied to the backup archive."""

    PLAIN = "none"
    GZIP = "z"


class Metadata(BaseModel):
    """Metadata describing one backup of one installed application.

    Attribute names double as keys in the stored document. A fresh instance
    comes from :func:`appmeta.backup.builder.build_metadata` with empty payload
    checksums and ``backup_time == 0``; :meth:`finalize` fills them in once the
    payload has been captured.
    """

    model_config = ConfigDict(validate_assignment=True, arbitrary_types_allowed=True)

    label: str = Field(description="Application label")
    package_name: str = Field(description="Package name")
    version_name: str = Field(description="Version name at capture time")
    version_code: int = Field(description="Version code at capture time")
    data_dirs: List[str] = Field(default_factory=list, description="Backed up data directories")
    is_system: bool = Field(default=False, description="Installed as a system application")
    is_split_apk: bool = Field(default=False, description="Delivered as base plus split APKs")
    split_configs: List[str] = Field(default_factory=list, description="Split configuration names")
    split_names: List[str] = Field(default_factory=list, description="Split APK file names")
    has_rules: bool = Field(default=False, description="Access-control rules were captured")
    backup_time: int = Field(default=0, description="Completion time (Unix timestamp), 0 until committed")
    cert_sha256_checksum: List[str] = Field(default_factory=list, description="SHA256 per signing certificate")
    source_sha256_checksum: str = Field(default="", description="SHA256 of the APK source archive")
    data_sha256_checksum: List[str] = Field(default_factory=list, description="SHA256 per data directory")
    mode: int = Field(default=0, description="Capture mode selector")
    version: int = Field(default=METADATA_VERSION, description="Metadata format version")
    apk_name: str = Field(description="File name of the base APK")
    instruction_set: str = Field(description="CPU instruction set of the application")
    flags: BackupFlags = Field(default_factory=BackupFlags, description="Capture flags")
    user_handle: int = Field(default=0, description="Android user the backup belongs to")
    tar_type: TarType = Field(default=TarType.GZIP, description="Archive compression")
    key_store: bool = Field(default=False, description="Key material was captured")

    @model_validator(mode="after")
    def _check_invariants(self) -> "Metadata":
        if len(self.data_sha256_checksum) != len(self.data_dirs):
            raise MetadataInvariantError(
                f"data_sha256_checksum has {len(self.data_sha256_checksum)} entries "
                f"for {len(self.data_dirs)} data directories"
            )
        if len(self.split_configs) != len(self.split_names):
            raise MetadataInvariantError(
                f"split_configs has {len(self.split_configs)} entries "
                f"but split_names has {len(self.split_names)}"
            )
        if self.is_split_apk != bool(self.split_configs):
            raise MetadataInvariantError("is_split_apk does not match split_configs")
        if self.version < 1:
            raise MetadataInvariantError(f"Invalid metadata version: {self.version}")
        return self

    @property
    def is_finalized(self) -> bool:
        """Whether the capture pipeline has committed this backup."""
        return self.backup_time > 0

    def finalize(
        self,
        source_checksum: str,
        data_checksums: List[str],
        backup_time: Optional[int] = None
    ) -> None:
        """Record payload checksums and completion time in one step.

        The new values are validated together before any attribute changes,
        so a rejected call leaves the instance untouched.
        """
        changes = {
            "source_sha256_checksum": source_checksum,
            "data_sha256_checksum": list(data_checksums),
            "backup_time": now_timestamp() if backup_time is None else backup_time,
        }
        type(self)(**{**dict(self), **changes})

        for name, value in changes.items():
            setattr(self, name, value)

        logger.debug(f"Finalized metadata for {self.package_name} at {self.backup_time}")

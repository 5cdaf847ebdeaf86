"""Backup metadata module initialization."""

from .builder import PackageFacts, PackageRules, RulesProvider, StaticRulesProvider, build_metadata
from .codec import FIELDS, WireField, deserialize, read_metadata_file, serialize, write_metadata_file
from .errors import (
    EmptyMetadataError,
    InvalidPackageFactsError,
    MetadataError,
    MetadataFormatError,
    MetadataInvariantError,
    MetadataIOError,
    MetadataNotSetError,
    UnsupportedVersionError,
)
from .flags import BackupFlag, BackupFlags
from .integrity import (
    IntegrityReport,
    VerificationResult,
    certificate_checksums,
    compute,
    compute_data_checksums,
    compute_directory,
    compute_file,
    verify,
    verify_backup,
)
from .manager import MetadataManager, MetadataManagerStore
from .metadata import META_FILE, METADATA_VERSION, Metadata, TarType
from .storage import BackupStorage

__all__ = [
    # flags
    "BackupFlag",
    "BackupFlags",
    # metadata
    "META_FILE",
    "METADATA_VERSION",
    "Metadata",
    "TarType",
    # builder
    "PackageFacts",
    "PackageRules",
    "RulesProvider",
    "StaticRulesProvider",
    "build_metadata",
    # codec
    "FIELDS",
    "WireField",
    "deserialize",
    "read_metadata_file",
    "serialize",
    "write_metadata_file",
    # integrity
    "IntegrityReport",
    "VerificationResult",
    "certificate_checksums",
    "compute",
    "compute_data_checksums",
    "compute_directory",
    "compute_file",
    "verify",
    "verify_backup",
    # storage
    "BackupStorage",
    # manager
    "MetadataManager",
    "MetadataManagerStore",
    # errors
    "EmptyMetadataError",
    "InvalidPackageFactsError",
    "MetadataError",
    "MetadataFormatError",
    "MetadataInvariantError",
    "MetadataIOError",
    "MetadataNotSetError",
    "UnsupportedVersionError",
]

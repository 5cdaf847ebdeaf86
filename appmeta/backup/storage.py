"""Backup storage layout management."""

import typing as t
from pathlib import Path

from ..util.logging import get_logger
from ..util.paths import ensure_directory, safe_path_component
from .codec import read_metadata_file, write_metadata_file
from .errors import MetadataError, MetadataIOError, MetadataNotSetError
from .metadata import META_FILE, Metadata

logger = get_logger(__name__)


class BackupStorage:
    """Manages where metadata files live and how they are listed."""

    def __init__(self, base_path: Path) -> None:
        """Initialize backup storage.

        Args:
            base_path: Base directory for all backups
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_config(cls, config=None) -> "BackupStorage":
        """Create storage rooted at the configured backup root."""
        from ..config import get_config

        if config is None:
            config = get_config()
        return cls(config.backup_root)

    def get_package_dir(self, package_name: str) -> Path:
        """Get the directory holding all backups of a package.

        Args:
            package_name: Package name

        Returns:
            Path to package backup directory
        """
        return self.base_path / safe_path_component(package_name)

    def get_backup_dir(self, package_name: str, user_handle: int) -> Path:
        """Get the backup directory of a package for one user.

        Args:
            package_name: Package name
            user_handle: Android user handle

        Returns:
            Path to backup directory

        Raises:
            ValueError: If user_handle is negative
        """
        user_handle = int(user_handle)
        if user_handle < 0:
            raise ValueError(f"Invalid user handle: {user_handle}")
        return self.get_package_dir(package_name) / str(user_handle)

    def get_metadata_path(self, package_name: str, user_handle: int) -> Path:
        """Get path to the metadata file of a backup."""
        return self.get_backup_dir(package_name, user_handle) / META_FILE

    def has_metadata(self, package_name: str, user_handle: int) -> bool:
        """Check whether a metadata file exists for a backup."""
        return self.get_metadata_path(package_name, user_handle).is_file()

    def write_metadata(self, metadata: Metadata) -> Path:
        """Write metadata to its package and user scoped location.

        Returns:
            Path to the written metadata file

        Raises:
            MetadataNotSetError: If metadata is None
            MetadataIOError: If the directory or file cannot be written
        """
        if metadata is None:
            raise MetadataNotSetError("Metadata is not set")

        path = self.get_metadata_path(metadata.package_name, metadata.user_handle)

        try:
            ensure_directory(path.parent)
        except OSError as e:
            raise MetadataIOError(f"Failed to create backup directory {path.parent}: {e}") from e

        write_metadata_file(metadata, path)
        logger.info(f"Saved metadata for {metadata.package_name} (user {metadata.user_handle})")
        return path

    def read_metadata(self, package_name: str, user_handle: int) -> Metadata:
        """Read the metadata of a backup.

        Raises:
            MetadataIOError: If the file is missing or unreadable
            EmptyMetadataError, MetadataFormatError: If the file is not valid metadata
        """
        return read_metadata_file(self.get_metadata_path(package_name, user_handle))

    def list_packages(self) -> t.List[str]:
        """List package names that have a backup directory."""
        return sorted(d.name for d in self.base_path.iterdir() if d.is_dir())

    def list_backups(self, package_name: str) -> t.List[Metadata]:
        """List restorable backups of a package.

        A backup whose metadata cannot be read or parsed, or whose metadata
        names another package or user than its directory, is left out.

        Returns:
            Metadata per user handle, sorted by user handle
        """
        package_dir = self.get_package_dir(package_name)

        if not package_dir.exists():
            return []

        backups = []
        for user_dir in sorted(package_dir.iterdir(), key=lambda d: d.name):
            if not user_dir.is_dir() or not user_dir.name.isdigit():
                continue

            metadata_path = user_dir / META_FILE
            if not metadata_path.exists():
                continue

            try:
                metadata = read_metadata_file(metadata_path)
            except MetadataError as e:
                logger.warning(f"Skipping unreadable backup {user_dir}: {e}")
                continue

            if metadata.package_name != package_name or str(metadata.user_handle) != user_dir.name:
                logger.warning(
                    f"Skipping misplaced backup {user_dir}: metadata is for "
                    f"{metadata.package_name} (user {metadata.user_handle})"
                )
                continue

            backups.append(metadata)

        return sorted(backups, key=lambda m: m.user_handle)

"""Metadata handles per package."""

from typing import Callable, Dict, Optional

from ..util.logging import get_logger
from ..util.timeutil import now_timestamp
from .builder import PackageFacts, RulesProvider, build_metadata
from .errors import MetadataNotSetError
from .flags import BackupFlags
from .metadata import Metadata, TarType
from .storage import BackupStorage

logger = get_logger(__name__)


class MetadataManager:
    """Holds the metadata of one package while it is backed up or restored.

    A manager is bound to a single package name for its whole life. One
    backup or restore operation uses it at a time.
    """

    def __init__(self, package_name: str, storage: BackupStorage):
        self.package_name = package_name
        self.storage = storage
        self.metadata: Optional[Metadata] = None
        self.closed = False

    def __enter__(self) -> "MetadataManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the handle. The held metadata is discarded."""
        self.metadata = None
        self.closed = True
        logger.debug(f"Closed metadata handle for {self.package_name}")

    def has_metadata(self, user_handle: int) -> bool:
        return self.storage.has_metadata(self.package_name, user_handle)

    def setup_metadata(
        self,
        facts: PackageFacts,
        user_handle: int,
        flags: BackupFlags,
        rules: Optional[RulesProvider] = None,
        tar_type: TarType = TarType.GZIP,
        mode: int = 0
    ) -> Metadata:
        """Build fresh metadata for this package and hold on to it."""
        if facts is not None and facts.package_name != self.package_name:
            raise ValueError(
                f"Package facts for {facts.package_name} given to handle of {self.package_name}"
            )

        self.metadata = build_metadata(facts, user_handle, flags, rules, tar_type, mode)
        return self.metadata

    def read_metadata(self, user_handle: int) -> Metadata:
        """Load stored metadata of this package for a user."""
        self.metadata = self.storage.read_metadata(self.package_name, user_handle)
        return self.metadata

    def write_metadata(self) -> None:
        """Store the held metadata.

        Raises:
            MetadataNotSetError: If no metadata was set up or read
            MetadataIOError: If the file cannot be written
        """
        if self.metadata is None:
            raise MetadataNotSetError(f"Metadata is not set for {self.package_name}")
        self.storage.write_metadata(self.metadata)

    def commit(self, source_checksum: str, data_checksums, backup_time: Optional[int] = None) -> None:
        """Finalize the held metadata and store it.

        The held metadata only changes once the finalized copy has been
        written; after a failed write it is still unfinalized.
        """
        if self.metadata is None:
            raise MetadataNotSetError(f"Metadata is not set for {self.package_name}")

        finalized = self.metadata.model_copy(deep=True)
        finalized.finalize(
            source_checksum,
            data_checksums,
            now_timestamp() if backup_time is None else backup_time,
        )
        self.storage.write_metadata(finalized)
        self.metadata = finalized


class MetadataManagerStore:
    """Maps package names to their metadata handle, holding at most one.

    Asking for a different package closes and drops the current handle before
    a new one is created. Callers serialize access; the store does no locking.
    """

    def __init__(
        self,
        storage: BackupStorage,
        factory: Optional[Callable[[str, BackupStorage], MetadataManager]] = None
    ):
        self.storage = storage
        self.factory = factory or MetadataManager
        self._handles: Dict[str, MetadataManager] = {}

    @property
    def current(self) -> Optional[MetadataManager]:
        return next(iter(self._handles.values()), None)

    def get(self, package_name: str) -> MetadataManager:
        """Get the handle for a package, replacing the handle of any other package."""
        handle = self._handles.get(package_name)
        if handle is not None and not handle.closed:
            return handle

        self._evict_all()

        handle = self.factory(package_name, self.storage)
        self._handles[package_name] = handle
        logger.debug(f"Created metadata handle for {package_name}")
        return handle

    def _evict_all(self) -> None:
        while self._handles:
            package_name, handle = self._handles.popitem()
            logger.debug(f"Evicting metadata handle for {package_name}")
            handle.close()

    def evict(self) -> None:
        """Close and drop the current handle, if any."""
        self._evict_all()

    def close(self) -> None:
        self.evict()

    def __enter__(self) -> "MetadataManagerStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

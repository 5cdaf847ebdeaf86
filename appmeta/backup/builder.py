"""Builds fresh metadata from installed package information."""

import contextlib
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import ContextManager, Dict, List, Optional

from ..util.logging import get_logger
from .errors import InvalidPackageFactsError
from .flags import BackupFlags
from .integrity import certificate_checksums
from .metadata import METADATA_VERSION, Metadata, TarType

logger = get_logger(__name__)


@dataclass
class PackageFacts:
    """Information about an installed package, as reported by the device."""

    package_name: str
    label: str = ""
    version_name: str = ""
    version_code: int = 0
    source_dir: str = ""
    data_dirs: List[str] = field(default_factory=list)
    external_data_dirs: List[str] = field(default_factory=list)
    obb_media_dirs: List[str] = field(default_factory=list)
    split_configs: List[str] = field(default_factory=list)
    split_source_dirs: List[str] = field(default_factory=list)
    signing_certificates: List[bytes] = field(default_factory=list)
    instruction_set: str = ""
    is_system: bool = False
    has_key_store: bool = False


class PackageRules:
    """Access-control rules held for one package."""

    def entry_count(self) -> int:
        raise NotImplementedError


class RulesProvider:
    """Gives scoped access to the access-control rules of a package."""

    def acquire(self, package_name: str) -> ContextManager[PackageRules]:
        """Open the rules of a package; leaving the ``with`` block releases them."""
        raise NotImplementedError


class _CountedRules(PackageRules):

    def __init__(self, count: int):
        self.count = count

    def entry_count(self) -> int:
        return self.count


class StaticRulesProvider(RulesProvider):
    """Rules provider backed by precomputed entry counts per package."""

    def __init__(self, counts: Optional[Dict[str, int]] = None):
        self.counts = dict(counts or {})

    @contextlib.contextmanager
    def acquire(self, package_name: str):
        yield _CountedRules(self.counts.get(package_name, 0))


def _base_name(path: str) -> str:
    return PurePosixPath(path).name


def _check_facts(facts: Optional[PackageFacts], flags: Optional[BackupFlags]) -> None:
    if facts is None:
        raise InvalidPackageFactsError("Package facts are required")
    if not facts.package_name:
        raise InvalidPackageFactsError("Package name is missing")
    if not facts.source_dir:
        raise InvalidPackageFactsError(f"Source path is missing for {facts.package_name}")
    if flags is None:
        raise InvalidPackageFactsError(f"Backup flags are not set for {facts.package_name}")
    if len(facts.split_configs) != len(facts.split_source_dirs):
        raise InvalidPackageFactsError(
            f"{facts.package_name} reports {len(facts.split_configs)} split configs "
            f"but {len(facts.split_source_dirs)} split paths"
        )


def _collect_data_dirs(facts: PackageFacts, flags: BackupFlags) -> List[str]:
    if not flags.backup_data:
        return []

    data_dirs = list(facts.data_dirs)
    if flags.backup_ext_data:
        data_dirs.extend(facts.external_data_dirs)
    if flags.backup_ext_obb_media:
        data_dirs.extend(facts.obb_media_dirs)
    return data_dirs


def _has_rules(package_name: str, flags: BackupFlags, rules: Optional[RulesProvider]) -> bool:
    if rules is None or not flags.backup_rules:
        return False

    with rules.acquire(package_name) as package_rules:
        return package_rules.entry_count() > 0


def build_metadata(
    facts: PackageFacts,
    user_handle: int,
    flags: BackupFlags,
    rules: Optional[RulesProvider] = None,
    tar_type: TarType = TarType.GZIP,
    mode: int = 0
) -> Metadata:
    """Create metadata for a backup that is about to be captured.

    Payload checksums start empty (one empty entry per data directory) and
    ``backup_time`` is 0 until :meth:`Metadata.finalize` is called.

    Raises:
        InvalidPackageFactsError: If facts or flags are missing or inconsistent
    """
    _check_facts(facts, flags)

    data_dirs = _collect_data_dirs(facts, flags)
    split_configs = list(facts.split_configs)
    split_names = [_base_name(path) for path in facts.split_source_dirs]

    metadata = Metadata(
        label=facts.label or facts.package_name,
        package_name=facts.package_name,
        version_name=facts.version_name,
        version_code=facts.version_code,
        data_dirs=data_dirs,
        is_system=facts.is_system,
        is_split_apk=bool(split_configs),
        split_configs=split_configs,
        split_names=split_names,
        has_rules=_has_rules(facts.package_name, flags, rules),
        backup_time=0,
        cert_sha256_checksum=certificate_checksums(facts.signing_certificates),
        source_sha256_checksum="",
        data_sha256_checksum=[""] * len(data_dirs),
        mode=mode,
        version=METADATA_VERSION,
        apk_name=_base_name(facts.source_dir),
        instruction_set=facts.instruction_set,
        flags=flags,
        user_handle=user_handle,
        tar_type=tar_type,
        key_store=facts.has_key_store and flags.backup_key_store,
    )

    logger.debug(
        f"Built metadata for {metadata.package_name} (user {user_handle}): "
        f"{len(data_dirs)} data dirs, {len(split_configs)} splits, flags={flags.flags}"
    )
    return metadata

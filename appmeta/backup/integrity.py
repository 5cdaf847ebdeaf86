"""Checksum computation and verification for backup payloads."""

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, List, Optional, Sequence

from tqdm import tqdm

from ..util.hashing import calculate_bytes_hash, calculate_file_hash, calculate_stream_hash
from ..util.logging import get_logger
from .errors import UnsupportedVersionError
from .metadata import METADATA_VERSION, Metadata

logger = get_logger(__name__)

# Hash algorithm per metadata format version. An algorithm never changes
# within a version.
ALGORITHMS = {
    1: "sha256",
}


def algorithm_for(version: int = METADATA_VERSION) -> str:
    """Get the hash algorithm used by a metadata format version."""
    try:
        return ALGORITHMS[version]
    except KeyError:
        raise UnsupportedVersionError(version) from None


def compute(stream: BinaryIO, version: int = METADATA_VERSION) -> str:
    """Compute the hex digest of a binary stream."""
    return calculate_stream_hash(stream, algorithm_for(version))


def compute_bytes(data: bytes, version: int = METADATA_VERSION) -> str:
    """Compute the hex digest of in-memory bytes."""
    return calculate_bytes_hash(data, algorithm_for(version))


def compute_file(path: Path, version: int = METADATA_VERSION) -> str:
    """Compute the hex digest of a file such as an APK."""
    return calculate_file_hash(Path(path), algorithm_for(version))


def compute_directory(path: Path, version: int = METADATA_VERSION) -> str:
    """Compute a digest over the contents of a directory tree.

    Entries are visited in sorted order of their relative POSIX path. Each
    entry contributes its type, its relative path in filesystem encoding and,
    for files, the fixed-size digest of the file content; for symbolic links,
    the link target.
    """
    root = Path(path)
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    algorithm = algorithm_for(version)
    hasher = hashlib.new(algorithm)

    entries = []
    for dirpath, dirnames, filenames in os.walk(root):
        # Do not descend into linked directories, they are recorded as links
        for name in list(dirnames):
            if os.path.islink(os.path.join(dirpath, name)):
                dirnames.remove(name)
                filenames.append(name)
        for name in dirnames + filenames:
            full = Path(dirpath) / name
            entries.append((full.relative_to(root).as_posix(), full))

    for rel_path, full in sorted(entries):
        name = os.fsencode(rel_path)
        if full.is_symlink():
            hasher.update(b"L\0" + name + b"\0")
            hasher.update(os.fsencode(os.readlink(full)) + b"\0")
        elif full.is_dir():
            hasher.update(b"D\0" + name + b"\0")
        else:
            hasher.update(b"F\0" + name + b"\0")
            hasher.update(bytes.fromhex(calculate_file_hash(full, algorithm)))

    return hasher.hexdigest()


def compute_data_checksums(
    data_dirs: Sequence[Path],
    version: int = METADATA_VERSION,
    progress: bool = False
) -> List[str]:
    """Compute one directory digest per data directory, in order."""
    checksums = []

    with tqdm(total=len(data_dirs), desc="Hashing data", unit="dir", disable=not progress) as pbar:
        for data_dir in data_dirs:
            pbar.set_postfix_str(str(data_dir))
            checksums.append(compute_directory(Path(data_dir), version))
            pbar.update(1)

    return checksums


def certificate_checksums(certificates: Iterable[bytes], version: int = METADATA_VERSION) -> List[str]:
    """Compute one digest per encoded signing certificate, keeping signer order."""
    return [compute_bytes(cert, version) for cert in certificates]


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of comparing expected digests with freshly computed ones.

    On mismatch, ``index`` is the first position that differs. When one list
    is a prefix of the other, it is the length of the shorter list and the
    missing side is ``None``.
    """

    matched: bool
    index: Optional[int] = None
    expected: Optional[str] = None
    actual: Optional[str] = None

    def __bool__(self) -> bool:
        return self.matched

    def describe(self) -> str:
        if self.matched:
            return "match"
        return f"mismatch at index {self.index}: expected {self.expected}, got {self.actual}"


def _normalize(digest: str) -> str:
    return digest.strip().lower()


def verify(expected: Sequence[str], actual: Sequence[str]) -> VerificationResult:
    """Compare two digest lists position by position.

    Order matters and lengths must be equal; a reordered or missing entry is
    a mismatch. Hex digests are compared case-insensitively.
    """
    for index, (want, got) in enumerate(zip(expected, actual)):
        if _normalize(want) != _normalize(got):
            return VerificationResult(False, index, want, got)

    if len(expected) != len(actual):
        index = min(len(expected), len(actual))
        want = expected[index] if index < len(expected) else None
        got = actual[index] if index < len(actual) else None
        return VerificationResult(False, index, want, got)

    return VerificationResult(True)


@dataclass(frozen=True)
class IntegrityReport:
    """Verification results for every checksummed part of a backup."""

    source: VerificationResult
    data: VerificationResult
    certificates: VerificationResult

    @property
    def ok(self) -> bool:
        return self.source.matched and self.data.matched and self.certificates.matched

    def failures(self) -> List[str]:
        return [
            f"{name}: {result.describe()}"
            for name, result in (
                ("source", self.source),
                ("data", self.data),
                ("certificates", self.certificates),
            )
            if not result.matched
        ]


def verify_backup(
    metadata: Metadata,
    source_checksum: str,
    data_checksums: Sequence[str],
    cert_checksums: Sequence[str]
) -> IntegrityReport:
    """Check freshly computed checksums against the stored metadata.

    Mismatches are reported, never raised; the caller decides whether the
    restore goes ahead.
    """
    report = IntegrityReport(
        source=verify([metadata.source_sha256_checksum], [source_checksum]),
        data=verify(metadata.data_sha256_checksum, data_checksums),
        certificates=verify(metadata.cert_sha256_checksum, cert_checksums),
    )

    if report.ok:
        logger.debug(f"Integrity check passed for {metadata.package_name}")
    else:
        for failure in report.failures():
            logger.warning(f"Integrity check failed for {metadata.package_name}: {failure}")

    return report

"""Tests for the metadata model."""

import pytest

from appmeta.backup.errors import MetadataInvariantError
from appmeta.backup.metadata import METADATA_VERSION, Metadata, TarType


def _minimal(**overrides):
    values = dict(
        label="Example",
        package_name="com.example.app",
        version_name="1.0",
        version_code=1,
        apk_name="base.apk",
        instruction_set="arm64",
    )
    values.update(overrides)
    return Metadata(**values)


class TestMetadata:
    """Test metadata defaults and invariants."""

    def test_defaults(self):
        """Test that list fields default to empty lists."""
        metadata = _minimal()

        assert metadata.data_dirs == []
        assert metadata.split_configs == []
        assert metadata.split_names == []
        assert metadata.cert_sha256_checksum == []
        assert metadata.data_sha256_checksum == []
        assert metadata.source_sha256_checksum == ""
        assert metadata.backup_time == 0
        assert metadata.version == METADATA_VERSION
        assert metadata.tar_type == TarType.GZIP
        assert not metadata.is_finalized

    def test_data_checksum_length_mismatch(self):
        """Test that data checksums must match data directories."""
        with pytest.raises(MetadataInvariantError):
            _minimal(data_dirs=["/data/user/0/com.example.app"], data_sha256_checksum=[])

    def test_split_length_mismatch(self):
        """Test that split configs and names must be parallel."""
        with pytest.raises(MetadataInvariantError):
            _minimal(is_split_apk=True, split_configs=["config.en"], split_names=[])

    def test_split_flag_must_match_configs(self):
        """Test that is_split_apk follows split_configs."""
        with pytest.raises(MetadataInvariantError):
            _minimal(is_split_apk=True)

        with pytest.raises(MetadataInvariantError):
            _minimal(split_configs=["config.en"], split_names=["split_config.en.apk"])

    def test_invalid_version(self):
        """Test that the format version starts at 1."""
        with pytest.raises(MetadataInvariantError):
            _minimal(version=0)

    def test_assignment_is_validated(self, sample_metadata):
        """Test that assigning a mismatched list is rejected."""
        with pytest.raises(MetadataInvariantError):
            sample_metadata.data_sha256_checksum = ["cc" * 32]


class TestFinalize:
    """Test recording payload checksums and completion time."""

    def test_finalize(self):
        """Test finalizing fresh metadata."""
        metadata = _minimal(data_dirs=["/a", "/b"], data_sha256_checksum=["", ""])

        metadata.finalize("ab" * 32, ["cd" * 32, "ef" * 32], backup_time=1700000000)

        assert metadata.source_sha256_checksum == "ab" * 32
        assert metadata.data_sha256_checksum == ["cd" * 32, "ef" * 32]
        assert metadata.backup_time == 1700000000
        assert metadata.is_finalized

    def test_finalize_uses_current_time(self):
        """Test that the completion time defaults to now."""
        metadata = _minimal()

        metadata.finalize("ab" * 32, [])

        assert metadata.backup_time > 0

    def test_rejected_finalize_leaves_metadata_untouched(self):
        """Test that a wrong checksum count changes nothing."""
        metadata = _minimal(data_dirs=["/a", "/b"], data_sha256_checksum=["", ""])

        with pytest.raises(MetadataInvariantError):
            metadata.finalize("ab" * 32, ["cd" * 32], backup_time=1700000000)

        assert metadata.source_sha256_checksum == ""
        assert metadata.data_sha256_checksum == ["", ""]
        assert metadata.backup_time == 0

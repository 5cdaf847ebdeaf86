"""Shared fixtures for metadata tests."""

import pytest

from appmeta.backup.builder import PackageFacts
from appmeta.backup.flags import BackupFlags
from appmeta.backup.metadata import Metadata, TarType


@pytest.fixture
def sample_metadata():
    """A finalized metadata instance with every field set."""
    return Metadata(
        label="Example",
        package_name="com.example.app",
        version_name="1.2.3",
        version_code=123,
        data_dirs=["/data/user/0/com.example.app", "/data/user_de/0/com.example.app"],
        is_system=False,
        is_split_apk=True,
        split_configs=["config.en", "config.hi"],
        split_names=["split_config.en.apk", "split_config.hi.apk"],
        has_rules=True,
        backup_time=1640995200,
        cert_sha256_checksum=["aa" * 32],
        source_sha256_checksum="bb" * 32,
        data_sha256_checksum=["cc" * 32, "dd" * 32],
        mode=0,
        version=1,
        apk_name="base.apk",
        instruction_set="arm64",
        flags=BackupFlags(0b10011),
        user_handle=0,
        tar_type=TarType.GZIP,
        key_store=False,
    )


@pytest.fixture
def split_package_facts():
    """Package facts for a split APK with two data directories."""
    return PackageFacts(
        package_name="com.example.app",
        label="Example",
        version_name="1.2.3",
        version_code=123,
        source_dir="/data/app/com.example.app-1/base.apk",
        data_dirs=["/data/user/0/com.example.app", "/data/user_de/0/com.example.app"],
        external_data_dirs=["/storage/emulated/0/Android/data/com.example.app"],
        obb_media_dirs=["/storage/emulated/0/Android/obb/com.example.app"],
        split_configs=["config.en", "config.hi"],
        split_source_dirs=[
            "/data/app/com.example.app-1/split_config.en.apk",
            "/data/app/com.example.app-1/split_config.hi.apk",
        ],
        signing_certificates=[b"certificate-one", b"certificate-two"],
        instruction_set="arm64",
        is_system=False,
        has_key_store=True,
    )

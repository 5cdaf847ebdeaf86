"""Tests for the metadata wire format."""

import json

import pytest

from appmeta.backup.codec import FIELDS, deserialize, serialize, to_document
from appmeta.backup.errors import EmptyMetadataError, MetadataFormatError, MetadataNotSetError
from appmeta.backup.flags import BackupFlags
from appmeta.backup.metadata import TarType


def _document(metadata):
    return json.loads(serialize(metadata))


class TestSerialize:
    """Test writing metadata documents."""

    def test_keys_follow_field_table(self, sample_metadata):
        """Test that every field is written under its wire key."""
        document = _document(sample_metadata)

        assert list(document) == [field.key for field in FIELDS]

    def test_value_encoding(self, sample_metadata):
        """Test how values are encoded."""
        document = _document(sample_metadata)

        assert document["package_name"] == "com.example.app"
        assert document["version_code"] == 123
        assert document["is_split_apk"] is True
        assert document["split_configs"] == ["config.en", "config.hi"]
        assert document["flags"] == 0b10011
        assert document["tar_type"] == "z"
        assert document["data_sha256_checksum"] == ["cc" * 32, "dd" * 32]

    def test_empty_lists_are_written(self, sample_metadata):
        """Test that empty lists are present, not omitted."""
        metadata = sample_metadata.model_copy(update={"data_dirs": [], "data_sha256_checksum": []})
        document = _document(metadata)

        assert document["data_dirs"] == []
        assert document["data_sha256_checksum"] == []

    def test_unset_metadata(self):
        """Test that serializing nothing is a programmer error."""
        with pytest.raises(MetadataNotSetError):
            serialize(None)


class TestDeserialize:
    """Test reading metadata documents."""

    def test_round_trip(self, sample_metadata):
        """Test that a document reads back to equal metadata."""
        assert deserialize(serialize(sample_metadata)) == sample_metadata

    def test_round_trip_unfinalized(self, sample_metadata):
        """Test round trip of metadata with empty checksums."""
        sample_metadata.source_sha256_checksum = ""
        sample_metadata.data_sha256_checksum = ["", ""]
        sample_metadata.backup_time = 0
        sample_metadata.tar_type = TarType.PLAIN

        assert deserialize(serialize(sample_metadata)) == sample_metadata

    def test_accepts_text(self, sample_metadata):
        """Test that a decoded string is accepted as well as bytes."""
        metadata = deserialize(serialize(sample_metadata).decode("utf-8"))

        assert metadata.package_name == "com.example.app"
        assert metadata.flags == BackupFlags(0b10011)

    @pytest.mark.parametrize("data", [b"", b"   ", b"\n\t \r\n", ""])
    def test_empty_input(self, data):
        """Test that empty input has its own error."""
        with pytest.raises(EmptyMetadataError):
            deserialize(data)

    def test_empty_input_is_not_format_error(self):
        """Test that empty input is distinguishable from a bad document."""
        with pytest.raises(EmptyMetadataError) as exc_info:
            deserialize(b"  ")

        assert not isinstance(exc_info.value, MetadataFormatError)

    @pytest.mark.parametrize("key", [field.key for field in FIELDS])
    def test_missing_field(self, sample_metadata, key):
        """Test that each field is required."""
        document = to_document(sample_metadata)
        del document[key]

        with pytest.raises(MetadataFormatError) as exc_info:
            deserialize(json.dumps(document))

        assert exc_info.value.field == key
        assert key in str(exc_info.value)

    @pytest.mark.parametrize(
        "key, value",
        [
            ("label", 1),
            ("version_code", "123"),
            ("version_code", 1.5),
            ("is_system", 0),
            ("backup_time", True),
            ("data_dirs", "/data/user/0/com.example.app"),
            ("split_names", ["split_config.en.apk", 2]),
            ("flags", "19"),
            ("tar_type", "xz"),
            ("tar_type", None),
            ("key_store", "false"),
        ],
    )
    def test_type_mismatch(self, sample_metadata, key, value):
        """Test that a mistyped field is reported by key."""
        document = to_document(sample_metadata)
        document[key] = value

        with pytest.raises(MetadataFormatError) as exc_info:
            deserialize(json.dumps(document))

        assert exc_info.value.field == key

    def test_unknown_fields_ignored(self, sample_metadata):
        """Test that fields from newer minor versions are skipped."""
        document = to_document(sample_metadata)
        document["future_field"] = {"nested": [1, 2, 3]}

        assert deserialize(json.dumps(document)) == sample_metadata

    def test_inconsistent_lists(self, sample_metadata):
        """Test that a document breaking list invariants is rejected."""
        document = to_document(sample_metadata)
        document["data_sha256_checksum"] = ["cc" * 32]

        with pytest.raises(MetadataFormatError):
            deserialize(json.dumps(document))

    @pytest.mark.parametrize("data", [b"{", b"[]", b"\"text\"", b"\xff\xfe"])
    def test_malformed_document(self, data):
        """Test that malformed documents raise a format error."""
        with pytest.raises(MetadataFormatError):
            deserialize(data)

    def test_original_document(self):
        """Test reading a document as written by the Android application."""
        data = (
            b'{"label":"Notes","package_name":"org.example.notes","version_name":"2.0",'
            b'"version_code":20,"data_dirs":["/data/user/0/org.example.notes"],'
            b'"is_system":false,"is_split_apk":false,"split_configs":[],"split_names":[],'
            b'"has_rules":false,"backup_time":1601900000000,"cert_sha256_checksum":["0a1b"],'
            b'"source_sha256_checksum":"2c3d","data_sha256_checksum":["4e5f"],"mode":0,'
            b'"version":1,"apk_name":"base.apk","instruction_set":"arm64","flags":3,'
            b'"user_handle":0,"tar_type":"z","key_store":false}'
        )

        metadata = deserialize(data)

        assert metadata.package_name == "org.example.notes"
        assert metadata.data_dirs == ["/data/user/0/org.example.notes"]
        assert metadata.flags.backup_source
        assert metadata.flags.backup_data
        assert metadata.tar_type == TarType.GZIP

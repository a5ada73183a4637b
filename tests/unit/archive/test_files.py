from __future__ import annotations

import pytest

from tests.conftest import (
    IMAGE_UUID,
    JPEG_BYTES,
    MISSING_UUID,
    PDF_BYTES,
    PNG_BYTES,
    build_zip,
)
from yojimbo_import.archive.files import (
    FileIndex,
    FileResolver,
    content_type_for,
    sniff_kind,
)
from yojimbo_import.archive.reader import ArchiveReader


@pytest.mark.parametrize(
    "data,kind",
    [
        (PDF_BYTES, "pdf"),
        (JPEG_BYTES, "jpg"),
        (PNG_BYTES, "png"),
        (b"GIF89a\x01\x00", "gif"),
        (b"II*\x00\x08\x00\x00\x00", "tiff"),
        (b"MM\x00*\x00\x00\x00\x08", "tiff"),
        (b"BM\x36\x00\x00\x00", "bmp"),
        (b"\x00\x00\x00\x0cjP  ", "png"),
        (b"", "png"),
    ],
)
def test_sniff_kind(data, kind):
    assert sniff_kind(data) == kind


@pytest.mark.parametrize(
    "filename,content_type",
    [
        ("Scan.jpg", "image/jpeg"),
        ("Scan.JPEG", "image/jpeg"),
        ("Scan.tiff", "image/tiff"),
        ("Manual.pdf", "application/pdf"),
        ("Page.webarchive", "application/x-webarchive"),
        ("noext", "application/octet-stream"),
    ],
)
def test_content_type_for(filename, content_type):
    assert content_type_for(filename) == content_type


class TestFileIndex:
    def test_indexes_exact_uuid_names_only(self):
        lower = IMAGE_UUID.lower()
        index = FileIndex.build(
            [
                f"Backup/_EXTERNAL_DATA/{lower}",
                f"Backup/_EXTERNAL_DATA/{MISSING_UUID}.png",
                "Backup/Database.sqlite",
                "Backup/not-a-uuid",
            ]
        )
        assert len(index) == 1
        assert index[IMAGE_UUID] == f"Backup/_EXTERNAL_DATA/{lower}"
        assert MISSING_UUID not in index

    def test_lookup_is_case_insensitive(self):
        index = FileIndex.build([f"x/{IMAGE_UUID}"])
        assert IMAGE_UUID.lower() in index
        assert index.get(IMAGE_UUID.lower()) == f"x/{IMAGE_UUID}"


class TestFileResolver:
    @pytest.fixture()
    def resolver(self):
        data = build_zip(
            {
                f"Backup/_EXTERNAL_DATA/{IMAGE_UUID}": PNG_BYTES,
                "Backup/_EXTERNAL_DATA/AAAAAAAA-BBBB-CCCC-DDDD-EEEEEEEEEEEE": b"",
            }
        )
        reader = ArchiveReader.open(data)
        yield FileResolver(reader, FileIndex.build(reader.list_members()))
        reader.close()

    def test_resolves_and_sniffs(self, resolver):
        resolved = resolver.resolve(IMAGE_UUID)
        assert resolved is not None
        assert resolved.data == PNG_BYTES
        assert resolved.kind == "png"
        assert resolved.filename_for("Scan") == "Scan.png"
        assert resolved.content_type == "image/png"

    def test_dangling_reference(self, resolver):
        assert resolver.resolve(MISSING_UUID) is None

    def test_empty_member_is_not_a_payload(self, resolver):
        assert resolver.resolve("AAAAAAAA-BBBB-CCCC-DDDD-EEEEEEEEEEEE") is None

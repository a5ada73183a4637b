from __future__ import annotations

import io
import sqlite3
import zipfile
from pathlib import Path
from typing import Any

import pytest

DB_PATH = "Yojimbo Backup/Database.sqlite"
EXTERNAL_DIR = "Yojimbo Backup/_EXTERNAL_DATA"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24
PDF_BYTES = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<<>>\nendobj\n"
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + b"\x00" * 16

IMAGE_UUID = "6AD254BE-37AD-47A2-8F68-C9050F50B132"
PDF_UUID = "0F1E2D3C-4B5A-6978-8796-A5B4C3D2E1F0"
MISSING_UUID = "11111111-2222-3333-4444-555555555555"

# 2024-01-01T00:00:00Z in Core Data reference-date seconds
TS_2024 = 725_760_000.0
TS_2025 = 757_382_400.0

_ITEM_COLUMNS = {
    "Z_ENT": "INTEGER",
    "Z_OPT": "INTEGER",
    "ZENCRYPTED": "INTEGER",
    "ZFLAGGED": "INTEGER",
    "ZINTRASH": "INTEGER",
    "ZLABEL": "INTEGER",
    "ZBLOB": "INTEGER",
    "ZDATECREATED": "TIMESTAMP",
    "ZDATEMODIFIED": "TIMESTAMP",
    "ZNAME": "VARCHAR",
    "ZURLSTRING": "VARCHAR",
    "ZSOURCEURLSTRING": "VARCHAR",
    "ZLOCATION": "VARCHAR",
    "ZACCOUNT": "VARCHAR",
    "ZSERIALNUMBER": "VARCHAR",
    "ZOWNERNAME": "VARCHAR",
    "ZOWNEREMAIL": "VARCHAR",
    "ZORGANIZATION": "VARCHAR",
}

# builder keyword -> ZITEM column
_ITEM_FIELDS = {
    "ent": "Z_ENT",
    "encrypted": "ZENCRYPTED",
    "flagged": "ZFLAGGED",
    "trashed": "ZINTRASH",
    "label": "ZLABEL",
    "created": "ZDATECREATED",
    "modified": "ZDATEMODIFIED",
    "name": "ZNAME",
    "url": "ZURLSTRING",
    "source_url": "ZSOURCEURLSTRING",
    "location": "ZLOCATION",
    "account": "ZACCOUNT",
    "serial_number": "ZSERIALNUMBER",
    "owner_name": "ZOWNERNAME",
    "owner_email": "ZOWNEREMAIL",
    "organization": "ZORGANIZATION",
}


def file_ref_blob(uuid: str) -> bytes:
    """``0x02 + "<UUID>" + 0x00``, as Yojimbo stores attachments."""
    return b"\x02" + uuid.encode("ascii") + b"\x00"


def bplist_blob(*strings: str) -> bytes:
    """A fake NSKeyedArchiver blob: each string is framed by binary bytes."""
    body = b"".join(b"\x81\x10\x00" + s.encode("ascii") for s in strings)
    return b"\x01bplist00\xd4\x01\x02" + body + b"\x00\x08\x11\x1a"


def build_database(
    items: list[dict[str, Any]],
    labels: list[dict[str, Any]] | None = None,
    *,
    omit_columns: tuple[str, ...] = (),
    with_string_reps: bool = True,
    with_labels_table: bool = True,
) -> bytes:
    """Build a Yojimbo-shaped SQLite file and return its bytes.

    Each item dict uses the keys of ``_ITEM_FIELDS`` plus ``blob`` (raw
    ``ZBYTES``) and ``string_rep`` (``ZBLOBSTRINGREP.ZSTRING``).
    """
    conn = sqlite3.connect(":memory:")
    columns = {k: v for k, v in _ITEM_COLUMNS.items() if k not in omit_columns}
    col_ddl = ", ".join(f"{name} {kind}" for name, kind in columns.items())
    conn.execute(f"CREATE TABLE ZITEM (Z_PK INTEGER PRIMARY KEY, {col_ddl})")
    conn.execute("CREATE TABLE ZBLOB (Z_PK INTEGER PRIMARY KEY, ZBYTES BLOB)")
    if with_string_reps:
        conn.execute(
            "CREATE TABLE ZBLOBSTRINGREP "
            "(Z_PK INTEGER PRIMARY KEY, ZBLOB INTEGER, ZSTRING VARCHAR)"
        )
    if with_labels_table:
        conn.execute(
            "CREATE TABLE ZLABEL "
            "(Z_PK INTEGER PRIMARY KEY, ZNAME VARCHAR, ZDISPLAYINDEX INTEGER)"
        )
        for label in labels or []:
            conn.execute(
                "INSERT INTO ZLABEL (Z_PK, ZNAME, ZDISPLAYINDEX) VALUES (?, ?, ?)",
                (label["pk"], label["name"], label.get("display_index", 0)),
            )

    for pk, item in enumerate(items, start=1):
        values: dict[str, Any] = {"Z_PK": pk}
        for key, col in _ITEM_FIELDS.items():
            if key in item and col in columns:
                values[col] = item[key]
        if "blob" in item or "string_rep" in item:
            conn.execute(
                "INSERT INTO ZBLOB (Z_PK, ZBYTES) VALUES (?, ?)",
                (pk, item.get("blob")),
            )
            if "ZBLOB" in columns:
                values["ZBLOB"] = pk
            if with_string_reps and item.get("string_rep") is not None:
                conn.execute(
                    "INSERT INTO ZBLOBSTRINGREP (ZBLOB, ZSTRING) VALUES (?, ?)",
                    (pk, item["string_rep"]),
                )
        cols = ", ".join(values)
        marks = ", ".join("?" for _ in values)
        conn.execute(
            f"INSERT INTO ZITEM ({cols}) VALUES ({marks})", tuple(values.values())
        )

    conn.commit()
    data = conn.serialize()
    conn.close()
    return data


def build_zip(files: dict[str, bytes | str]) -> bytes:
    """Create an in-memory zip archive from a dict of {path: content}."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in files.items():
            if isinstance(data, str):
                data = data.encode("utf-8")
            zf.writestr(name, data)
    return buf.getvalue()


def build_archive(
    items: list[dict[str, Any]],
    labels: list[dict[str, Any]] | None = None,
    attachments: dict[str, bytes] | None = None,
    **db_options: Any,
) -> bytes:
    """A complete backup ZIP: database plus UUID-named attachments."""
    files: dict[str, bytes | str] = {
        DB_PATH: build_database(items, labels, **db_options),
    }
    for uuid, data in (attachments or {}).items():
        files[f"{EXTERNAL_DIR}/{uuid}"] = data
    return build_zip(files)


@pytest.fixture()
def sample_archive() -> bytes:
    """Note, bookmark and image rows, one label, no encryption."""
    return build_archive(
        items=[
            {
                "name": "Shopping",
                "ent": 18,
                "string_rep": "Hello",
                "label": 1,
                "created": TS_2024,
                "modified": TS_2024,
            },
            {
                "name": "Example",
                "ent": 23,
                "url": "https://example.com",
                "created": TS_2024,
                "modified": TS_2024 - 10,
            },
            {
                "name": "Scan",
                "ent": 17,
                "blob": file_ref_blob(IMAGE_UUID),
                "created": TS_2024,
                "modified": TS_2024 - 20,
            },
        ],
        labels=[{"pk": 1, "name": "Personal", "display_index": 0}],
        attachments={IMAGE_UUID: PNG_BYTES},
    )


@pytest.fixture()
def sample_archive_path(tmp_path: Path, sample_archive: bytes) -> Path:
    path = tmp_path / "Yojimbo 2026-02-14.zip"
    path.write_bytes(sample_archive)
    return path

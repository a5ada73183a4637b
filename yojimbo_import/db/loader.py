"""Locate and open the embedded ``Database.sqlite`` member."""

from __future__ import annotations

import logging
import sqlite3

from sqlalchemy import Engine, create_engine, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from yojimbo_import.archive.reader import ArchiveReader, is_resource_fork
from yojimbo_import.core.exceptions import DatabaseCorrupt, DatabaseNotFoundError

logger = logging.getLogger(__name__)

DATABASE_SUFFIX = "Database.sqlite"

ITEM_TABLE = "ZITEM"

# Bytes 18/19 of the SQLite header are the file format write/read versions;
# 2 means WAL.  An in-memory database cannot open a WAL journal, so the
# copy handed to sqlite is flipped to rollback-journal mode.
_WAL_VERSION = b"\x02\x02"
_LEGACY_VERSION = b"\x01\x01"
_HEADER_MAGIC = b"SQLite format 3\x00"


def find_database(reader: ArchiveReader, suffix: str = DATABASE_SUFFIX) -> str:
    """Return the member path of the embedded database.

    When several members match, the last one in archive order wins.
    Raises :class:`DatabaseNotFoundError` when none does.
    """
    found: str | None = None
    for path in reader.list_members():
        if path.endswith(suffix) and not is_resource_fork(path):
            found = path
    if found is None:
        raise DatabaseNotFoundError(suffix)
    logger.info("Found database member %s", found)
    return found


def _connect(data: bytes) -> sqlite3.Connection:
    if data.startswith(_HEADER_MAGIC) and data[18:20] == _WAL_VERSION:
        data = data[:18] + _LEGACY_VERSION + data[20:]
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    try:
        conn.deserialize(data)
        conn.execute("PRAGMA query_only = ON")
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def load(data: bytes) -> Engine:
    """Open *data* as a read-only, in-memory SQLite database.

    Raises :class:`DatabaseCorrupt` when sqlite rejects the bytes or the
    item table is missing.
    """
    try:
        conn = _connect(data)
    except sqlite3.Error as exc:
        raise DatabaseCorrupt(str(exc)) from exc

    engine = create_engine(
        "sqlite://",
        creator=lambda: conn,
        poolclass=StaticPool,
        echo=False,
    )
    try:
        tables = inspect(engine).get_table_names()
    except SQLAlchemyError as exc:
        engine.dispose()
        raise DatabaseCorrupt(str(getattr(exc, "orig", None) or exc)) from exc

    if ITEM_TABLE not in tables:
        engine.dispose()
        raise DatabaseCorrupt(f"missing {ITEM_TABLE} table")

    logger.info("Opened database (%d bytes, %d tables)", len(data), len(tables))
    return engine

"""Queries against the Core Data schema of a Yojimbo database.

Core Data declares its date columns as ``TIMESTAMP`` although they hold
floats, so tables are described with untyped ``column()`` constructs
instead of reflected ``Table`` objects: no result processing is applied
and values come back exactly as sqlite stores them.  Only columns that
exist in the file are selected; the rest read as ``NULL``.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, column, inspect, null, select, table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import ColumnElement

from yojimbo_import.core.exceptions import DatabaseCorrupt
from yojimbo_import.core.types import LabelRecord, RawItemRow
from yojimbo_import.db.loader import ITEM_TABLE

logger = logging.getLogger(__name__)

BLOB_TABLE = "ZBLOB"
STRING_REP_TABLE = "ZBLOBSTRINGREP"
LABEL_TABLE = "ZLABEL"

# RawItemRow field -> ZITEM column
ITEM_COLUMNS: dict[str, str] = {
    "pk": "Z_PK",
    "entity_code": "Z_ENT",
    "name": "ZNAME",
    "encrypted": "ZENCRYPTED",
    "flagged": "ZFLAGGED",
    "trashed": "ZINTRASH",
    "label_pk": "ZLABEL",
    "created": "ZDATECREATED",
    "modified": "ZDATEMODIFIED",
    "url": "ZURLSTRING",
    "source_url": "ZSOURCEURLSTRING",
    "location": "ZLOCATION",
    "account": "ZACCOUNT",
    "serial_number": "ZSERIALNUMBER",
    "owner_name": "ZOWNERNAME",
    "owner_email": "ZOWNEREMAIL",
    "organization": "ZORGANIZATION",
}

_TEXT_FIELDS = (
    "name",
    "url",
    "source_url",
    "location",
    "account",
    "serial_number",
    "owner_name",
    "owner_email",
    "organization",
    "string_rep",
)


def _columns(engine: Engine) -> dict[str, set[str]]:
    insp = inspect(engine)
    return {
        name: {c["name"] for c in insp.get_columns(name)}
        for name in insp.get_table_names()
    }


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _int(value: Any) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _number(value: Any) -> float | None:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _flag(value: Any) -> bool:
    return _int(value) == 1


def _to_row(values: dict[str, Any]) -> RawItemRow:
    blob = values.get("blob")
    if blob is not None and not isinstance(blob, bytes):
        blob = bytes(blob) if isinstance(blob, memoryview) else None
    return RawItemRow(
        pk=_int(values["pk"]) or 0,
        entity_code=_int(values.get("entity_code")),
        encrypted=_flag(values.get("encrypted")),
        flagged=_flag(values.get("flagged")),
        trashed=_flag(values.get("trashed")),
        label_pk=_int(values.get("label_pk")),
        created=_number(values.get("created")),
        modified=_number(values.get("modified")),
        blob=blob,
        **{name: _text(values.get(name)) for name in _TEXT_FIELDS},
    )


def read_items(engine: Engine) -> list[RawItemRow]:
    """Read every ``ZITEM`` row joined with its blob, newest first."""
    try:
        schema = _columns(engine)
        stmt = _items_statement(schema)
        with engine.connect() as conn:
            rows = [_to_row(dict(m)) for m in conn.execute(stmt).mappings()]
    except SQLAlchemyError as exc:
        raise DatabaseCorrupt(str(getattr(exc, "orig", None) or exc)) from exc
    logger.info("Read %d item rows", len(rows))
    return rows


def _items_statement(schema: dict[str, set[str]]):
    item_cols = schema[ITEM_TABLE]
    item = table(ITEM_TABLE, *(column(c) for c in item_cols))

    selected: list[ColumnElement] = []
    for field, col in ITEM_COLUMNS.items():
        if col in item_cols:
            selected.append(item.c[col].label(field))
        else:
            selected.append(null().label(field))

    source = item
    blob_cols = schema.get(BLOB_TABLE, set())
    has_blob = "ZBLOB" in item_cols and {"Z_PK", "ZBYTES"} <= blob_cols
    if has_blob:
        blob = table(BLOB_TABLE, column("Z_PK"), column("ZBYTES"))
        source = source.outerjoin(blob, item.c.ZBLOB == blob.c.Z_PK)
        selected.append(blob.c.ZBYTES.label("blob"))

        rep_cols = schema.get(STRING_REP_TABLE, set())
        if {"ZBLOB", "ZSTRING"} <= rep_cols:
            rep = table(STRING_REP_TABLE, column("ZBLOB"), column("ZSTRING"))
            source = source.outerjoin(rep, rep.c.ZBLOB == blob.c.Z_PK)
            selected.append(rep.c.ZSTRING.label("string_rep"))
        else:
            selected.append(null().label("string_rep"))
    else:
        logger.warning("No usable %s table; item content unavailable", BLOB_TABLE)
        selected.append(null().label("blob"))
        selected.append(null().label("string_rep"))

    stmt = select(*selected).select_from(source)
    if "ZDATEMODIFIED" in item_cols:
        stmt = stmt.order_by(item.c.ZDATEMODIFIED.desc(), item.c.Z_PK)
    elif "Z_PK" in item_cols:
        stmt = stmt.order_by(item.c.Z_PK)
    return stmt


def read_labels(engine: Engine) -> list[tuple[int, LabelRecord]]:
    """Read ``(Z_PK, LabelRecord)`` pairs ordered by display index.

    A database without a label table has no labels.  Rows with an empty
    name are skipped.
    """
    try:
        schema = _columns(engine)
        cols = schema.get(LABEL_TABLE)
        if not cols or not {"Z_PK", "ZNAME"} <= cols:
            return []
        order = "ZDISPLAYINDEX" if "ZDISPLAYINDEX" in cols else "Z_PK"
        label = table(LABEL_TABLE, *(column(c) for c in cols))
        index_col = (
            label.c.ZDISPLAYINDEX if "ZDISPLAYINDEX" in cols else null()
        ).label("display_index")
        stmt = select(
            label.c.Z_PK.label("pk"), label.c.ZNAME.label("name"), index_col
        ).order_by(label.c[order])
        with engine.connect() as conn:
            raw = [dict(m) for m in conn.execute(stmt).mappings()]
    except SQLAlchemyError as exc:
        raise DatabaseCorrupt(str(getattr(exc, "orig", None) or exc)) from exc

    labels: list[tuple[int, LabelRecord]] = []
    for values in raw:
        pk = _int(values["pk"])
        name = _text(values["name"])
        if pk is None or not name:
            continue
        display_index = _int(values["display_index"]) or 0
        labels.append((pk, LabelRecord(name=name, display_index=display_index)))
    return labels

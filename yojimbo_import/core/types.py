from __future__ import annotations

import base64
import enum
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class ItemType(enum.StrEnum):
    NOTE = "note"
    BOOKMARK = "bookmark"
    PASSWORD = "password"
    SERIAL_NUMBER = "serial_number"
    IMAGE = "image"
    PDF = "pdf"

    @property
    def carries_payload(self) -> bool:
        return self in (ItemType.IMAGE, ItemType.PDF)


HINT_FIELDS: tuple[str, ...] = (
    "url",
    "source_url",
    "location",
    "account",
    "serial_number",
    "owner_name",
    "owner_email",
    "organization",
)


@dataclass(frozen=True)
class RawItemRow:
    """One row of the source ``ZITEM`` table joined with its blob.

    Plain value object flowing from the database layer to the record
    extractor.  Every column except the primary key may be ``None``.
    """

    pk: int
    entity_code: int | None = None
    name: str | None = None
    encrypted: bool = False
    flagged: bool = False
    trashed: bool = False
    label_pk: int | None = None
    created: float | None = None
    modified: float | None = None
    url: str | None = None
    source_url: str | None = None
    location: str | None = None
    account: str | None = None
    serial_number: str | None = None
    owner_name: str | None = None
    owner_email: str | None = None
    organization: str | None = None
    blob: bytes | None = None
    string_rep: str | None = None

    def hints(self) -> dict[str, str | None]:
        """Return the type-hint columns, blank strings folded to ``None``."""
        return {name: getattr(self, name) or None for name in HINT_FIELDS}


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class DecodedRecord(_FrozenModel):
    """Normalised output unit, one per non-encrypted source row."""

    name: str
    type: ItemType
    content: str = ""
    is_flagged: bool = False
    is_trashed: bool = False
    is_encrypted: bool = False
    created_at: datetime
    updated_at: datetime
    label_name: str | None = None

    url: str | None = None
    source_url: str | None = None
    location: str | None = None
    account: str | None = None
    serial_number: str | None = None
    owner_name: str | None = None
    owner_email: str | None = None
    organization: str | None = None

    file_data: bytes | None = None
    file_name: str | None = None
    content_type: str | None = None

    @field_serializer("file_data", when_used="json-unless-none")
    def serialize_file_data(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")


class LabelRecord(_FrozenModel):
    name: str
    display_index: int = 0


class DecodeSummary(_FrozenModel):
    total: int = 0
    imported: int = 0
    encrypted: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_records(
        cls, records: list[DecodedRecord], encrypted: int
    ) -> DecodeSummary:
        histogram = Counter(str(r.type) for r in records)
        return cls(
            total=len(records) + encrypted,
            imported=len(records),
            encrypted=encrypted,
            by_type=dict(histogram),
        )


class DecodeResult(_FrozenModel):
    """Result returned from :func:`yojimbo_import.decode`."""

    records: list[DecodedRecord] = Field(default_factory=list)
    labels: list[LabelRecord] = Field(default_factory=list)
    summary: DecodeSummary = Field(default_factory=DecodeSummary)

    def batches(
        self, size: int, *, include_payloads: bool = True
    ) -> Iterator[dict[str, Any]]:
        """Yield ``{"items": [...], "labels": [...]}`` chunks of *size* records.

        Labels travel with the first chunk only, so a consumer can create
        them before any record referencing them.  An archive with labels
        but no records still yields one chunk.
        """
        if size < 1:
            raise ValueError(f"Batch size must be positive, got {size}")

        exclude = None if include_payloads else {"file_data"}
        labels = [label.model_dump(mode="json") for label in self.labels]
        if not self.records:
            if labels:
                yield {"items": [], "labels": labels}
            return

        for start in range(0, len(self.records), size):
            chunk = self.records[start : start + size]
            yield {
                "items": [r.model_dump(mode="json", exclude=exclude) for r in chunk],
                "labels": labels if start == 0 else [],
            }

"""Row -> :class:`DecodedRecord` assembly."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import UTC, datetime

from yojimbo_import.archive.files import FileResolver, ResolvedFile
from yojimbo_import.blob.classifier import classify
from yojimbo_import.config import DecoderConfig
from yojimbo_import.core.types import DecodedRecord, RawItemRow
from yojimbo_import.db.labels import LabelIndex
from yojimbo_import.extract.inference import infer_type

logger = logging.getLogger(__name__)

# Core Data reference date: 2001-01-01 00:00:00 UTC
APPLE_EPOCH_OFFSET = 978_307_200

UNTITLED = "Untitled"


def convert_timestamp(ts: float | None, now: datetime) -> datetime:
    """Convert a Core Data timestamp to an aware UTC datetime.

    ``None`` and ``0`` mean "unset" and map to *now*, as does any value
    outside the platform's datetime range.
    """
    if not ts:
        return now
    try:
        return datetime.fromtimestamp(ts + APPLE_EPOCH_OFFSET, tz=UTC)
    except (OverflowError, OSError, ValueError):
        logger.warning("Unusable timestamp %r, using decode time", ts)
        return now


@dataclass(frozen=True)
class ExtractionResult:
    records: list[DecodedRecord]
    encrypted: int

    @property
    def total(self) -> int:
        return len(self.records) + self.encrypted


class RecordExtractor:
    """Turns :class:`RawItemRow` values into :class:`DecodedRecord` values.

    Holds only read-only state (the label index, the file resolver and
    the decode-time clock), so :meth:`extract_row` can run on several
    threads at once.
    """

    def __init__(
        self,
        labels: LabelIndex,
        resolver: FileResolver,
        config: DecoderConfig | None = None,
        now: datetime | None = None,
    ) -> None:
        self._labels = labels
        self._resolver = resolver
        self._config = config or DecoderConfig()
        self._now = now or datetime.now(UTC)

    def extract_row(self, row: RawItemRow) -> DecodedRecord | None:
        """Decode one row.  Returns ``None`` for encrypted rows."""
        if row.encrypted:
            return None

        blob = classify(
            row.blob,
            min_blob_length=self._config.min_blob_length,
            min_run_length=self._config.min_run_length,
        )
        resolved: ResolvedFile | None = None
        if blob.uuid is not None:
            resolved = self._resolver.resolve(blob.uuid)
            if resolved is None:
                logger.debug("Row %s: %s not in archive", row.pk, blob.uuid)

        hints = row.hints()
        item_type = infer_type(
            row.entity_code, hints, resolved.kind if resolved else None
        )
        name = row.name or UNTITLED

        content = ""
        if not blob.is_file_reference:
            content = row.string_rep or blob.content

        payload: dict[str, object] = {}
        if resolved is not None:
            file_name = resolved.filename_for(name)
            payload = {
                "file_data": resolved.data,
                "file_name": file_name,
                "content_type": resolved.content_type,
            }

        return DecodedRecord(
            name=name,
            type=item_type,
            content=content,
            is_flagged=row.flagged,
            is_trashed=row.trashed,
            is_encrypted=False,
            created_at=convert_timestamp(row.created, self._now),
            updated_at=convert_timestamp(row.modified, self._now),
            label_name=self._labels.name_for(row.label_pk),
            **hints,
            **payload,
        )

    def extract(self, rows: Sequence[RawItemRow]) -> ExtractionResult:
        """Decode all *rows*, preserving their order in the output."""
        workers = self._config.max_workers
        if workers > 1 and len(rows) > 1:
            with ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="yojimbo-row"
            ) as pool:
                outcomes = list(pool.map(self.extract_row, rows))
        else:
            outcomes = [self.extract_row(row) for row in rows]

        records = [r for r in outcomes if r is not None]
        encrypted = len(outcomes) - len(records)
        logger.info(
            "Extracted %d records (%d encrypted skipped)", len(records), encrypted
        )
        return ExtractionResult(records=records, encrypted=encrypted)

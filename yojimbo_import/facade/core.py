from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from yojimbo_import.archive.files import FileIndex, FileResolver
from yojimbo_import.archive.reader import READ_ERRORS, ArchiveReader
from yojimbo_import.config import DecoderConfig
from yojimbo_import.core.exceptions import ArchiveUnreadable, MemberNotFoundError
from yojimbo_import.core.types import DecodeResult, DecodeSummary
from yojimbo_import.db import loader
from yojimbo_import.db.labels import LabelIndex
from yojimbo_import.db.schema import read_items
from yojimbo_import.extract.extractor import RecordExtractor

logger = logging.getLogger(__name__)


class Decoder:
    """Main entry point for decoding a Yojimbo backup archive.

    Usage::

        decoder = Decoder.from_config({"max_workers": 4})
        with open("Yojimbo 2026-02-14.zip", "rb") as f:
            result = decoder.decode(f.read())
        print(result.summary.imported, "of", result.summary.total)

    Only :class:`~yojimbo_import.ArchiveUnreadable` and
    :class:`~yojimbo_import.DatabaseCorrupt` escape :meth:`decode`; every
    per-row problem degrades that row instead.
    """

    def __init__(self, config: DecoderConfig | None = None) -> None:
        self._config = config or DecoderConfig()

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> Decoder:
        """Construct a Decoder from a configuration dict."""
        return cls(DecoderConfig.from_dict(config))

    @property
    def config(self) -> DecoderConfig:
        return self._config

    def decode(self, archive_bytes: bytes) -> DecodeResult:
        """Decode *archive_bytes* into records, labels and a summary."""
        now = datetime.now(UTC)
        with ArchiveReader.open(archive_bytes) as reader:
            db_path = loader.find_database(reader, self._config.database_suffix)
            try:
                db_bytes = reader.read_member(db_path)
            except (MemberNotFoundError, *READ_ERRORS) as exc:
                raise ArchiveUnreadable(f"cannot read {db_path}: {exc}") from exc

            engine = loader.load(db_bytes)
            try:
                labels = LabelIndex.from_engine(engine)
                rows = read_items(engine)
            finally:
                engine.dispose()
            logger.info("Loaded %d labels, %d rows", len(labels), len(rows))

            resolver = FileResolver(reader, FileIndex.build(reader.list_members()))
            extractor = RecordExtractor(labels, resolver, self._config, now=now)
            extracted = extractor.extract(rows)

        summary = DecodeSummary.from_records(extracted.records, extracted.encrypted)
        logger.info(
            "Decode done: %d total, %d imported, %d encrypted",
            summary.total,
            summary.imported,
            summary.encrypted,
        )
        return DecodeResult(
            records=extracted.records,
            labels=labels.labels,
            summary=summary,
        )


def decode(
    archive_bytes: bytes, config: DecoderConfig | None = None
) -> DecodeResult:
    """Decode a Yojimbo backup archive with a one-off :class:`Decoder`."""
    return Decoder(config).decode(archive_bytes)

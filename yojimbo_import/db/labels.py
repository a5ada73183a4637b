from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from sqlalchemy import Engine

from yojimbo_import.core.types import LabelRecord
from yojimbo_import.db.schema import read_labels


class LabelIndex:
    """Primary key -> label lookup, built once per decode run."""

    def __init__(self, entries: Iterable[tuple[int, LabelRecord]] = ()) -> None:
        pairs = list(entries)
        self._labels = tuple(label for _, label in pairs)
        self._by_pk = MappingProxyType({pk: label for pk, label in pairs})

    @classmethod
    def from_engine(cls, engine: Engine) -> LabelIndex:
        return cls(read_labels(engine))

    @property
    def labels(self) -> list[LabelRecord]:
        """Labels in display order."""
        return list(self._labels)

    def name_for(self, pk: int | None) -> str | None:
        """Return the label name for *pk*, or ``None`` if absent or unknown."""
        if pk is None:
            return None
        label = self._by_pk.get(pk)
        return label.name if label else None

    def __len__(self) -> int:
        return len(self._by_pk)

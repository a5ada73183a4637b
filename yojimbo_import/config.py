from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from yojimbo_import.blob.classifier import MIN_BLOB_LENGTH
from yojimbo_import.blob.scrub import MIN_RUN_LENGTH
from yojimbo_import.db.loader import DATABASE_SUFFIX


@dataclass(frozen=True)
class DecoderConfig:
    """Tunables for one :class:`~yojimbo_import.Decoder`.

    ``max_workers`` bounds the thread pool used for per-row extraction;
    ``1`` runs rows sequentially on the calling thread.
    """

    database_suffix: str = DATABASE_SUFFIX
    max_workers: int = 1
    min_blob_length: int = MIN_BLOB_LENGTH
    min_run_length: int = MIN_RUN_LENGTH

    def __post_init__(self) -> None:
        for name in ("max_workers", "min_blob_length", "min_run_length"):
            value = getattr(self, name)
            # bool is an int subclass
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an int, got {value!r}")
        if not isinstance(self.database_suffix, str):
            raise ValueError(
                f"database_suffix must be a str, got {self.database_suffix!r}"
            )
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if not self.database_suffix:
            raise ValueError("database_suffix must not be empty")

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> DecoderConfig:
        """Build a config from a plain dict, rejecting unknown keys.

        Expected shape::

            {"max_workers": 4, "database_suffix": "Database.sqlite"}
        """
        known = {f.name for f in fields(cls)}
        unknown = set(config) - known
        if unknown:
            raise ValueError(
                f"Unknown decoder config keys: {sorted(unknown)}. "
                f"Available: {sorted(known)}"
            )
        return cls(**config)

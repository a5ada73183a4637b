from yojimbo_import.config import DecoderConfig
from yojimbo_import.core.exceptions import (
    ArchiveUnreadable,
    DatabaseCorrupt,
    DatabaseNotFoundError,
    DecodeError,
    NotAZipError,
)
from yojimbo_import.core.types import (
    DecodedRecord,
    DecodeResult,
    DecodeSummary,
    ItemType,
    LabelRecord,
)
from yojimbo_import.facade.core import Decoder, decode

__all__ = [
    "ArchiveUnreadable",
    "DatabaseCorrupt",
    "DatabaseNotFoundError",
    "DecodedRecord",
    "DecodeError",
    "DecodeResult",
    "DecodeSummary",
    "Decoder",
    "DecoderConfig",
    "ItemType",
    "LabelRecord",
    "NotAZipError",
    "decode",
]

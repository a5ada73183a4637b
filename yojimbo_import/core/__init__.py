from yojimbo_import.core.exceptions import (
    ArchiveUnreadable,
    DatabaseCorrupt,
    DatabaseNotFoundError,
    DecodeError,
    MemberNotFoundError,
    NotAZipError,
)
from yojimbo_import.core.types import (
    DecodedRecord,
    DecodeResult,
    DecodeSummary,
    ItemType,
    LabelRecord,
    RawItemRow,
)

__all__ = [
    "ArchiveUnreadable",
    "DatabaseCorrupt",
    "DatabaseNotFoundError",
    "DecodeError",
    "MemberNotFoundError",
    "NotAZipError",
    "DecodedRecord",
    "DecodeResult",
    "DecodeSummary",
    "ItemType",
    "LabelRecord",
    "RawItemRow",
]

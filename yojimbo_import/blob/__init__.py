from yojimbo_import.blob.classifier import (
    BlobClassification,
    BlobKind,
    classify,
    extract_uuid,
)
from yojimbo_import.blob.scrub import is_cocoa_metadata, scrub_text

__all__ = [
    "BlobClassification",
    "BlobKind",
    "classify",
    "extract_uuid",
    "is_cocoa_metadata",
    "scrub_text",
]

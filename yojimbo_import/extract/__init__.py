from yojimbo_import.extract.extractor import (
    APPLE_EPOCH_OFFSET,
    ExtractionResult,
    RecordExtractor,
    convert_timestamp,
)
from yojimbo_import.extract.inference import infer_type

__all__ = [
    "APPLE_EPOCH_OFFSET",
    "ExtractionResult",
    "RecordExtractor",
    "convert_timestamp",
    "infer_type",
]

from yojimbo_import.db.labels import LabelIndex
from yojimbo_import.db.loader import DATABASE_SUFFIX, find_database, load
from yojimbo_import.db.schema import read_items, read_labels

__all__ = [
    "DATABASE_SUFFIX",
    "LabelIndex",
    "find_database",
    "load",
    "read_items",
    "read_labels",
]

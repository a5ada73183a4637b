from __future__ import annotations

import logging
from collections.abc import Mapping

from yojimbo_import.core.types import ItemType

logger = logging.getLogger(__name__)

# Z_ENT values observed in Yojimbo 4 exports.  Informational only: the
# code is stale for items converted between kinds.
ENTITY_CODES: Mapping[int, str] = {
    17: "image",
    18: "note",
    19: "pdf",
    20: "web_archive",
    21: "password",
    22: "serial_number",
    23: "bookmark",
}


def infer_type(
    entity_code: int | None,
    hints: Mapping[str, str | None],
    sniffed_kind: str | None = None,
) -> ItemType:
    """Infer an item's type from its weak signals.

    Priority, strongest first:

    1. a resolved file reference sniffed as PDF -> ``pdf``
    2. any other resolved file reference -> ``image``
    3. URL hint -> ``bookmark``
    4. serial-number hint -> ``serial_number``
    5. location *and* account hints -> ``password``
    6. ``note``

    ``entity_code`` never decides the type on its own; it is only
    compared against the result for diagnostics.
    """
    if sniffed_kind == "pdf":
        inferred = ItemType.PDF
    elif sniffed_kind is not None:
        inferred = ItemType.IMAGE
    elif hints.get("url"):
        inferred = ItemType.BOOKMARK
    elif hints.get("serial_number"):
        inferred = ItemType.SERIAL_NUMBER
    elif hints.get("location") and hints.get("account"):
        inferred = ItemType.PASSWORD
    else:
        inferred = ItemType.NOTE

    nominal = ENTITY_CODES.get(entity_code) if entity_code is not None else None
    if nominal and nominal != "web_archive" and nominal != inferred:
        logger.debug("Z_ENT %s says %s, inferred %s", entity_code, nominal, inferred)
    return inferred

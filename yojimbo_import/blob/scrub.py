"""Text salvage from NSKeyedArchiver binary plists.

This is a heuristic, not a plist parser.  The archive interleaves user
text with Cocoa class names and dictionary keys that are also printable,
so every printable run is collected, known metadata is dropped, and the
longest survivor is taken as the note body.  That holds for the archive
version observed in the wild; a note shorter than an embedded style
string will lose to it.
"""

from __future__ import annotations

import re

MIN_RUN_LENGTH = 5

_WHITESPACE = frozenset(b"\t\n\r")

COCOA_METADATA: frozenset[str] = frozenset(
    {
        "NSKeyedArchiver",
        "NSAttributedString",
        "NSMutableString",
        "NSParagraphStyle",
        "NSMutableParagraphStyle",
        "NSColorSpace",
        "NSDictionary",
        "NSMutableArray",
        "NSMutableData",
        "NSObject",
        "NSStrokeColor",
        "NSStrokeWidth",
        "NSUnderline",
        "NSFont",
        "NSColor",
        "NSBackgroundColor",
        "NSKern",
        "NSSuperScript",
        "NSTextAttachment",
        "NSFileWrapper",
        "NSMutableDictionary",
        "NSURL",
        "NSNumber",
        "$archiver",
        "$version",
        "$objects",
        "$top",
        "NS.string",
        "NS.keys",
        "NS.objects",
        "NSAttributes",
        "NS.bytes",
        "NS.data",
        "NS.base",
    }
)

# Keys are stored inline behind a one-byte length marker that is often
# itself printable, hence the leading sigil in most of these.
METADATA_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (
        r"^[$%&'()*+,\-./0-9:;<=>?@A-Z\[\\\]^_`{|}~]+\[?NS",
        r"^\[?NS[A-Z][a-z]",
        r"^YNS[A-Z]",
        r"^[a-z]{0,3}YNS(Param|Row|Col|Table)",
        r"^VNS(Size|Font|Kern|Color|Link)",
        r"^WNS(Color|Table)",
        r"^XNS(fFlags|Param|RowNum|ColNum)",
        r"^YNS(Param|RowSpan|ColSpan)",
        r"^\]NS(StrokeColor|StrokeWidth|CatalogName)",
        r"^\\NS(ColorSpace|Descriptor|HasWidth)",
        r"^_NS(BackgroundColor|ParagraphStyle)",
        r"^\.IEC 61966",
        r"^X\$version",
    )
)


def is_cocoa_metadata(text: str) -> bool:
    if text in COCOA_METADATA:
        return True
    return any(p.match(text) for p in METADATA_PATTERNS)


def _is_printable(byte: int) -> bool:
    return 0x20 <= byte <= 0x7E or byte in _WHITESPACE


def printable_runs(data: bytes, start: int = 0) -> list[str]:
    """Split ``data[start:]`` into maximal runs of printable ASCII."""
    runs: list[str] = []
    run_start: int | None = None
    for i in range(start, len(data)):
        if _is_printable(data[i]):
            if run_start is None:
                run_start = i
        elif run_start is not None:
            runs.append(data[run_start:i].decode("ascii"))
            run_start = None
    if run_start is not None:
        runs.append(data[run_start:].decode("ascii"))
    return runs


def candidates(
    data: bytes, start: int = 0, min_length: int = MIN_RUN_LENGTH
) -> list[str]:
    """Trimmed runs longer than *min_length* that are not Cocoa metadata."""
    found = []
    for run in printable_runs(data, start):
        trimmed = run.strip()
        if len(trimmed) > min_length and not is_cocoa_metadata(trimmed):
            found.append(trimmed)
    return found


def scrub_text(data: bytes, start: int = 0, min_length: int = MIN_RUN_LENGTH) -> str:
    """Return the longest surviving run, or ``""`` if none survive.

    Ties go to the earliest run.
    """
    found = candidates(data, start, min_length)
    if not found:
        return ""
    return max(found, key=len)

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from yojimbo_import.archive.files import FileIndex
from yojimbo_import.archive.reader import READ_ERRORS, ArchiveReader
from yojimbo_import.blob.classifier import classify
from yojimbo_import.cli import output as out
from yojimbo_import.cli.config import (
    Config,
    config_exists,
    config_path_display,
    load_config,
)
from yojimbo_import.core.exceptions import DecodeError
from yojimbo_import.core.types import DecodeResult
from yojimbo_import.db import loader
from yojimbo_import.db.labels import LabelIndex
from yojimbo_import.db.schema import read_items
from yojimbo_import.extract.inference import ENTITY_CODES
from yojimbo_import.facade.core import Decoder

DESCRIPTION = """\
yojimbo-import — decode Yojimbo backup archives

Reads the ZIP produced by Yojimbo's "Export..." backup, salvages note
text, resolves attached images and PDFs, and writes a JSON document
ready for bulk import. Encrypted items are counted but never decoded."""


# ── Helpers ─────────────────────────────────────────────────────────


def _read_archive(path: str) -> bytes:
    archive = Path(path).expanduser()
    if not archive.is_file():
        out.error(f"No such file: {archive}")
        sys.exit(1)
    return archive.read_bytes()


def _apply_overrides(cfg: Config, args: argparse.Namespace) -> Config:
    if getattr(args, "workers", None) is not None:
        cfg.max_workers = args.workers
    if getattr(args, "batch_size", None) is not None:
        cfg.batch_size = args.batch_size
    if getattr(args, "no_payloads", False):
        cfg.include_payloads = False
    return cfg


def _export_document(result: DecodeResult, cfg: Config) -> object:
    if cfg.batch_size > 0:
        return list(
            result.batches(cfg.batch_size, include_payloads=cfg.include_payloads)
        )
    exclude = None
    if not cfg.include_payloads:
        exclude = {"records": {"__all__": {"file_data"}}}
    doc = result.model_dump(mode="json", exclude=exclude)
    doc["items"] = doc.pop("records")
    return doc


def _print_summary(result: DecodeResult) -> None:
    summary = result.summary
    out.header("Summary")
    out.kv("Total items", summary.total)
    out.kv("Imported", summary.imported)
    out.kv("Encrypted (skipped)", summary.encrypted)
    out.kv("Labels", len(result.labels))
    if summary.by_type:
        out.info(out.dim("By type:"))
        out.histogram(summary.by_type)


# ── decode ──────────────────────────────────────────────────────────


def cmd_decode(args: argparse.Namespace) -> None:
    """Decode an archive and write the JSON import document."""
    cfg = _apply_overrides(load_config(), args)
    data = _read_archive(args.archive)

    try:
        decoder = Decoder(cfg.decoder_config())
        result = decoder.decode(data)
    except DecodeError as exc:
        out.error(str(exc))
        sys.exit(1)
    except ValueError as exc:
        out.error(f"Invalid configuration: {exc}")
        sys.exit(1)

    document = _export_document(result, cfg)
    text = json.dumps(document, indent=2, ensure_ascii=False)
    if args.output:
        dest = Path(args.output).expanduser()
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(text, encoding="utf-8")
        out.success(f"Wrote {result.summary.imported} items to {dest}")
        _print_summary(result)
    else:
        print(text)


# ── inspect ─────────────────────────────────────────────────────────


def cmd_inspect(args: argparse.Namespace) -> None:
    """Print how each row of an archive would be interpreted."""
    cfg = load_config()
    data = _read_archive(args.archive)

    try:
        with ArchiveReader.open(data) as reader:
            members = reader.list_members()
            db_path = loader.find_database(reader, cfg.database_suffix)
            engine = loader.load(reader.read_member(db_path))
            try:
                labels = LabelIndex.from_engine(engine)
                rows = read_items(engine)
            finally:
                engine.dispose()
    except (DecodeError, *READ_ERRORS) as exc:
        out.error(str(exc))
        sys.exit(1)

    index = FileIndex.build(members)

    out.header("Archive")
    out.kv("Members", len(members))
    out.kv("Database", db_path)
    out.kv("UUID files", len(index))

    out.header(f"Labels ({len(labels)})")
    for label in labels.labels:
        out.info(f"{label.display_index:>3}  {label.name}")

    out.header(f"Items ({len(rows)})")
    for row in rows:
        blob = classify(row.blob, row.encrypted)
        ent = ENTITY_CODES.get(row.entity_code or -1, f"unknown({row.entity_code})")
        line = f"[{row.pk}] {row.name or 'Untitled'!r} ent={ent} blob={blob.kind}"
        if blob.uuid is not None:
            where = index.get(blob.uuid)
            line += f" uuid={blob.uuid} -> {where or out.yellow('NOT FOUND')}"
        elif blob.content:
            line += f" text={len(blob.content)}ch"
        if row.string_rep:
            line += f" string_rep={len(row.string_rep)}ch"
        out.info(line)


# ── config ──────────────────────────────────────────────────────────


def cmd_config_show(args: argparse.Namespace) -> None:
    cfg = load_config()
    source = config_path_display() if config_exists() else "defaults"
    out.header(f"Configuration ({source})")
    out.kv("Workers", cfg.max_workers)
    out.kv("Database suffix", cfg.database_suffix)
    out.kv("Batch size", cfg.batch_size or out.dim("single document"))
    out.kv("Include payloads", cfg.include_payloads)


def cmd_config_path(args: argparse.Namespace) -> None:
    print(config_path_display())


# ── Parser ──────────────────────────────────────────────────────────


_COMMAND_MAP: dict[str, Callable[[argparse.Namespace], None]] = {
    "decode": cmd_decode,
    "inspect": cmd_inspect,
}

_CONFIG_MAP: dict[str, Callable[[argparse.Namespace], None]] = {
    "show": cmd_config_show,
    "path": cmd_config_path,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="yojimbo-import",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress logs",
    )
    sub = parser.add_subparsers(dest="command", title="commands")

    p_dec = sub.add_parser("decode", help="Decode an archive to JSON")
    p_dec.add_argument("archive", help="Path to the Yojimbo backup .zip")
    p_dec.add_argument(
        "-o", "--output", default=None, help="Write JSON here instead of stdout"
    )
    p_dec.add_argument(
        "--workers", type=int, default=None, help="Row worker threads"
    )
    p_dec.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Split output into import batches of N items",
    )
    p_dec.add_argument(
        "--no-payloads",
        action="store_true",
        help="Omit image/PDF bytes from the output",
    )

    p_ins = sub.add_parser("inspect", help="Show how each row is interpreted")
    p_ins.add_argument("archive", help="Path to the Yojimbo backup .zip")

    p_cfg = sub.add_parser("config", help="Show configuration")
    cfg_sub = p_cfg.add_subparsers(dest="config_command", title="config commands")
    cfg_sub.add_parser("show", help="Show current settings")
    cfg_sub.add_parser("path", help="Print config file location")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="  %(name)s: %(message)s",
        )

    if not args.command:
        parser.print_help()
        return

    if args.command == "config":
        if not args.config_command:
            parser.parse_args(["config", "--help"])
            return
        handler = _CONFIG_MAP.get(args.config_command)
    else:
        handler = _COMMAND_MAP.get(args.command)

    if handler is None:
        parser.print_help()
        return

    try:
        handler(args)
    except KeyboardInterrupt:
        print()
        sys.exit(130)


if __name__ == "__main__":
    main()

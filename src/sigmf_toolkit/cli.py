"""Command line interface for the SigMF toolkit."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

from . import __version__
from .archive import DATA_SUFFIX, META_SUFFIX, read_archive, write_archive
from .config import ToolkitSettings, load_settings
from .errors import SigMFError
from .hashing import sha512_streaming
from .logging_utils import configure_logging, log_event
from .metadata import Recording
from .models import ArchiveEntry
from .streaming import FileSource, read_samples_from_source
from .summary import summarize_recording

logger = logging.getLogger(__name__)


def _print_result(result: Any, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result, indent=2, default=str))
    else:
        print(result)


def _is_meta_file(path: Path) -> bool:
    return path.name.endswith(META_SUFFIX) or path.suffix.lower() == ".json"


def _sibling_data(meta_path: Path) -> Path:
    return meta_path.with_name(meta_path.name[: -len(META_SUFFIX)] + DATA_SUFFIX)


def _base_name(meta_path: Path) -> str:
    name = meta_path.name
    return name[: -len(META_SUFFIX)] if name.endswith(META_SUFFIX) else meta_path.stem


def _load_recordings(path: Path) -> List[Tuple[str, Recording, int | None]]:
    """``(name, recording, data_size)`` for a ``.sigmf-meta`` file or an archive."""

    if _is_meta_file(path):
        recording = Recording.from_json(path.read_text(encoding="utf-8"))
        data_size = None
        if path.name.endswith(META_SUFFIX) and _sibling_data(path).exists():
            data_size = _sibling_data(path).stat().st_size
        return [(_base_name(path), recording, data_size)]
    return [
        (entry.name, Recording.from_metadata(entry.metadata), len(entry.data))
        for entry in read_archive(FileSource(path))
    ]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sigmf-toolkit",
        description="Inspect, validate and package SigMF recordings.",
    )
    parser.add_argument("--config", type=Path, help="Settings file (YAML or JSON)")
    parser.add_argument("--log-level", help="Logging level (default: from settings, INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON logs")

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Validate a .sigmf-meta file or a .sigmf archive")
    validate.add_argument("path", type=Path, help="Metadata file or archive")
    validate.add_argument("--json", action="store_true", help="Emit validation results as JSON")

    info = subparsers.add_parser("info", help="Summarize a recording")
    info.add_argument("path", type=Path, help="Metadata file or archive")
    info.add_argument("--data", type=Path, help="Dataset file used to derive sample count and duration")
    info.add_argument("--json", action="store_true", help="Emit summary as JSON")

    pack = subparsers.add_parser("pack", help="Bundle .sigmf-meta/.sigmf-data pairs into an archive")
    pack.add_argument("meta", type=Path, nargs="+", help="Metadata files; matching .sigmf-data files are picked up")
    pack.add_argument("--output", type=Path, required=True, help="Archive to write")
    pack.add_argument("--name", help="Directory name inside the archive")

    unpack = subparsers.add_parser("unpack", help="Extract recordings from an archive")
    unpack.add_argument("archive", type=Path, help="Archive to read")
    unpack.add_argument("output", type=Path, help="Directory receiving the .sigmf-meta/.sigmf-data files")

    digest = subparsers.add_parser("hash", help="SHA-512 of a dataset file")
    digest.add_argument("path", type=Path, help="Dataset file")
    digest.add_argument("--meta", type=Path, help="Verify against core:sha512 of this metadata file")

    samples = subparsers.add_parser("samples", help="Decode and print samples from a dataset file")
    samples.add_argument("path", type=Path, help="Dataset file")
    samples.add_argument("--datatype", required=True, help="Datatype token, e.g. cf32_le")
    samples.add_argument("--offset", type=int, default=0, help="First sample to decode")
    samples.add_argument("--count", type=int, default=16, help="Number of samples to decode")
    samples.add_argument("--json", action="store_true", help="Emit samples as JSON")

    subparsers.add_parser("version", help="Display the installed version")

    return parser


def _cmd_validate(args: argparse.Namespace, settings: ToolkitSettings) -> int:
    results: Dict[str, Any] = {}
    for name, recording, _ in _load_recordings(args.path):
        results[name] = recording.validate().as_dict()

    if args.json:
        _print_result(results, as_json=True)
    else:
        for name, result in results.items():
            print(f"{name}: {'valid' if result['valid'] else 'INVALID'}")
            for issue in result["errors"]:
                print(f"  {issue['path']}: {issue['message']}")
    return 0 if all(result["valid"] for result in results.values()) else 1


def _cmd_info(args: argparse.Namespace, settings: ToolkitSettings) -> int:
    summaries: Dict[str, Any] = {}
    for name, recording, data_size in _load_recordings(args.path):
        if args.data is not None:
            data_size = args.data.stat().st_size
        summaries[name] = summarize_recording(recording, data_size=data_size)

    if args.json:
        _print_result(summaries, as_json=True)
    else:
        for name, summary in summaries.items():
            print(
                f"{name}: {summary['datatype'].get('datatype')} "
                f"rate={summary['sample_rate']} captures={summary['captures']} "
                f"annotations={summary['annotations']} samples={summary['sample_count']} "
                f"valid={summary['valid']}"
            )
    return 0


def _cmd_pack(args: argparse.Namespace, settings: ToolkitSettings) -> int:
    entries: List[ArchiveEntry] = []
    for meta_path in args.meta:
        metadata = json.loads(meta_path.read_text(encoding="utf-8"))
        data_path = _sibling_data(meta_path) if meta_path.name.endswith(META_SUFFIX) else None
        data = data_path.read_bytes() if data_path is not None and data_path.exists() else b""
        entries.append(ArchiveEntry(name=_base_name(meta_path), metadata=metadata, data=data))

    target = write_archive(args.output, entries, archive_name=args.name)
    log_event(logger, "archive_written", path=str(target), entries=len(entries), json_logs=args.json_logs or None)
    print(f"Wrote {len(entries)} recording(s) to {target}")
    return 0


def _cmd_unpack(args: argparse.Namespace, settings: ToolkitSettings) -> int:
    output: Path = args.output
    output.mkdir(parents=True, exist_ok=True)
    entries = read_archive(FileSource(args.archive))
    for entry in entries:
        meta_path = output / f"{entry.name}{META_SUFFIX}"
        meta_path.parent.mkdir(parents=True, exist_ok=True)
        meta_path.write_text(json.dumps(entry.metadata, indent=settings.json_indent, ensure_ascii=False), encoding="utf-8")
        (output / f"{entry.name}{DATA_SUFFIX}").write_bytes(entry.data)
    print(f"Extracted {len(entries)} recording(s) to {output}")
    return 0


def _cmd_hash(args: argparse.Namespace, settings: ToolkitSettings) -> int:
    digest = sha512_streaming(FileSource(args.path), chunk_size=settings.hash_chunk_size)
    if args.meta is None:
        print(digest)
        return 0

    expected = Recording.from_json(args.meta.read_text(encoding="utf-8")).sha512
    if not expected:
        print(f"{args.meta} has no core:sha512", file=sys.stderr)
        return 1
    if digest == expected.lower():
        print(f"OK {digest}")
        return 0
    print(f"MISMATCH expected {expected.lower()} got {digest}")
    return 1


def _cmd_samples(args: argparse.Namespace, settings: ToolkitSettings) -> int:
    decoded = read_samples_from_source(
        FileSource(args.path),
        args.datatype,
        offset=args.offset,
        count=args.count,
        direct_read_threshold=settings.direct_read_threshold,
    )
    if decoded.datatype_info.is_complex:
        values: List[Any] = decoded.values.reshape(-1, 2).tolist()
    else:
        values = decoded.values.tolist()
    payload = {
        "datatype": args.datatype,
        "offset": args.offset,
        "sample_count": decoded.sample_count,
        "samples": values,
    }
    if args.json:
        _print_result(payload, as_json=True)
    else:
        for index, value in enumerate(values, start=args.offset):
            print(f"{index}: {value}")
    return 0


COMMANDS = {
    "validate": _cmd_validate,
    "info": _cmd_info,
    "pack": _cmd_pack,
    "unpack": _cmd_unpack,
    "hash": _cmd_hash,
    "samples": _cmd_samples,
}


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings(args.config)
    configure_logging(
        level=args.log_level or settings.log_level,
        json_logs=args.json_logs or settings.json_logs,
    )

    if args.command == "version":
        print(__version__)
        return 0

    try:
        return COMMANDS[args.command](args, settings)
    except (SigMFError, json.JSONDecodeError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

"""Reading and writing ``.sigmf`` archives (POSIX ustar TAR files).

An archive wraps one directory holding ``<name>.sigmf-meta`` and
``<name>.sigmf-data`` pairs. Only the subset of ustar needed for that is
implemented: regular files, 512-byte blocks, octal size fields and the
``prefix`` field for paths longer than 100 bytes. On read, a non-empty
``prefix`` is always joined to the name, and the ``path`` record of a pax
extended header renames the member that follows it.
"""

from __future__ import annotations

import json
import logging
import re
import time
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple

from .errors import ArchiveFormatError
from .logging_utils import log_event
from .metadata import Recording
from .models import ArchiveEntry, PreparedFiles
from .streaming.sources import ByteSource, as_source

logger = logging.getLogger(__name__)

ARCHIVE_MIME_TYPE = "application/x-tar"
META_SUFFIX = ".sigmf-meta"
DATA_SUFFIX = ".sigmf-data"

BLOCK_SIZE = 512
ZERO_BLOCK = bytes(BLOCK_SIZE)
NAME_SIZE = 100
PREFIX_SIZE = 155
MAX_MEMBER_SIZE = 8**11 - 1

# (offset, length) of the header fields in use
NAME_FIELD = (0, 100)
MODE_FIELD = (100, 8)
UID_FIELD = (108, 8)
GID_FIELD = (116, 8)
SIZE_FIELD = (124, 12)
MTIME_FIELD = (136, 12)
CHECKSUM_FIELD = (148, 8)
TYPEFLAG_FIELD = (156, 1)
MAGIC_FIELD = (257, 6)
VERSION_FIELD = (263, 2)
PREFIX_FIELD = (345, 155)

USTAR_MAGIC = b"ustar\0"
REGULAR_TYPES = (b"0", b"\0")
PAX_HEADER = b"x"

_LEADING_DIR = re.compile(r"^[^/]+/")

ArchiveSource = bytes | bytearray | memoryview | ByteSource | str | Path


# ---------------------------------------------------------------------------
# Header encoding


def _put(header: bytearray, field: Tuple[int, int], value: bytes) -> None:
    offset, length = field
    if len(value) > length:
        raise ArchiveFormatError(f"value {value!r} does not fit a {length}-byte header field")
    header[offset : offset + len(value)] = value


def _octal(value: int, length: int) -> bytes:
    return f"{value:0{length - 1}o}".encode("ascii") + b"\0"


def _split_path(path: str) -> Tuple[bytes, bytes]:
    """Return ``(name, prefix)`` header values for ``path``."""

    encoded = path.encode("utf-8")
    if len(encoded) <= NAME_SIZE:
        return encoded, b""

    cut = encoded.rfind(b"/", 0, PREFIX_SIZE + 1)
    if cut > 0:
        prefix, name = encoded[:cut], encoded[cut + 1 :]
        if name and len(name) <= NAME_SIZE:
            return name, prefix
    raise ArchiveFormatError(f"path is too long for a ustar header: {path}")


def _header(path: str, size: int, mtime: int) -> bytes:
    if size > MAX_MEMBER_SIZE:
        raise ArchiveFormatError(f"{path} is too large for a ustar member ({size} bytes)")

    name, prefix = _split_path(path)
    header = bytearray(BLOCK_SIZE)
    _put(header, NAME_FIELD, name)
    _put(header, MODE_FIELD, _octal(0o644, 8))
    _put(header, UID_FIELD, _octal(0, 8))
    _put(header, GID_FIELD, _octal(0, 8))
    _put(header, SIZE_FIELD, _octal(size, 12))
    _put(header, MTIME_FIELD, _octal(mtime, 12))
    _put(header, CHECKSUM_FIELD, b" " * 8)
    _put(header, TYPEFLAG_FIELD, b"0")
    _put(header, MAGIC_FIELD, USTAR_MAGIC)
    _put(header, VERSION_FIELD, b"00")
    _put(header, PREFIX_FIELD, prefix)

    checksum = sum(header)
    _put(header, CHECKSUM_FIELD, f"{checksum:06o}".encode("ascii") + b"\0 ")
    return bytes(header)


def _padding(size: int) -> bytes:
    remainder = size % BLOCK_SIZE
    return bytes(BLOCK_SIZE - remainder) if remainder else b""


# ---------------------------------------------------------------------------
# Header decoding


def _field(header: bytes, field: Tuple[int, int]) -> bytes:
    offset, length = field
    return header[offset : offset + length]


def _cstring(raw: bytes) -> str:
    end = raw.find(b"\0")
    return (raw if end < 0 else raw[:end]).decode("utf-8", errors="replace")


def _parse_octal(raw: bytes, what: str) -> int:
    text = raw.replace(b"\0", b" ").strip()
    if not text:
        return 0
    try:
        return int(text, 8)
    except ValueError:
        raise ArchiveFormatError(f"invalid octal {what} field {raw!r}") from None


def _verify_checksum(header: bytes, offset: int) -> None:
    stored = _parse_octal(_field(header, CHECKSUM_FIELD), "checksum")
    start, length = CHECKSUM_FIELD
    body = header[:start] + header[start + length :]
    unsigned = sum(body) + 8 * 0x20
    signed = sum(b - 256 if b > 127 else b for b in body) + 8 * 0x20
    if stored not in (unsigned, signed):
        raise ArchiveFormatError(f"bad header checksum at offset {offset}")


def _pax_records(content: bytes, offset: int) -> Dict[str, str]:
    """Decode ``"<length> <key>=<value>\\n"`` records of a pax extended header."""

    records: Dict[str, str] = {}
    pos = 0
    while pos < len(content):
        if content[pos:].strip(b"\0") == b"":
            break
        space = content.find(b" ", pos)
        try:
            length = int(content[pos:space])
        except ValueError:
            length = 0
        if space <= pos or length <= space - pos or pos + length > len(content):
            raise ArchiveFormatError(f"malformed pax record at offset {offset + pos}")
        key, sep, value = content[space + 1 : pos + length - 1].partition(b"=")
        if sep:
            records[key.decode("utf-8", errors="replace")] = value.decode("utf-8", errors="replace")
        pos += length
    return records


def _iter_members(blob: bytes) -> Iterator[Tuple[str, bytes, bytes]]:
    """Yield ``(path, typeflag, content)`` for every member of ``blob``.

    A pax ``x`` header's ``path`` record replaces the path of the member that
    follows it; other pax records are ignored.
    """

    offset = 0
    total = len(blob)
    pax_path: str | None = None
    while offset < total:
        header = blob[offset : offset + BLOCK_SIZE]
        if header.count(0) == len(header):
            return
        if len(header) < BLOCK_SIZE:
            raise ArchiveFormatError(f"truncated header at offset {offset}")
        _verify_checksum(header, offset)

        path = _cstring(_field(header, NAME_FIELD))
        prefix = _cstring(_field(header, PREFIX_FIELD))
        if prefix:
            path = f"{prefix}/{path}"
        size = _parse_octal(_field(header, SIZE_FIELD), "size")
        typeflag = _field(header, TYPEFLAG_FIELD)

        offset += BLOCK_SIZE
        if offset + size > total:
            raise ArchiveFormatError(f"{path} is truncated: expected {size} bytes")
        content_start = offset
        content = blob[offset : offset + size]
        offset += -(-size // BLOCK_SIZE) * BLOCK_SIZE

        if typeflag == PAX_HEADER:
            pax_path = _pax_records(content, content_start).get("path", pax_path)
            continue
        if pax_path is not None:
            path, pax_path = pax_path, None
        yield path, typeflag, content


# ---------------------------------------------------------------------------
# Public API


def _entry_from(item: ArchiveEntry | Mapping[str, Any]) -> ArchiveEntry:
    if isinstance(item, ArchiveEntry):
        return item
    metadata = item["metadata"]
    if isinstance(metadata, Recording):
        metadata = metadata.to_metadata()
    return ArchiveEntry(name=item["name"], metadata=metadata, data=item.get("data", b""))


def create_archive(
    entries: Iterable[ArchiveEntry | Mapping[str, Any]],
    archive_name: str | None = None,
    *,
    mtime: int | None = None,
    indent: int = 2,
) -> bytes:
    """Pack recordings into a TAR archive.

    Each entry becomes ``{dir}/{name}.sigmf-meta`` and ``{dir}/{name}.sigmf-data``
    (written even when empty), where ``dir`` is ``archive_name`` or the first
    entry's name.
    """

    items = [_entry_from(item) for item in entries]
    directory = archive_name or (items[0].name if items else "recording")
    stamp = int(time.time()) if mtime is None else int(mtime)

    out = bytearray()
    for item in items:
        meta = json.dumps(item.metadata, indent=indent, ensure_ascii=False).encode("utf-8")
        for suffix, content in ((META_SUFFIX, meta), (DATA_SUFFIX, item.data)):
            out += _header(f"{directory}/{item.name}{suffix}", len(content), stamp)
            out += content
            out += _padding(len(content))
    out += ZERO_BLOCK * 2

    log_event(logger, "archive_created", level=logging.DEBUG, directory=directory, entries=len(items), size=len(out))
    return bytes(out)


def read_archive(source: ArchiveSource) -> List[ArchiveEntry]:
    """Unpack every recording in a TAR archive.

    The wrapping directory is discarded. A ``.sigmf-data`` file without a
    matching ``.sigmf-meta`` is ignored; a metadata file without data gets an
    empty ``data``.
    """

    blob = as_source(source).read_all()
    meta_files: Dict[str, bytes] = {}
    data_files: Dict[str, bytes] = {}

    for path, typeflag, content in _iter_members(blob):
        if typeflag not in REGULAR_TYPES:
            continue
        name = _LEADING_DIR.sub("", path, count=1)
        if name.endswith(META_SUFFIX):
            meta_files[name[: -len(META_SUFFIX)]] = content
        elif name.endswith(DATA_SUFFIX):
            data_files[name[: -len(DATA_SUFFIX)]] = content

    entries: List[ArchiveEntry] = []
    for base, raw in meta_files.items():
        metadata = json.loads(raw.decode("utf-8"))
        if not isinstance(metadata, dict):
            raise ArchiveFormatError(f"{base}{META_SUFFIX} does not contain a JSON object")
        entries.append(ArchiveEntry(name=base, metadata=metadata, data=data_files.get(base, b"")))

    log_event(logger, "archive_read", level=logging.DEBUG, entries=len(entries), size=len(blob))
    return entries


def stream_archive(source: ArchiveSource) -> Iterator[ArchiveEntry]:
    """Yield archive entries one at a time.

    The whole archive is parsed when the first entry is requested; only the
    hand-off to the caller is incremental.
    """

    yield from read_archive(source)


def create_archive_from_recording(recording: Recording, data: bytes, name: str) -> bytes:
    return create_archive([ArchiveEntry(name=name, metadata=recording.to_metadata(), data=data)])


def prepare_files(recording: Recording, data: bytes) -> PreparedFiles:
    return PreparedFiles(meta=recording.to_json(), data=data)


def write_recording_files(
    recording: Recording,
    data: bytes,
    directory: str | Path,
    base_name: str,
) -> Tuple[Path, Path]:
    """Save ``{base_name}.sigmf-meta`` and ``{base_name}.sigmf-data`` into ``directory``."""

    target = Path(directory)
    target.mkdir(parents=True, exist_ok=True)
    files = prepare_files(recording, data)
    meta_path = target / f"{base_name}{META_SUFFIX}"
    data_path = target / f"{base_name}{DATA_SUFFIX}"
    meta_path.write_text(files.meta, encoding="utf-8")
    data_path.write_bytes(files.data)
    return meta_path, data_path


def write_archive(
    path: str | Path,
    entries: Iterable[ArchiveEntry | Mapping[str, Any]],
    archive_name: str | None = None,
) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(create_archive(entries, archive_name))
    return target

# Reads files through a ChunkStream and prints unit counts and checksums.

from __future__ import annotations

import argparse
import hashlib
import logging
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version
from typing import Iterator, Optional, Sequence

from tqdm import tqdm

from chunkio.config import ChunkIOConfig
from chunkio.dependency_checker import format_dependency_versions, get_dependency_versions
from chunkio.exceptions import ChunkIOError
from chunkio.resources import FileObjectResource
from chunkio.stream import ChunkStream

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chunkio",
        description="Read files through a chunk stream and print unit counts with checksums.",
    )
    parser.add_argument("files", nargs="*", help="Files to process")
    parser.add_argument(
        "--mode",
        choices=["lines", "chars", "bytes", "chunks"],
        default="lines",
        help="Unit to iterate over (default: lines)",
    )
    parser.add_argument("--encoding", default="utf-8", help="External encoding of the stream")
    parser.add_argument(
        "--source-encoding",
        default=None,
        help="Encoding of the files, if different from the external encoding",
    )
    parser.add_argument(
        "--separator",
        default="\n",
        help="Line separator used in lines mode (default: newline)",
    )
    parser.add_argument("--chunk-size", type=int, default=8192, help="Size of the chunks read from each file")
    parser.add_argument("--hide-progress", action="store_true", help="Hide progress bar")
    parser.add_argument("--verbose", action="store_true", help="Log stream internals")
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print the chunkio and dependency versions and exit",
    )
    return parser


def iter_units(stream: ChunkStream, mode: str, separator: str) -> Iterator[bytes]:
    """Iterate over the units of ``stream``, each one encoded back to bytes for hashing."""
    if mode == "lines":
        for line in stream.each_line(separator):
            yield line.encode(stream.external_encoding, stream.config.errors)
    elif mode == "chars":
        for char in stream.each_char():
            yield char.encode(stream.external_encoding, stream.config.errors)
    elif mode == "bytes":
        for byte in stream.each_byte():
            yield bytes([byte])
    else:
        yield from stream.each_chunk()


def process_file(path: str, config: ChunkIOConfig, args: argparse.Namespace) -> None:
    resource = FileObjectResource.from_path(path, chunk_size=config.chunk_size)
    sha256 = hashlib.sha256()
    count = 0
    with ChunkStream(resource, config) as stream:
        for unit in tqdm(
            iter_units(stream, args.mode, args.separator),
            desc=f"Reading {args.mode}",
            unit=args.mode[:-1],
            disable=args.hide_progress,
        ):
            sha256.update(unit)
            count += 1
        size = stream.tell()

    print(f"{count:12d} {args.mode:6s} {size:12d} bytes  {sha256.hexdigest()[:16]}  {path}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.version:
        try:
            chunkio_version = package_version("chunkio")
        except PackageNotFoundError:
            chunkio_version = "unknown"
        print(f"chunkio {chunkio_version}")
        print(format_dependency_versions(get_dependency_versions()))
        return 0

    if not args.files:
        parser.error("no files to process")

    if args.chunk_size <= 0:
        print(f"Invalid chunk size: {args.chunk_size}", file=sys.stderr)
        return 2

    config = ChunkIOConfig(
        encoding=args.encoding,
        source_encoding=args.source_encoding,
        line_separator=args.separator,
        chunk_size=args.chunk_size,
    )

    failed = False
    for path in args.files:
        try:
            process_file(path, config, args)
        except (ChunkIOError, OSError, UnicodeError) as e:
            logger.debug("Failed to process %s", path, exc_info=e)
            print(f"Error processing {path}: {e}")
            failed = True

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())

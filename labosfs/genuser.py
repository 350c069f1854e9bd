"""Pack user programs into a flat sector image with a one-sector file table."""

from __future__ import annotations

import argparse
import struct
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Iterable

SECTSIZE = 512
MAX_NAME = 31 - 2 * 4
BASE_SECT = 256
FIRST_DATA_SECT = BASE_SECT + 1

_ENTRY = struct.Struct(f"<2I{MAX_NAME + 1}s")
MAX_FILE = SECTSIZE // _ENTRY.size


@dataclass(frozen=True)
class UserFile:
    """A file table entry: first disk sector, byte length and name."""

    start_sect: int
    length: int
    name: str

    SIZE: ClassVar[int] = _ENTRY.size

    @property
    def sectors(self) -> int:
        return -(-self.length // SECTSIZE)

    def pack(self) -> bytes:
        raw = self.name.encode()
        if not raw or len(raw) > MAX_NAME:
            raise ValueError(f"file name must be 1 to {MAX_NAME} bytes: {self.name!r}")
        return _ENTRY.pack(self.start_sect, self.length, raw)

    @classmethod
    def unpack(cls, data: bytes) -> UserFile:
        start, length, raw = _ENTRY.unpack(data)
        return cls(start, length, raw.split(b"\0", 1)[0].decode())


def build_user_image(paths: Iterable[str | Path]) -> bytes:
    """Return the image: the file table sector followed by each file, sector padded."""
    paths = [Path(p) for p in paths]
    if len(paths) > MAX_FILE:
        raise ValueError(f"at most {MAX_FILE} files fit in the table")
    table = []
    body = bytearray()
    sect = FIRST_DATA_SECT
    for path in paths:
        data = path.read_bytes()
        entry = UserFile(sect, len(data), path.name)
        table.append(entry.pack())
        body += data
        body += bytes(-len(data) % SECTSIZE)
        sect += entry.sectors
    return b"".join(table).ljust(SECTSIZE, b"\0") + bytes(body)


def read_user_table(image: bytes) -> list[UserFile]:
    """Return the used entries of an image's file table."""
    if len(image) < SECTSIZE:
        raise ValueError("image is shorter than its file table")
    entries = (
        UserFile.unpack(image[i * UserFile.SIZE : (i + 1) * UserFile.SIZE])
        for i in range(MAX_FILE)
    )
    return [entry for entry in entries if entry.name]


def write_user_image(target: str | Path, paths: Iterable[str | Path]) -> None:
    """Build the image for paths and write it to target."""
    Path(target).write_bytes(build_user_image(paths))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="genuser", description="Pack user programs into an image.")
    parser.add_argument("target", help="image file to create")
    parser.add_argument("files", nargs="+", help="files to pack")
    args = parser.parse_args(argv)
    try:
        write_user_image(args.target, args.files)
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
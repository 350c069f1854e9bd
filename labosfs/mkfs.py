"""Build a disk image holding user files in a flat root directory.

Image layout, counted in 4 KiB blocks from the start of the whole disk:
super block (32), bitmap (33), inode blocks (34..63), data blocks (64..).
The image itself starts at block 32, after the boot sector and kernel.
"""

from __future__ import annotations

import argparse
import errno
import struct
import sys
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import BinaryIO, ClassVar, Iterable, Iterator

DISK_SIZE = 128 * 1024 * 1024
BLK_SIZE = 4096
BLK_OFF = 32
IMG_SIZE = DISK_SIZE - BLK_OFF * BLK_SIZE
IMG_BLK = IMG_SIZE // BLK_SIZE
BLK_NUM = DISK_SIZE // BLK_SIZE

SUPER_BLK = BLK_OFF
BITMAP_BLK = BLK_OFF + 1
INODE_START = BLK_OFF + 2
DATA_START = BLK_OFF + 32

NDIRECT = 12
NINDIRECT = BLK_SIZE // 4
MAX_NAME = 31 - 4

_INODE = struct.Struct(f"<3I{NDIRECT + 1}I")
_DIRENT = struct.Struct(f"<I{MAX_NAME + 1}s")
_SUPER = struct.Struct("<4I")
_ADDR = struct.Struct("<I")

INODE_SIZE = _INODE.size
IPERBLK = BLK_SIZE // INODE_SIZE
INODE_NUM = (DATA_START - INODE_START) * IPERBLK
MAX_FILE_SIZE = (NDIRECT + NINDIRECT) * BLK_SIZE

_ZERO_BLOCK = bytes(BLK_SIZE)


class FileType(IntEnum):
    """Kind of object an inode describes."""

    NONE = 0
    FILE = 1
    DIR = 2
    DEV = 3


@dataclass
class Inode:
    """On-disk inode: 12 direct block addresses and one indirect block."""

    kind: FileType = FileType.NONE
    device: int = 0
    size: int = 0
    addrs: list[int] = field(default_factory=lambda: [0] * (NDIRECT + 1))

    SIZE: ClassVar[int] = INODE_SIZE

    def pack(self) -> bytes:
        return _INODE.pack(int(self.kind), self.device, self.size, *self.addrs)

    @classmethod
    def unpack(cls, data: bytes) -> Inode:
        kind, device, size, *addrs = _INODE.unpack(data)
        return cls(FileType(kind), device, size, list(addrs))


def _encode_name(name: str) -> bytes:
    raw = name.encode()
    if not raw or len(raw) > MAX_NAME:
        raise ValueError(f"file name must be 1 to {MAX_NAME} bytes: {name!r}")
    return raw


@dataclass(frozen=True)
class DirEntry:
    """One entry of a directory file: an inode number and a name."""

    inode: int
    name: str

    SIZE: ClassVar[int] = _DIRENT.size

    def pack(self) -> bytes:
        return _DIRENT.pack(self.inode, _encode_name(self.name))

    @classmethod
    def unpack(cls, data: bytes) -> DirEntry:
        inode, raw = _DIRENT.unpack(data)
        return cls(inode, raw.split(b"\0", 1)[0].decode())


class FsImage:
    """An image under construction, kept sparse in memory."""

    def __init__(self) -> None:
        self._blocks: dict[int, bytearray] = {}
        self._inodes: dict[int, Inode] = {}
        self._next_blk = DATA_START
        # inode 0 stays unused: a directory entry with inode 0 is empty
        self._next_inode = 1
        bitmap = self._buf(BITMAP_BLK)
        bitmap[: DATA_START // 8] = b"\xff" * (DATA_START // 8)
        self.root = self.ialloc(FileType.DIR)
        for name in (".", ".."):
            self.iappend(self.root, DirEntry(self.root, name).pack())

    def _buf(self, no: int) -> bytearray:
        buf = self._blocks.get(no)
        if buf is None:
            buf = self._blocks[no] = bytearray(BLK_SIZE)
        return buf

    def balloc(self) -> int:
        """Allocate the next free data block, mark it in the bitmap."""
        if self._next_blk >= BLK_NUM:
            raise OSError(errno.ENOSPC, "no more block")
        no = self._next_blk
        self._buf(BITMAP_BLK)[no // 8] |= 1 << (no % 8)
        self._next_blk += 1
        return no

    def ialloc(self, kind: FileType | int) -> int:
        """Allocate the next free inode with the given type."""
        if self._next_inode >= INODE_NUM:
            raise OSError(errno.ENOSPC, "no more inode")
        no = self._next_inode
        self._inodes[no] = Inode(FileType(kind))
        self._next_inode += 1
        return no

    def inode(self, no: int) -> Inode:
        """Return the live inode with this number."""
        if not 0 <= no < INODE_NUM:
            raise ValueError(f"inode number out of range: {no}")
        return self._inodes.setdefault(no, Inode())

    def block(self, no: int) -> bytes:
        """Return the contents of disk block `no` as it would be written."""
        if not BLK_OFF <= no < BLK_NUM:
            raise ValueError(f"block number out of image: {no}")
        if no == SUPER_BLK:
            sb = _SUPER.pack(BITMAP_BLK, INODE_START, INODE_NUM, self.root)
            return sb.ljust(BLK_SIZE, b"\0")
        if INODE_START <= no < DATA_START:
            return self._inode_block(no)
        return bytes(self._blocks.get(no, _ZERO_BLOCK))

    def _inode_block(self, no: int) -> bytes:
        first = (no - INODE_START) * IPERBLK
        empty = bytes(INODE_SIZE)
        return b"".join(
            self._inodes[i].pack() if i in self._inodes else empty
            for i in range(first, first + IPERBLK)
        )

    def iwalk(self, ino: int, blk_no: int) -> int:
        """Return the disk block holding block `blk_no` of a file, allocating it if absent."""
        inode = self.inode(ino)
        if blk_no < 0:
            raise ValueError(f"negative block index: {blk_no}")
        if blk_no < NDIRECT:
            if not inode.addrs[blk_no]:
                inode.addrs[blk_no] = self.balloc()
            return inode.addrs[blk_no]
        index = blk_no - NDIRECT
        if index >= NINDIRECT:
            raise ValueError("file too big")
        if not inode.addrs[NDIRECT]:
            inode.addrs[NDIRECT] = self.balloc()
        table = self._buf(inode.addrs[NDIRECT])
        (addr,) = _ADDR.unpack_from(table, index * _ADDR.size)
        if not addr:
            addr = self.balloc()
            _ADDR.pack_into(table, index * _ADDR.size, addr)
        return addr

    def _lookup(self, inode: Inode, blk_no: int) -> int:
        if blk_no < NDIRECT:
            return inode.addrs[blk_no]
        indirect = inode.addrs[NDIRECT]
        if not indirect:
            return 0
        table = self._blocks.get(indirect, _ZERO_BLOCK)
        return _ADDR.unpack_from(table, (blk_no - NDIRECT) * _ADDR.size)[0]

    def iappend(self, ino: int, data: bytes) -> None:
        """Append data to the end of a file, growing its size."""
        inode = self.inode(ino)
        view = memoryview(data)
        while view:
            blk_no, off = divmod(inode.size, BLK_SIZE)
            buf = self._buf(self.iwalk(ino, blk_no))
            count = min(len(view), BLK_SIZE - off)
            buf[off : off + count] = view[:count]
            inode.size += count
            view = view[count:]

    def read_file(self, ino: int) -> bytes:
        """Return the whole contents of a file."""
        inode = self.inode(ino)
        out = bytearray()
        blk_no = 0
        while len(out) < inode.size:
            addr = self._lookup(inode, blk_no)
            chunk = self._blocks.get(addr, _ZERO_BLOCK) if addr else _ZERO_BLOCK
            out += chunk[: min(BLK_SIZE, inode.size - len(out))]
            blk_no += 1
        return bytes(out)

    def add_file(self, path: str | Path) -> int:
        """Copy a host file into the root directory; return its inode number."""
        path = Path(path)
        data = path.read_bytes()
        name = path.name
        _encode_name(name)
        no = self.ialloc(FileType.FILE)
        self.iappend(self.root, DirEntry(no, name).pack())
        self.iappend(no, data)
        return no

    def list_root(self) -> list[DirEntry]:
        """Return the entries of the root directory in order."""
        raw = self.read_file(self.root)
        size = DirEntry.SIZE
        return [DirEntry.unpack(raw[i : i + size]) for i in range(0, len(raw), size)]

    def _iter_blocks(self) -> Iterator[tuple[int, bytes]]:
        yield SUPER_BLK, self.block(SUPER_BLK)
        inode_blocks = sorted({INODE_START + no // IPERBLK for no in self._inodes})
        for no in inode_blocks:
            yield no, self._inode_block(no)
        for no in sorted(self._blocks):
            yield no, bytes(self._blocks[no])

    def to_bytes(self) -> bytes:
        """Return the full image, IMG_SIZE bytes long."""
        used = dict(self._iter_blocks())
        return b"".join(used.get(no, _ZERO_BLOCK) for no in range(BLK_OFF, BLK_NUM))

    def _write(self, stream: BinaryIO) -> None:
        for no, data in self._iter_blocks():
            stream.seek((no - BLK_OFF) * BLK_SIZE)
            stream.write(data)
        stream.truncate(IMG_SIZE)


def build_image(target: str | Path, paths: Iterable[str | Path]) -> FsImage:
    """Build an image holding the given files and write it to target."""
    image = FsImage()
    for path in paths:
        image.add_file(path)
    with open(target, "wb") as stream:
        image._write(stream)
    return image


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="mkfs", description="Build a user filesystem image.")
    parser.add_argument("target", help="image file to create")
    parser.add_argument("files", nargs="+", help="files to place in the root directory")
    args = parser.parse_args(argv)
    try:
        build_image(args.target, args.files)
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
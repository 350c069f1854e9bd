import os
import struct

import pytest

from labosfs import mkfs
from labosfs.mkfs import DirEntry, FileType, FsImage, Inode


@pytest.fixture
def image():
    return FsImage()


def test_superblock_fields(image):
    sb = image.block(mkfs.SUPER_BLK)
    assert len(sb) == mkfs.BLK_SIZE
    assert struct.unpack_from("<4I", sb) == (
        mkfs.BITMAP_BLK,
        mkfs.INODE_START,
        mkfs.INODE_NUM,
        image.root,
    )


def test_root_directory_initial_entries(image):
    assert image.root == 1
    assert image.inode(image.root).kind == FileType.DIR
    assert image.list_root() == [DirEntry(image.root, "."), DirEntry(image.root, "..")]
    assert image.inode(image.root).size == 2 * DirEntry.SIZE


def test_record_sizes():
    packed_entry = DirEntry(3, "name").pack()
    packed_inode = Inode(FileType.FILE, 0, 0, [0] * (mkfs.NDIRECT + 1)).pack()
    assert len(packed_entry) == DirEntry.SIZE == 32
    assert len(packed_inode) == Inode.SIZE == 64
    assert mkfs.BLK_SIZE % len(packed_inode) == 0


def test_bitmap_marks_reserved_and_allocated(image):
    no = image.balloc()
    bitmap = image.block(mkfs.BITMAP_BLK)
    assert bitmap[: mkfs.DATA_START // 8] == b"\xff" * (mkfs.DATA_START // 8)
    assert bitmap[no // 8] & (1 << (no % 8))
    assert not bitmap[(no + 1) // 8] & (1 << ((no + 1) % 8))


def test_balloc_is_sequential_from_data_start(image):
    # the root directory already took the first data block
    assert image.inode(image.root).addrs[0] == mkfs.DATA_START
    first = image.balloc()
    assert image.balloc() == first + 1


def test_ialloc_sequence(image):
    a = image.ialloc(FileType.FILE)
    b = image.ialloc(FileType.DEV)
    assert b == a + 1
    assert image.inode(b).kind == FileType.DEV


def test_ialloc_exhaustion(image):
    count = 0
    with pytest.raises(OSError):
        while True:
            image.ialloc(FileType.FILE)
            count += 1
    assert count == mkfs.INODE_NUM - 2


def test_balloc_exhaustion(image):
    count = 0
    with pytest.raises(OSError):
        while True:
            image.balloc()
            count += 1
    assert count == mkfs.BLK_NUM - mkfs.DATA_START - 1


def test_iwalk_reuses_allocated_block(image):
    ino = image.ialloc(FileType.FILE)
    first = image.iwalk(ino, 3)
    assert image.iwalk(ino, 3) == first
    assert image.inode(ino).addrs[3] == first


def test_iwalk_indirect_allocates_table(image):
    ino = image.ialloc(FileType.FILE)
    addr = image.iwalk(ino, mkfs.NDIRECT)
    table = image.inode(ino).addrs[mkfs.NDIRECT]
    assert table != 0
    assert struct.unpack_from("<I", image.block(table))[0] == addr


def test_iwalk_too_big(image):
    ino = image.ialloc(FileType.FILE)
    with pytest.raises(ValueError):
        image.iwalk(ino, mkfs.NDIRECT + mkfs.NINDIRECT)


def test_add_file_round_trip(image, tmp_path):
    src = tmp_path / "hello.txt"
    src.write_bytes(b"hello world\n")
    ino = image.add_file(src)
    assert image.read_file(ino) == b"hello world\n"
    assert image.inode(ino).kind == FileType.FILE
    assert image.list_root()[-1] == DirEntry(ino, "hello.txt")


def test_add_large_file_uses_indirect_block(image, tmp_path):
    data = bytes(range(256)) * ((mkfs.NDIRECT + 2) * mkfs.BLK_SIZE // 256) + b"tail"
    src = tmp_path / "big"
    src.write_bytes(data)
    ino = image.add_file(src)
    assert image.inode(ino).size == len(data)
    assert image.inode(ino).addrs[mkfs.NDIRECT] != 0
    assert image.read_file(ino) == data


def test_iappend_across_block_boundary(image):
    ino = image.ialloc(FileType.FILE)
    first = b"a" * (mkfs.BLK_SIZE - 3)
    image.iappend(ino, first)
    image.iappend(ino, b"bcdefg")
    assert image.read_file(ino) == first + b"bcdefg"
    assert image.inode(ino).addrs[1] != 0


def test_add_missing_file(image, tmp_path):
    with pytest.raises(FileNotFoundError):
        image.add_file(tmp_path / "absent")


def test_add_file_name_too_long(image, tmp_path):
    src = tmp_path / ("n" * (mkfs.MAX_NAME + 1))
    src.write_bytes(b"x")
    with pytest.raises(ValueError):
        image.add_file(src)
    assert len(image.list_root()) == 2


def test_inode_pack_round_trip():
    inode = Inode(FileType.FILE, 0, 12345, list(range(mkfs.NDIRECT + 1)))
    packed = inode.pack()
    assert len(packed) == Inode.SIZE
    assert Inode.unpack(packed) == inode


def test_direntry_pack_round_trip():
    entry = DirEntry(7, "shell")
    assert DirEntry.unpack(entry.pack()) == entry


def test_inode_block_contains_inodes(image):
    raw = image.block(mkfs.INODE_START)
    root = Inode.unpack(raw[image.root * Inode.SIZE : (image.root + 1) * Inode.SIZE])
    assert root == image.inode(image.root)


def test_block_out_of_range(image):
    with pytest.raises(ValueError):
        image.block(mkfs.BLK_OFF - 1)
    with pytest.raises(ValueError):
        image.block(mkfs.BLK_NUM)


def test_to_bytes_layout(image):
    raw = image.to_bytes()
    assert len(raw) == mkfs.IMG_SIZE
    assert raw[: mkfs.BLK_SIZE] == image.block(mkfs.SUPER_BLK)
    off = (mkfs.DATA_START - mkfs.BLK_OFF) * mkfs.BLK_SIZE
    assert raw[off : off + DirEntry.SIZE] == DirEntry(image.root, ".").pack()


def test_main_missing_input(tmp_path):
    assert mkfs.main([str(tmp_path / "out.img"), str(tmp_path / "none")]) == 1
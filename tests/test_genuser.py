import pytest

from labosfs import genuser
from labosfs.genuser import UserFile


def _offset(entry):
    return (entry.start_sect - genuser.BASE_SECT) * genuser.SECTSIZE


def test_entry_size_and_capacity():
    packed = UserFile(257, 1, "a").pack()
    assert len(packed) == UserFile.SIZE == 32
    assert genuser.MAX_FILE * len(packed) == genuser.SECTSIZE


def test_single_file(tmp_path):
    src = tmp_path / "init"
    src.write_bytes(b"\x7fELF-body")
    image = genuser.build_user_image([src])
    (entry,) = genuser.read_user_table(image)
    assert entry == UserFile(genuser.FIRST_DATA_SECT, 9, "init")
    assert len(image) % genuser.SECTSIZE == 0
    start = _offset(entry)
    assert image[start : start + entry.length] == b"\x7fELF-body"
    assert image[start + entry.length :] == bytes(len(image) - start - entry.length)


def test_files_are_laid_out_in_order(tmp_path):
    first = tmp_path / "sh"
    first.write_bytes(b"a" * 600)
    second = tmp_path / "echo"
    second.write_bytes(b"b" * 10)
    image = genuser.build_user_image([first, second])
    a, b = genuser.read_user_table(image)
    assert b.start_sect == a.start_sect + 2
    assert image[_offset(b) : _offset(b) + b.length] == b"b" * 10
    assert len(image) == (1 + a.sectors + b.sectors) * genuser.SECTSIZE


def test_empty_file_takes_no_sectors(tmp_path):
    empty = tmp_path / "empty"
    empty.write_bytes(b"")
    other = tmp_path / "other"
    other.write_bytes(b"x")
    first, second = genuser.read_user_table(genuser.build_user_image([empty, other]))
    assert first.length == 0
    assert second.start_sect == first.start_sect


def test_too_many_files(tmp_path):
    paths = []
    for i in range(genuser.MAX_FILE + 1):
        p = tmp_path / f"f{i}"
        p.write_bytes(b"x")
        paths.append(p)
    with pytest.raises(ValueError):
        genuser.build_user_image(paths)


def test_name_too_long(tmp_path):
    src = tmp_path / ("n" * (genuser.MAX_NAME + 1))
    src.write_bytes(b"x")
    with pytest.raises(ValueError):
        genuser.build_user_image([src])


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        genuser.build_user_image([tmp_path / "absent"])


def test_read_table_rejects_short_image():
    with pytest.raises(ValueError):
        genuser.read_user_table(b"\0" * 10)


def test_userfile_pack_round_trip():
    entry = UserFile(300, 4500, "loaduser")
    assert UserFile.unpack(entry.pack()) == entry


def test_write_user_image(tmp_path):
    src = tmp_path / "prog"
    src.write_bytes(b"code" * 200)
    target = tmp_path / "user.img"
    genuser.write_user_image(target, [src])
    assert target.read_bytes() == genuser.build_user_image([src])


def test_main(tmp_path):
    src = tmp_path / "prog"
    src.write_bytes(b"abc")
    target = tmp_path / "user.img"
    assert genuser.main([str(target), str(src)]) == 0
    assert genuser.read_user_table(target.read_bytes())[0].name == "prog"


def test_main_reports_error(tmp_path):
    assert genuser.main([str(tmp_path / "user.img"), str(tmp_path / "none")]) == 1
import os
import stat

import pytest

from draftxfer.files import (
    create_target_files,
    dirname,
    get_file_info,
    parse_size,
    parse_target,
    read_chunk,
    rooted_path,
    write_chunk,
)
from draftxfer.model import FileInfo, FileStatus, NetworkTarget


def test_read_chunk_full_and_short(tmp_path):
    p = tmp_path / "data.bin"
    content = bytes(range(256)) * 4
    p.write_bytes(content)
    fd = os.open(p, os.O_RDONLY)
    try:
        assert read_chunk(fd, 100, 10) == content[10:110]
        assert read_chunk(fd, 5000, 1000) == content[1000:]
        assert read_chunk(fd, 10, len(content)) == b""
    finally:
        os.close(fd)


def test_write_chunk_stream():
    r, w = os.pipe()
    try:
        n = write_chunk(w, [b"ab", b"", b"cd"])
        assert n == 4
        assert os.read(r, 10) == b"abcd"
    finally:
        os.close(r)
        os.close(w)


def test_write_chunk_at_offset(tmp_path):
    p = tmp_path / "out.bin"
    p.write_bytes(b"\0" * 8)
    fd = os.open(p, os.O_RDWR)
    try:
        assert write_chunk(fd, [b"xy", b"z"], 4) == 3
    finally:
        os.close(fd)
    data = p.read_bytes()
    assert data[4:7] == b"xyz"
    assert data[:4] == b"\0" * 4


def test_write_chunk_offset_out_of_range(tmp_path):
    fd = os.open(tmp_path / "o", os.O_RDWR | os.O_CREAT)
    try:
        with pytest.raises(OverflowError):
            write_chunk(fd, [b"a"], 1 << 63)
    finally:
        os.close(fd)


def test_get_file_info_missing(tmp_path):
    assert get_file_info(str(tmp_path / "nope")) == []


def test_get_file_info_single_file(tmp_path):
    p = tmp_path / "one.txt"
    p.write_bytes(b"hello")
    infos = get_file_info(str(p))
    assert len(infos) == 1
    assert infos[0].id == 1
    assert infos[0].status.size == 5
    assert stat.S_ISREG(infos[0].status.mode)


def test_get_file_info_directory(tmp_path):
    (tmp_path / "sub").mkdir()
    (tmp_path / "a.txt").write_bytes(b"a")
    (tmp_path / "sub" / "b.txt").write_bytes(b"bb")
    infos = get_file_info(str(tmp_path))
    dirs = [i for i in infos if stat.S_ISDIR(i.status.mode)]
    files = [i for i in infos if not stat.S_ISDIR(i.status.mode)]
    assert len(dirs) == 1 and dirs[0].id == 0
    assert sorted(i.id for i in files) == [1, 2]
    assert {os.path.basename(i.path) for i in files} == {"a.txt", "b.txt"}
    index = {os.path.basename(i.path): n for n, i in enumerate(infos)}
    assert index["sub"] < index["b.txt"]


def test_parse_target_with_port():
    assert parse_target("10.0.0.1:9000") == NetworkTarget("10.0.0.1", 9000)


def test_parse_target_default_port():
    assert parse_target("host") == NetworkTarget("host", 2021)
    assert parse_target("host:") == NetworkTarget("host", 2021)


@pytest.mark.parametrize("text", ["", "h:12x", "h:70000", "h:abc"])
def test_parse_target_errors(text):
    with pytest.raises(ValueError):
        parse_target(text)


def test_parse_size():
    assert parse_size("123") == 123
    with pytest.raises(ValueError):
        parse_size("12k")
    with pytest.raises(ValueError):
        parse_size("")


@pytest.mark.parametrize(
    "path,expected",
    [("/usr/lib", "/usr"), ("/usr/", "/"), ("usr", "."), ("/", "/"), ("", ".")],
)
def test_dirname(path, expected):
    assert dirname(path) == expected


def test_rooted_path(tmp_path):
    result = rooted_path(str(tmp_path), "dir/file", ".part")
    assert result == tmp_path / "dir" / "file.part"
    assert result.is_absolute()


def test_create_target_files(tmp_path):
    infos = [
        FileInfo(path="sub/f.bin", status=FileStatus(mode=stat.S_IFREG | 0o644, size=8192), id=1),
        FileInfo(path="empty", status=FileStatus(mode=stat.S_IFREG | 0o600, size=0), id=2),
        FileInfo(path="d", status=FileStatus(mode=stat.S_IFDIR | 0o755), id=0),
    ]
    create_target_files(str(tmp_path), infos)
    assert (tmp_path / "sub" / "f.bin").stat().st_size == 8192
    assert (tmp_path / "empty").stat().st_size == 0
    assert not (tmp_path / "d").exists()


def test_create_target_files_too_large(tmp_path):
    info = FileInfo(path="big", status=FileStatus(mode=stat.S_IFREG | 0o644, size=1 << 64))
    with pytest.raises(ValueError):
        create_target_files(str(tmp_path), [info])
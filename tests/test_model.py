import pytest

from draftxfer.model import (
    BLOCK_SIZE,
    FileInfo,
    FileStatus,
    NetworkTarget,
    SessionConfig,
    round_block_size,
)


def test_round_block_size_exact_values():
    assert round_block_size(0) == 0
    assert round_block_size(1) == BLOCK_SIZE
    assert round_block_size(BLOCK_SIZE) == BLOCK_SIZE
    assert round_block_size(BLOCK_SIZE + 1) == 2 * BLOCK_SIZE


@pytest.mark.parametrize("n", [3, 4095, 4097, 123456, 1 << 22, (1 << 22) + 7])
def test_round_block_size_invariants(n):
    r = round_block_size(n)
    assert r % BLOCK_SIZE == 0
    assert r >= n
    assert r - n < BLOCK_SIZE


def test_status_keys():
    keys = set(FileStatus().to_dict())
    assert keys == {"mode", "uid", "gid", "dev", "blksize", "blocks", "size"}


def test_status_round_trip():
    status = FileStatus(mode=0o100644, uid=5, gid=6, dev=7, blk_size=512, blk_count=9, size=4000)
    assert FileStatus.from_dict(status.to_dict()) == status


def test_file_info_round_trip_with_suffix():
    info = FileInfo(path="a/b.txt", status=FileStatus(size=10), id=3, target_suffix=".part")
    data = info.to_dict()
    assert data["target_suffix"] == ".part"
    assert FileInfo.from_dict(data) == info


def test_file_info_without_suffix_omits_key():
    info = FileInfo(path="x", id=1)
    data = info.to_dict()
    assert "target_suffix" not in data
    assert FileInfo.from_dict(data).target_suffix == ""


def test_from_dict_missing_key():
    data = FileInfo(path="x").to_dict()
    del data["id"]
    with pytest.raises(KeyError):
        FileInfo.from_dict(data)
    status = FileStatus().to_dict()
    del status["blocks"]
    with pytest.raises(KeyError):
        FileStatus.from_dict(status)


def test_session_config_defaults():
    conf = SessionConfig()
    assert conf.path_root == "."
    assert conf.use_direct_io is True
    assert conf.no_write is False
    assert conf.targets == []
    assert conf.service == NetworkTarget()
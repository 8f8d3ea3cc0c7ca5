import hashlib
from pathlib import Path

import pytest

from retrolaunch.exceptions import IoError
from retrolaunch.hash_utils import ContentHasher, calculate_sha1


@pytest.mark.parametrize("chunk_size", [1, 7, 64, 4096, 1 << 20])
def test_digest_does_not_depend_on_chunk_size(tmp_path: Path, chunk_size: int):
    payload = bytes(range(256)) * 97 + b"tail"
    rom = tmp_path / "game.sfc"
    rom.write_bytes(payload)

    assert ContentHasher(chunk_size).hash_file(rom) == hashlib.sha1(payload).hexdigest()


def test_empty_file_hashes_to_sha1_of_nothing(tmp_path: Path):
    rom = tmp_path / "empty.nes"
    rom.write_bytes(b"")

    assert calculate_sha1(rom) == "da39a3ee5e6b4b0d3255bfef95601890afd80709"


def test_digest_is_forty_lowercase_hex_digits(tmp_path: Path):
    rom = tmp_path / "game.gb"
    rom.write_bytes(b"abc")

    digest = calculate_sha1(str(rom))
    assert digest == "a9993e364706816aba3e25717850c26c9cd0d89d"
    assert len(digest) == 40


def test_missing_file_raises_io_error(tmp_path: Path):
    missing = tmp_path / "nope.gba"
    with pytest.raises(IoError) as excinfo:
        ContentHasher().hash_file(missing)
    assert excinfo.value.file_path == str(missing)
    assert isinstance(excinfo.value.os_error, FileNotFoundError)
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_directory_raises_io_error(tmp_path: Path):
    with pytest.raises(IoError):
        ContentHasher().hash_file(tmp_path)


def test_non_positive_chunk_size_is_rejected():
    with pytest.raises(ValueError):
        ContentHasher(0)

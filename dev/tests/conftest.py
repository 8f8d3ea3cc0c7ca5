from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure repo root on path
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

CD_SYNC = b"\x00" + b"\xff" * 10 + b"\x00"
PS1_MAGIC = CD_SYNC + b"\x00\x02\x00\x02"
SCD_MAGIC = CD_SYNC + b"\x00\x02\x00\x01"
PCECD_MAGIC = b"\x82\xb1\x82\xcc\x83\x76\x83\x8d\x83\x4f\x83\x89\x83\x80\x82\xcc"

RAW_SECTOR = 2352


def dat_game(name: str, sha1: str, rom_name: str = "game.rom") -> str:
    return (
        "game (\n"
        f'\tname "{name}"\n'
        f'\tdescription "{name}"\n'
        f'\trom ( name "{rom_name}" size 4 crc 12345678 md5 0123456789abcdef0123456789abcdef sha1 {sha1} )\n'
        ")\n"
    )


@pytest.fixture
def write_dat(tmp_path: Path):
    """Write a DAT file named ``<system>.dat`` under tmp_path/db."""

    def _write(system: str, games, header: str = "") -> Path:
        db_dir = tmp_path / "db"
        db_dir.mkdir(exist_ok=True)
        body = header or f'clrmamepro (\n\tname "{system} test set"\n\tversion 1\n)\n'
        body += "".join(dat_game(name, sha1) for name, sha1 in games)
        path = db_dir / f"{system}.dat"
        path.write_text(body, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_disc(tmp_path: Path):
    """Build a cue sheet plus a track file with ``payload`` at ``offset``."""

    def _make(payload: bytes, offset: int = 0, cue_body: str = "", size: int = 0,
              track_name: str = "game.bin") -> Path:
        data = bytearray(max(size, offset + len(payload)))
        data[offset:offset + len(payload)] = payload
        (tmp_path / track_name).write_bytes(bytes(data))
        cue = tmp_path / "game.cue"
        cue.write_text(
            cue_body or (
                f'FILE "{track_name}" BINARY\n'
                "  TRACK 01 MODE1/2352\n"
                "    INDEX 01 00:00:00\n"
            ),
            encoding="utf-8",
        )
        return cue

    return _make

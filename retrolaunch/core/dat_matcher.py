#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""retrolaunch - DAT matching

Maps a content hash to a canonical game name using ClrMamePro-style text DATs
found in one directory. Each DAT file stands for one system; the system tag
is the DAT file name up to its first dot (``snes.dat`` -> ``snes``).

Records are found with an anchored token scan rather than a full grammar:

    game ( name "Some Game" ... rom ( ... sha1 0123... ) )

The scan looks for ``game``, then ``name`` and its value, then ``sha1`` and
its value. Everything between the anchors is skipped.

When no DAT knows the hash, a fixed extension table still gives the system,
with the canonical name left as ``unknown``.
"""

from __future__ import annotations

import logging
from contextlib import closing
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, List, Mapping, Optional, Union

from ..exceptions import IoError, NotFoundError, TokenNotFoundError
from ..hash_utils import ContentHasher
from .models import UNKNOWN_NAME, DatRecord, GameIdentity, hashes_equal
from .tokenizer import MAX_TOKEN_LEN, Tokenizer, open_tokens

logger = logging.getLogger(__name__)

DEFAULT_DAT_PATTERN = "*.dat"

EXTENSION_SYSTEMS: Mapping[str, str] = MappingProxyType({
    ".nes": "nes",
    ".sfc": "snes",
    ".smc": "snes",
    ".gen": "smd",
    ".smd": "smd",
    ".bin": "smd",
    ".gg": "gg",
    ".sms": "sms",
    ".pce": "pce",
    ".gba": "gba",
    ".gb": "gb",
    ".gbc": "gbc",
    ".nds": "nds",
})


def system_tag(dat_path: Union[str, Path]) -> str:
    """Return the system tag a DAT file contributes (file name up to the first dot)."""
    name = Path(dat_path).name
    return name.split(".", 1)[0]


def fallback_identity(rom_path: Union[str, Path]) -> GameIdentity:
    """Guess the system from the file extension alone.

    Raises:
        NotFoundError: the extension is not in EXTENSION_SYSTEMS.
    """
    ext = Path(rom_path).suffix.lower()
    system = EXTENSION_SYSTEMS.get(ext)
    if system is None:
        raise NotFoundError(f"No system known for extension {ext or '<none>'!r}", what="extension",
                            details={"rom_path": str(rom_path)})
    logger.info("Falling back to extension %s -> %s", ext, system)
    return GameIdentity(system=system, canonical_name=UNKNOWN_NAME)


def _read_record(tokens: Tokenizer, system: str) -> Optional[DatRecord]:
    """Read the next game/name/sha1 group, or None when the stream runs out."""
    try:
        tokens.find_token("game")
        tokens.find_token("name")
        name = tokens.next_token()
        if name is None:
            return None
        tokens.find_token("sha1")
        sha1 = tokens.next_token()
    except TokenNotFoundError:
        return None
    if sha1 is None:
        return None
    return DatRecord(system=system, name=name, sha1=sha1)


class DatMatcher:
    """Hash -> canonical name lookup over a directory of DAT files."""

    def __init__(self, db_dir: Union[str, Path], pattern: str = DEFAULT_DAT_PATTERN,
                 max_token_len: int = MAX_TOKEN_LEN) -> None:
        self.db_dir = Path(db_dir)
        self.pattern = pattern
        self.max_token_len = max_token_len

    def dat_files(self) -> List[Path]:
        if not self.db_dir.is_dir():
            logger.warning("DAT directory %s does not exist", self.db_dir)
            return []
        return sorted(p for p in self.db_dir.glob(self.pattern) if p.is_file())

    def iter_records(self, dat_path: Union[str, Path]) -> Iterator[DatRecord]:
        system = system_tag(dat_path)
        try:
            with open_tokens(dat_path, self.max_token_len) as tokens:
                while True:
                    record = _read_record(tokens, system)
                    if record is None:
                        return
                    yield record
        except IoError as exc:
            raise IoError(f"Failed scanning DAT {dat_path}: {exc}", file_path=str(dat_path),
                          os_error=exc.os_error, details={"dat_system": system}) from exc

    def lookup(self, content_hash: str) -> GameIdentity:
        """Return the identity of the first record whose sha1 matches.

        Raises:
            NotFoundError: no DAT file has the hash.
            IoError: a DAT file could not be read.
        """
        for dat_path in self.dat_files():
            logger.debug("Scanning %s", dat_path)
            with closing(self.iter_records(dat_path)) as records:
                for record in records:
                    if hashes_equal(record.sha1, content_hash):
                        logger.info("Hash %s matched %s in %s", content_hash, record.name, dat_path.name)
                        return GameIdentity(system=record.system, canonical_name=record.name)
        raise NotFoundError(f"Could not detect rom with hash {content_hash}", what="hash",
                            details={"db_dir": str(self.db_dir)})

    def identify_rom(self, rom_path: Union[str, Path],
                     hasher: Optional[ContentHasher] = None) -> GameIdentity:
        """Hash ``rom_path``, look it up and fall back to the extension table."""
        content_hash = (hasher or ContentHasher()).hash_file(rom_path)
        try:
            return self.lookup(content_hash)
        except NotFoundError:
            logger.info("No DAT entry for %s (%s)", rom_path, content_hash)
            return fallback_identity(rom_path)


class IdList:
    """``<id> <title>`` pairs, e.g. disc product codes to game titles."""

    def __init__(self, path: Union[str, Path], max_token_len: int = MAX_TOKEN_LEN) -> None:
        self.path = Path(path)
        self.max_token_len = max_token_len

    def lookup(self, entry_id: str) -> str:
        """Return the title paired with ``entry_id`` (ids compare case-insensitively).

        Raises:
            NotFoundError: the id is not listed.
            IoError: the list could not be read.
        """
        wanted = entry_id.strip().upper()
        with open_tokens(self.path, self.max_token_len) as tokens:
            while True:
                key = tokens.next_token()
                if key is None:
                    break
                title = tokens.next_token()
                if title is None:
                    break
                if key.upper() == wanted:
                    return title
        raise NotFoundError(f"{entry_id} is not listed in {self.path}", what="id",
                            details={"id_list": str(self.path)})

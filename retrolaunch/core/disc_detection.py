"""Disc image identification from a cue sheet.

The cue sheet is scanned for its first data track; the 16 bytes at that
track's start are compared against a fixed table of sector signatures to find
the target system.

Cue sheets are read through the shared tokenizer, in three phases:

- seek file: ``FILE <name> <type>`` remembers the backing file, relative to
  the cue sheet's directory,
- seek track type: ``TRACK <n> <mode>``; ``AUDIO`` tracks are skipped,
- seek index: the first ``INDEX <n> <MM:SS:FF>`` after the data track gives
  its position inside the backing file.

Positions are converted with the standard CD addressing rule: 75 frames per
second, one frame per sector, then sector number times sector size.

References:
- Raw sector header: 12 sync bytes (00 FF*10 00), BCD MSF address, mode byte
- PS1 SYSTEM.CNF: ``BOOT = cdrom:\\SLUS_123.45;1``
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

from ..exceptions import IoError, NotFoundError, ParseError, ValidationError
from .dat_matcher import IdList
from .models import MAGIC_LEN, UNKNOWN_NAME, GameIdentity, MagicSignature, TrackDescriptor
from .tokenizer import MAX_TOKEN_LEN, Tokenizer, open_tokens

logger = logging.getLogger(__name__)

FRAMES_PER_SECOND = 75
SECONDS_PER_MINUTE = 60

# Sector sizes
SECTOR_2352 = 2352  # Raw CD sector with header/ecc
_KNOWN_SECTOR_SIZES = frozenset({2048, 2324, 2336, 2352})

_CD_SYNC = b"\x00" + b"\xff" * 10 + b"\x00"

MAGIC_SIGNATURES: Tuple[MagicSignature, ...] = (
    # Mode 2 sector at 00:02:00
    MagicSignature("ps1", _CD_SYNC + b"\x00\x02\x00\x02"),
    # Shift-JIS start of the PC Engine CD-ROM warning text
    MagicSignature("pcecd", b"\x82\xb1\x82\xcc\x83\x76\x83\x8d\x83\x4f\x83\x89\x83\x80\x82\xcc"),
    # Mode 1 sector at 00:02:00
    MagicSignature("scd", _CD_SYNC + b"\x00\x02\x00\x01"),
)

PS1_SYSTEM = "ps1"
PS1_BOOT_MARKER = b"cdrom:"
PRODUCT_CODE_LEN = 11
_PRODUCT_CODE_MAX_SCAN = 64
_SCAN_CHUNK = 64 * 1024

_MSF_RE = re.compile(r"^(\d{1,3}):(\d{1,2}):(\d{1,2})$")


def parse_msf(stamp: str, source: Optional[str] = None) -> Tuple[int, int, int]:
    """Parse ``MM:SS:FF`` into (minutes, seconds, frames)."""
    match = _MSF_RE.match(stamp.strip())
    if not match:
        raise ParseError(f"Error parsing time stamp {stamp!r}", source)
    minutes, seconds, frames = (int(part) for part in match.groups())
    if seconds >= SECONDS_PER_MINUTE or frames >= FRAMES_PER_SECOND:
        raise ParseError(f"Time stamp out of range {stamp!r}", source)
    return minutes, seconds, frames


def msf_to_sector(minutes: int, seconds: int, frames: int) -> int:
    return (minutes * SECONDS_PER_MINUTE + seconds) * FRAMES_PER_SECOND + frames


def sector_size_for_mode(mode: str) -> int:
    """Bytes per sector for a cue track mode such as ``MODE1/2048``; raw 2352 otherwise."""
    _, _, size = mode.partition("/")
    if size.isdigit() and int(size) in _KNOWN_SECTOR_SIZES:
        return int(size)
    return SECTOR_2352


def format_product_code(code: bytes) -> str:
    """Rewrite ``SLUS_123.45`` as ``SLUS-12345``."""
    code = code.strip()
    if len(code) != PRODUCT_CODE_LEN:
        raise ValidationError(f"Product code {code!r} is not {PRODUCT_CODE_LEN} characters wide")
    canonical = code[:4] + b"-" + code[5:8] + code[9:11]
    try:
        return canonical.decode("ascii").upper()
    except UnicodeDecodeError as exc:
        raise ValidationError(f"Product code {code!r} is not ASCII") from exc


def normalize_product_code(raw: bytes) -> str:
    """Turn the bytes that follow the boot marker into a canonical product code."""
    end = raw.find(b";")
    if end < 0:
        raise ValidationError(f"Product code is not terminated: {raw[:_PRODUCT_CODE_MAX_SCAN]!r}")
    code = raw[:end]
    cut = max(code.rfind(b"\\"), code.rfind(b"/"))
    return format_product_code(code[cut + 1:])


def _read_after_marker(f: BinaryIO, marker: bytes, limit: int) -> Optional[bytes]:
    """Return up to ``limit`` bytes following the first ``marker`` in ``f``."""
    carry = b""
    while True:
        chunk = f.read(_SCAN_CHUNK)
        if not chunk:
            return None
        data = carry + chunk
        idx = data.find(marker)
        if idx >= 0:
            tail = data[idx + len(marker):]
            while len(tail) < limit:
                more = f.read(limit - len(tail))
                if not more:
                    break
                tail += more
            return tail[:limit]
        carry = data[-(len(marker) - 1):]


class DiscImageAnalyzer:
    """Identify a CD image described by a cue sheet."""

    def __init__(self, id_list_path: Optional[Union[str, Path]] = None,
                 max_token_len: int = MAX_TOKEN_LEN) -> None:
        self.id_list_path = Path(id_list_path) if id_list_path else None
        self.max_token_len = max_token_len

    @staticmethod
    def _seek_index(tokens: Tokenizer) -> None:
        for token in tokens:
            if token.upper() == "INDEX":
                return
        raise ParseError("Data track has no INDEX", tokens.source)

    @staticmethod
    def _read_int(tokens: Tokenizer, what: str) -> int:
        token = tokens.expect_token(what)
        try:
            return int(token)
        except ValueError as exc:
            raise ParseError(f"Bad {what} {token!r}", tokens.source) from exc

    def find_first_data_track(self, cue_path: Union[str, Path]) -> TrackDescriptor:
        """Return the backing file and byte offset of the first non-audio track.

        Raises:
            ParseError: malformed cue sheet, bad timestamp or no data track.
            IoError: the cue sheet could not be read.
        """
        cue_path = Path(cue_path)
        cue_dir = cue_path.absolute().parent
        track_file: Optional[Path] = None

        logger.info("Parsing CUE file %s", cue_path)
        with open_tokens(cue_path, self.max_token_len) as tokens:
            for token in tokens:
                keyword = token.upper()
                if keyword == "FILE":
                    track_file = cue_dir / tokens.expect_token("FILE name")
                    continue
                if keyword != "TRACK":
                    continue

                number = self._read_int(tokens, "TRACK number")
                mode = tokens.expect_token("TRACK mode")
                if mode.upper() == "AUDIO":
                    logger.debug("Skipping audio track %d", number)
                    continue
                if track_file is None:
                    raise ParseError(f"Track {number} has no FILE", tokens.source)

                self._seek_index(tokens)
                self._read_int(tokens, "INDEX number")
                stamp = tokens.expect_token("INDEX time stamp")
                sector = msf_to_sector(*parse_msf(stamp, tokens.source))
                sector_size = sector_size_for_mode(mode)
                track = TrackDescriptor(
                    file_path=track_file,
                    start_offset=sector * sector_size,
                    track_number=number,
                    mode=mode,
                    sector_size=sector_size,
                )
                logger.info("Found 1st data track on file '%s+%d'", track.file_path, track.start_offset)
                return track

        raise ParseError("no data track", str(cue_path))

    def identify_system(self, track: TrackDescriptor) -> str:
        """Match the 16 bytes at the track start against MAGIC_SIGNATURES.

        Raises:
            ValidationError: fewer than 16 bytes available, or no signature matches.
            IoError: the track file could not be read.
        """
        try:
            with open(track.file_path, "rb") as f:
                f.seek(track.start_offset)
                magic = f.read(MAGIC_LEN)
        except OSError as exc:
            raise IoError(f"Could not read track {track.file_path}: {exc}",
                          file_path=str(track.file_path), os_error=exc) from exc

        if len(magic) < MAGIC_LEN:
            raise ValidationError(
                f"Only {len(magic)} bytes at offset {track.start_offset}, need {MAGIC_LEN}",
                file_path=str(track.file_path),
            )

        for signature in MAGIC_SIGNATURES:
            if signature.matches(magic):
                return signature.system

        raise ValidationError("Could not find compatible system", file_path=str(track.file_path),
                              details={"magic": magic.hex()})

    def read_product_code(self, track: TrackDescriptor) -> str:
        """Find the PS1 boot executable name in the track and return it as ``SLUS-12345``.

        Raises:
            NotFoundError: the boot marker does not occur in the track.
            ValidationError: the code after the marker is malformed.
            IoError: the track file could not be read.
        """
        try:
            with open(track.file_path, "rb") as f:
                raw = _read_after_marker(f, PS1_BOOT_MARKER, _PRODUCT_CODE_MAX_SCAN)
        except OSError as exc:
            raise IoError(f"Could not scan track {track.file_path}: {exc}",
                          file_path=str(track.file_path), os_error=exc) from exc

        if raw is None:
            raise NotFoundError(f"No boot marker in {track.file_path}", what="product_code")
        return normalize_product_code(raw)

    def _lookup_title(self, product_code: str) -> str:
        if self.id_list_path is None or not self.id_list_path.is_file():
            logger.debug("No id list to resolve %s", product_code)
            return UNKNOWN_NAME
        try:
            return IdList(self.id_list_path, self.max_token_len).lookup(product_code)
        except NotFoundError:
            logger.info("%s is not in %s", product_code, self.id_list_path)
            return UNKNOWN_NAME

    def detect(self, cue_path: Union[str, Path]) -> GameIdentity:
        """Identify the disc behind ``cue_path``."""
        track = self.find_first_data_track(cue_path)
        logger.info("Reading 1st data track...")
        system = self.identify_system(track)
        if system != PS1_SYSTEM:
            return GameIdentity(system=system, canonical_name=UNKNOWN_NAME)

        try:
            product_code = self.read_product_code(track)
        except (NotFoundError, ValidationError) as exc:
            logger.info("No product code for %s: %s", cue_path, exc)
            return GameIdentity(system=system, canonical_name=UNKNOWN_NAME)

        title = self._lookup_title(product_code)
        return GameIdentity(system=system, canonical_name=title, product_code=product_code)

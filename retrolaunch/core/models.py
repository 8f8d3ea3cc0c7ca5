"""Value types shared by the identification and launch-resolution pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional

UNKNOWN_NAME = "unknown"

MAGIC_LEN = 16

FLAG_MULTITAP = "multitap"
FLAG_DUALANALOG = "dualanalog"
KNOWN_FLAGS: FrozenSet[str] = frozenset({FLAG_MULTITAP, FLAG_DUALANALOG})


def hashes_equal(left: str, right: str) -> bool:
    return left.strip().lower() == right.strip().lower()


@dataclass(frozen=True)
class DatRecord:
    """One ``game`` entry of a database file."""

    system: str
    name: str
    sha1: str


@dataclass(frozen=True)
class MagicSignature:
    """Fixed 16-byte pattern identifying a disc's target system."""

    system: str
    magic: bytes

    def __post_init__(self) -> None:
        if len(self.magic) != MAGIC_LEN:
            raise ValueError(
                f"Magic signature for {self.system!r} must be {MAGIC_LEN} bytes, got {len(self.magic)}"
            )

    def matches(self, data: bytes) -> bool:
        return len(data) == MAGIC_LEN and data == self.magic


@dataclass(frozen=True)
class TrackDescriptor:
    """First non-audio track of a cue sheet."""

    file_path: Path
    start_offset: int
    track_number: int = 1
    mode: str = ""
    sector_size: int = 2352

    def __post_init__(self) -> None:
        if self.start_offset < 0:
            raise ValueError(f"Track start offset cannot be negative: {self.start_offset}")


@dataclass(frozen=True)
class GameIdentity:
    """What a piece of content is: target system plus canonical name."""

    system: str
    canonical_name: str = UNKNOWN_NAME
    product_code: Optional[str] = None

    @property
    def is_unknown(self) -> bool:
        return self.canonical_name == UNKNOWN_NAME

    @property
    def qualified_name(self) -> str:
        return f"{self.system}.{self.canonical_name}"

    def __str__(self) -> str:
        return self.qualified_name


@dataclass(frozen=True)
class RunConfig:
    """Core selection and compatibility flags for the external launcher."""

    core: str
    flags: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def multitap(self) -> bool:
        return FLAG_MULTITAP in self.flags

    @property
    def dualanalog(self) -> bool:
        return FLAG_DUALANALOG in self.flags


@dataclass(frozen=True)
class LaunchRule:
    pattern: str
    core: str
    flags: FrozenSet[str] = field(default_factory=frozenset)

    def to_run_config(self) -> RunConfig:
        return RunConfig(core=self.core, flags=self.flags)


@dataclass(frozen=True)
class LaunchPlan:
    """Everything the launcher needs: the input path, what it is and how to run it."""

    rom_path: Path
    identity: GameIdentity
    run_config: RunConfig

"""Public pipeline API: path -> GameIdentity -> RunConfig.

Callers outside the core (a launcher script, a frontend) get a tagged
``Result`` from plan_launch(); the individual steps raise the typed errors of
``retrolaunch.exceptions``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from ..config.models import LauncherSettings
from ..core.dat_matcher import DatMatcher
from ..core.disc_detection import DiscImageAnalyzer
from ..core.models import GameIdentity, LaunchPlan, RunConfig
from ..emulator.launch_rules import LaunchRuleResolver
from ..hash_utils import ContentHasher
from ..logging_config import LoggingTimer, setup_logging
from ..utils.result import Result, capture, error_message, is_err

logger = logging.getLogger(__name__)

CUE_EXTENSION = ".cue"

PathLike = Union[str, Path]


def is_cue_sheet(path: PathLike) -> bool:
    return Path(path).suffix.lower() == CUE_EXTENSION


def configure_logging(settings: Optional[LauncherSettings] = None,
                      log_file: Optional[PathLike] = None,
                      structured_json: Optional[bool] = None) -> Dict[str, logging.Handler]:
    """Install the ``retrolaunch`` log handlers at ``settings.log_level``."""
    settings = settings or LauncherSettings()
    return setup_logging(settings.log_level, log_file=log_file, structured_json=structured_json)


def detect(path: PathLike, settings: Optional[LauncherSettings] = None) -> GameIdentity:
    """Identify the game at ``path``; cue sheets go to the disc analyzer, anything else is hashed."""
    settings = settings or LauncherSettings()
    if is_cue_sheet(path):
        analyzer = DiscImageAnalyzer(settings.ps1_id_list, max_token_len=settings.max_token_len)
        with LoggingTimer(f"disc analysis of {path}"):
            identity = analyzer.detect(path)
    else:
        matcher = DatMatcher(settings.db_dir, settings.dat_pattern, max_token_len=settings.max_token_len)
        with LoggingTimer(f"rom identification of {path}"):
            identity = matcher.identify_rom(path, ContentHasher(settings.hash_chunk_size))
    logger.info("Game is `%s`", identity.qualified_name)
    return identity


def resolve_launch(identity: GameIdentity, settings: Optional[LauncherSettings] = None) -> RunConfig:
    """Resolve the canonical name against the rule file.

    With ``settings.match_qualified_names`` a rule may also match the
    ``system.name`` form of the identity.
    """
    settings = settings or LauncherSettings()
    resolver = LaunchRuleResolver(settings.rules_path, max_token_len=settings.max_token_len)
    if settings.match_qualified_names:
        return resolver.resolve_identity(identity)
    return resolver.resolve(identity.canonical_name)


def build_plan(path: PathLike, settings: Optional[LauncherSettings] = None) -> LaunchPlan:
    """Run identification then rule resolution; the first failure stops the pipeline."""
    identity = detect(path, settings)
    run_config = resolve_launch(identity, settings)
    return LaunchPlan(rom_path=Path(path), identity=identity, run_config=run_config)


def plan_launch(path: PathLike, settings: Optional[LauncherSettings] = None) -> Result[LaunchPlan]:
    """Tagged-result form of build_plan()."""
    result = capture(lambda: build_plan(path, settings))
    if is_err(result):
        logger.error("Could not plan launch for %s: %s", path, error_message(result))
    return result

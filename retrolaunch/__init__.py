#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
retrolaunch - identify a game image by content and pick how to launch it.

ROM files are hashed and looked up in DAT files; cue sheets are parsed and
their first data track is matched against disc signatures. The resulting
identity is resolved against a launch-rule file into a core and flags.
"""

__version__ = "0.3.0"

from .app.api import build_plan, detect, plan_launch, resolve_launch
from .core.models import GameIdentity, LaunchPlan, RunConfig

__all__ = [
    "GameIdentity",
    "LaunchPlan",
    "RunConfig",
    "__version__",
    "build_plan",
    "detect",
    "plan_launch",
    "resolve_launch",
]

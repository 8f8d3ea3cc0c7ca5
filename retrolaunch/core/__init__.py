#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
retrolaunch - Core Package

Tokenizer, DAT matching and disc image analysis.
"""

from .dat_matcher import EXTENSION_SYSTEMS, DatMatcher, IdList, fallback_identity, system_tag
from .disc_detection import MAGIC_SIGNATURES, DiscImageAnalyzer, msf_to_sector, parse_msf
from .models import (
    UNKNOWN_NAME,
    DatRecord,
    GameIdentity,
    LaunchPlan,
    LaunchRule,
    MagicSignature,
    RunConfig,
    TrackDescriptor,
)
from .tokenizer import MAX_TOKEN_LEN, Tokenizer, open_tokens

__all__ = [
    "DatMatcher",
    "DatRecord",
    "DiscImageAnalyzer",
    "EXTENSION_SYSTEMS",
    "GameIdentity",
    "IdList",
    "LaunchPlan",
    "LaunchRule",
    "MAGIC_SIGNATURES",
    "MAX_TOKEN_LEN",
    "MagicSignature",
    "RunConfig",
    "Tokenizer",
    "TrackDescriptor",
    "UNKNOWN_NAME",
    "fallback_identity",
    "msf_to_sector",
    "open_tokens",
    "parse_msf",
    "system_tag",
]

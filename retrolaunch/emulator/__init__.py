"""Emulator integration: launch-rule resolution.

Building the process argument list and starting the emulator is left to the
caller; this package only produces a RunConfig.
"""

from .launch_rules import LaunchRuleResolver, rules_to_text

__all__ = [
    "LaunchRuleResolver",
    "rules_to_text",
]

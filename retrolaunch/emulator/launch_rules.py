"""Launch rules - pick an emulation core and compatibility flags for a game.

Rule file grammar, one rule per group, evaluated top to bottom:

    <glob-pattern> <core-name> [flag ...] ;

    "Super*"   snes9x  multitap ;
    "ps1.*"    mednafen_psx dualanalog ;
    "*"        fceumm ;

Patterns use shell-glob semantics (``*``, ``?``, ``[...]``, ``[!...]``) with
no special meaning for path separators. The first matching rule wins, so
order in the file is significant.
"""

from __future__ import annotations

import logging
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, Set, Tuple, Union

from ..exceptions import NotFoundError, ParseError, TokenNotFoundError
from ..core.models import KNOWN_FLAGS, GameIdentity, LaunchRule, RunConfig
from ..core.tokenizer import MAX_TOKEN_LEN, Tokenizer, open_tokens

logger = logging.getLogger(__name__)

RULE_TERMINATOR = ";"


def _read_body(tokens: Tokenizer, pattern: str) -> LaunchRule:
    """Read core and flags of a rule whose pattern was just consumed."""
    core = tokens.next_token()
    if core is None or core == RULE_TERMINATOR:
        raise ParseError(f"Rule {pattern!r} has no core", tokens.source)

    flags: Set[str] = set()
    while True:
        token = tokens.next_token()
        if token is None or token == RULE_TERMINATOR:
            break
        flag = token.lower()
        if flag in KNOWN_FLAGS:
            flags.add(flag)
        else:
            logger.debug("Ignoring unknown flag %r in rule %r", token, pattern)
    return LaunchRule(pattern=pattern, core=core, flags=frozenset(flags))


class LaunchRuleResolver:
    """First-match resolution of names against a rule file."""

    def __init__(self, rules_path: Union[str, Path], max_token_len: int = MAX_TOKEN_LEN) -> None:
        self.rules_path = Path(rules_path)
        self.max_token_len = max_token_len

    def iter_rules(self) -> Iterator[LaunchRule]:
        """Yield every rule in declaration order."""
        with open_tokens(self.rules_path, self.max_token_len) as tokens:
            for pattern in tokens:
                if pattern == RULE_TERMINATOR:
                    continue
                yield _read_body(tokens, pattern)

    def _resolve(self, names: Tuple[str, ...]) -> RunConfig:
        with open_tokens(self.rules_path, self.max_token_len) as tokens:
            for pattern in tokens:
                if pattern == RULE_TERMINATOR:
                    continue
                if not any(fnmatchcase(name, pattern) for name in names):
                    try:
                        tokens.find_token(RULE_TERMINATOR)
                    except TokenNotFoundError:
                        break
                    continue

                rule = _read_body(tokens, pattern)
                logger.info("Rule %r matched %s -> core %s", pattern, names[0], rule.core)
                return rule.to_run_config()

        raise NotFoundError(f"Could not find suitable core for {names[0]!r}", what="launch_rule",
                            details={"rules_path": str(self.rules_path)})

    def resolve(self, canonical_name: str) -> RunConfig:
        """Return the run configuration of the first rule matching ``canonical_name``.

        Raises:
            NotFoundError: no rule matches.
            ParseError: the matching rule is malformed.
            IoError: the rule file could not be read.
        """
        return self._resolve((canonical_name,))

    def resolve_identity(self, identity: GameIdentity) -> RunConfig:
        """Like resolve, but a rule may match the canonical or the ``system.name`` form."""
        return self._resolve((identity.canonical_name, identity.qualified_name))


def _check_word(value: str, what: str, pattern: str) -> None:
    if not value or any(ch in value for ch in '";') or any(ch.isspace() for ch in value):
        raise ValueError(f"Rule {pattern!r}: {what} {value!r} cannot be written to a rule file")


def rules_to_text(rules: Iterable[LaunchRule]) -> str:
    """Render rules back into rule-file syntax.

    Raises:
        ValueError: a pattern contains ``"`` or ``;``, or a core or flag is
            empty or contains ``"``, ``;`` or whitespace. The format has no
            escape character for them.
    """
    lines = []
    for rule in rules:
        if any(ch in rule.pattern for ch in '";'):
            raise ValueError(f"Rule pattern {rule.pattern!r} cannot be written to a rule file")
        _check_word(rule.core, "core", rule.pattern)
        for flag in rule.flags:
            _check_word(flag, "flag", rule.pattern)
        parts = [f'"{rule.pattern}"', rule.core, *sorted(rule.flags), RULE_TERMINATOR]
        lines.append(" ".join(parts))
    return "\n".join(lines) + "\n"

from __future__ import annotations

from pathlib import Path

import pytest

from retrolaunch.core.models import GameIdentity, LaunchRule, RunConfig
from retrolaunch.emulator.launch_rules import LaunchRuleResolver, rules_to_text
from retrolaunch.exceptions import IoError, NotFoundError, ParseError


def _resolver(tmp_path: Path, text: str) -> LaunchRuleResolver:
    path = tmp_path / "launch.conf"
    path.write_text(text, encoding="utf-8")
    return LaunchRuleResolver(path)


def test_first_matching_rule_wins(tmp_path: Path):
    resolver = _resolver(tmp_path, '"Super*" coreA multitap ;\n"*" coreB ;\n')

    super_game = resolver.resolve("Super Game")
    other_game = resolver.resolve("Other Game")

    assert super_game == RunConfig("coreA", frozenset({"multitap"}))
    assert super_game.multitap and not super_game.dualanalog
    assert other_game == RunConfig("coreB", frozenset())


def test_earlier_broad_rule_shadows_later_specific_rule(tmp_path: Path):
    resolver = _resolver(tmp_path, '"*.foo" A ;\n"bar.foo" B ;\n')

    assert resolver.resolve("bar.foo").core == "A"


def test_non_matching_rules_are_skipped_with_their_flags(tmp_path: Path):
    resolver = _resolver(
        tmp_path,
        '"ps1.*" mednafen_psx dualanalog multitap ;\n'
        '"snes.*" snes9x multitap ;\n'
        '"gba.*" mgba ;\n',
    )

    assert resolver.resolve("gba.Metroid Fusion") == RunConfig("mgba")


def test_unknown_flags_are_ignored(tmp_path: Path):
    resolver = _resolver(tmp_path, '"*" pcsx rumble DualAnalog turbo ;')

    assert resolver.resolve("anything").flags == frozenset({"dualanalog"})


def test_glob_features(tmp_path: Path):
    resolver = _resolver(
        tmp_path,
        '"Mega Man [2-4]" nestopia ;\n'
        '"Mega Man ?" fceumm ;\n'
        '"[!A-Z]*" other ;\n',
    )

    assert resolver.resolve("Mega Man 3").core == "nestopia"
    assert resolver.resolve("Mega Man X").core == "fceumm"
    assert resolver.resolve("7th Saga").core == "other"
    with pytest.raises(NotFoundError):
        resolver.resolve("Zelda")


def test_glob_has_no_path_separator_special_case(tmp_path: Path):
    resolver = _resolver(tmp_path, '"a*z" core ;')

    assert resolver.resolve("a/b/z").core == "core"


def test_glob_is_case_sensitive(tmp_path: Path):
    resolver = _resolver(tmp_path, '"super*" core ;')

    with pytest.raises(NotFoundError):
        resolver.resolve("Super Game")


def test_no_match_raises_not_found(tmp_path: Path):
    resolver = _resolver(tmp_path, '"snes.*" snes9x ;')

    with pytest.raises(NotFoundError) as excinfo:
        resolver.resolve("nes.Zelda")
    assert excinfo.value.what == "launch_rule"


def test_unterminated_non_matching_rule_is_end_of_file(tmp_path: Path):
    resolver = _resolver(tmp_path, '"snes.*" snes9x multitap')

    with pytest.raises(NotFoundError):
        resolver.resolve("nes.Zelda")


def test_matching_rule_may_end_at_end_of_file(tmp_path: Path):
    resolver = _resolver(tmp_path, '"*" snes9x multitap')

    assert resolver.resolve("x") == RunConfig("snes9x", frozenset({"multitap"}))


def test_matching_rule_without_core(tmp_path: Path):
    resolver = _resolver(tmp_path, '"*" ;')

    with pytest.raises(ParseError):
        resolver.resolve("x")


def test_stray_terminators_are_ignored(tmp_path: Path):
    resolver = _resolver(tmp_path, ';\n; "*" core ;')

    assert resolver.resolve("x").core == "core"


def test_empty_rule_file(tmp_path: Path):
    with pytest.raises(NotFoundError):
        _resolver(tmp_path, "").resolve("x")


def test_missing_rule_file(tmp_path: Path):
    with pytest.raises(IoError):
        LaunchRuleResolver(tmp_path / "nope.conf").resolve("x")


def test_resolve_identity_matches_qualified_or_canonical_name(tmp_path: Path):
    resolver = _resolver(
        tmp_path,
        '"Super*" coreA multitap ;\n'
        '"ps1.*" mednafen_psx dualanalog ;\n'
        '"*" coreB ;\n',
    )

    assert resolver.resolve_identity(GameIdentity("snes", "Super Game")).core == "coreA"
    assert resolver.resolve_identity(GameIdentity("ps1", "unknown")).dualanalog
    assert resolver.resolve_identity(GameIdentity("nes", "Zelda")).core == "coreB"


def test_resolve_identity_keeps_rule_order(tmp_path: Path):
    resolver = _resolver(tmp_path, '"snes.*" first ;\n"Super*" second ;\n')

    assert resolver.resolve_identity(GameIdentity("snes", "Super Game")).core == "first"


def test_iter_rules_in_declaration_order(tmp_path: Path):
    rules = [
        LaunchRule("Super*", "coreA", frozenset({"multitap"})),
        LaunchRule("ps1.*", "pcsx", frozenset({"dualanalog", "multitap"})),
        LaunchRule("*", "coreB"),
    ]
    resolver = _resolver(tmp_path, rules_to_text(rules))

    assert list(resolver.iter_rules()) == rules


@pytest.mark.parametrize(
    "rule",
    [
        LaunchRule('a"b', "core"),
        LaunchRule("a;b", "core"),
        LaunchRule("*", "snes 9x"),
        LaunchRule("*", "core;"),
        LaunchRule("*", ""),
        LaunchRule("*", "core", frozenset({"multi tap"})),
        LaunchRule("*", "core", frozenset({'"multitap'})),
    ],
)
def test_rules_to_text_rejects_unwritable_rules(rule: LaunchRule):
    with pytest.raises(ValueError):
        rules_to_text([rule])


def test_rules_to_text_keeps_spaces_in_patterns(tmp_path: Path):
    rule = LaunchRule("Super Mario *", "snes9x", frozenset({"multitap"}))

    resolver = _resolver(tmp_path, rules_to_text([rule]))

    assert list(resolver.iter_rules()) == [rule]

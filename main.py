# main.py
"""
Genshin Build Card - command-line entry point.

Fetches a player's Enka.Network showcase (or reads a saved one), turns one
character into a build card and prints it with artifact scores.

Usage:
    python main.py 800123456
    python main.py 800123456 --avatar-id 10000089 --score-base hp
    python main.py 800123456 --snapshot saved.json --json
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from core.app_context import create_app_context
from core.avatar_normalizer import AvatarNormalizer
from core.build_models import BuildData, ScoreBase, default_build
from core.game_data import GameDataError
from core.logging_setup import setup_logging
from core.result import Err, Result
from core.scoring import BuildScoreReport, is_scoring_substat, score_build
from core.snapshot import EnkaResponse, parse_snapshot


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build a Genshin Impact character card from an Enka.Network showcase",
    )
    parser.add_argument("uid", help="Player UID (full-width digits are accepted)")
    parser.add_argument(
        "--avatar-id",
        type=int,
        default=None,
        help="Character id to show (default: first showcased character)",
    )
    parser.add_argument(
        "--score-base",
        choices=[b.value for b in ScoreBase],
        default=None,
        help="Stat family whose percent substat scores (default: from config, atk)",
    )
    parser.add_argument("--json", action="store_true", help="Print the build and score as JSON")
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help="Read the showcase from a saved Enka.Network JSON file instead of the API",
    )
    parser.add_argument(
        "--game-data",
        type=Path,
        default=None,
        help="Path to gameData.json (default: from config)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def load_snapshot_file(path: Path) -> Result[EnkaResponse, str]:
    """Read and validate a saved Enka.Network response."""
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        return Err(f"Could not read snapshot {path}: {e}")
    return parse_snapshot(payload)


def format_summary(build: BuildData, report: BuildScoreReport) -> str:
    """Plain-text rendering of a build card."""
    c, w, s = build.character, build.weapon, build.stats
    lines = [
        f"{c.name}  Lv.{c.level}  C{c.constellation}  [{c.element.display_name}]",
        f"  Talents: {c.talents.normal.level} / {c.talents.skill.level} / {c.talents.burst.level}",
        f"  Weapon:  {w.name}  Lv.{w.level}  R{w.refinement}",
    ]
    for stat in (w.main_stat, w.sub_stat):
        if stat is not None:
            lines.append(f"           {stat.label} {stat.value}")

    lines.append(
        f"  HP {s.hp}  ATK {s.atk}  DEF {s.def_}  EM {s.em}  "
        f"CR {s.cr}%  CD {s.cd}%  ER {s.er}%  DMG {s.dmg_bonus}%"
    )
    lines.append("")

    for scored in report.artifacts:
        artifact = build.artifacts[scored.slot]
        lines.append(
            f"{scored.slot.display_name}  {artifact.set or '-'}  +{artifact.level}  "
            f"{artifact.main_stat.label} {artifact.main_stat.value}  "
            f"score {scored.score:.1f} [{scored.rank.label}]"
        )
        for sub in artifact.sub_stats:
            marker = "*" if is_scoring_substat(sub, report.score_base) else " "
            lines.append(f"    {marker} {sub.label} {sub.value}")

    if report.set_bonuses:
        lines.append("")
        lines.append("Sets: " + ", ".join(f"{name} x{count}" for name, count in report.set_bonuses))

    lines.append("")
    lines.append(
        f"Total ({report.score_base_label}): {report.total_score:.1f} [{report.total_rank.label}]"
    )
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    try:
        ctx = create_app_context(game_data_path=args.game_data)
    except GameDataError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        if args.snapshot is not None:
            result = load_snapshot_file(args.snapshot)
        else:
            result = ctx.enka_client.fetch_snapshot(args.uid)
        if result.is_err():
            print(f"Error: {result.error}", file=sys.stderr)
            return 1
        snapshot = result.unwrap()

        if args.avatar_id is not None:
            avatar = snapshot.find_avatar(args.avatar_id)
        else:
            avatar = snapshot.avatar_at(0)
        if avatar is None:
            if args.avatar_id is not None:
                message = f"Character {args.avatar_id} is not showcased for UID {args.uid}"
            else:
                message = f"No characters are showcased for UID {args.uid}"
            print(f"Error: {message}", file=sys.stderr)
            return 1

        score_base = ScoreBase.from_string(args.score_base) if args.score_base else ctx.config.score_base
        current = replace(default_build(), score_base=score_base)
        build = AvatarNormalizer(ui_base_url=ctx.config.ui_base_url).normalize(avatar, ctx.game_db, current)
        report = score_build(build)
        logger.info(f"Built card for {build.character.name} ({avatar.avatar_id})")

        if args.json:
            print(json.dumps(
                {"build": build.to_dict(), "score": report.to_dict()},
                ensure_ascii=False,
                indent=2,
            ))
        else:
            print(format_summary(build, report))
        return 0
    finally:
        ctx.close()


if __name__ == "__main__":
    sys.exit(main())

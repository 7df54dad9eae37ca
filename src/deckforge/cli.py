from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

from deckforge.engine import AISpec, MatchConfig, run_batch, run_match
from deckforge.engine.types import CardPool, CardTemplate
from deckforge.paths import get_paths
from deckforge.services.content import ContentError, ContentService, hydrate_deck
from deckforge.services.telemetry import TelemetryService


def _load_deck(content: ContentService, pool: CardPool, deck_id: str) -> list[CardTemplate]:
    manifests = content.load_deck_manifests()
    manifest = manifests.get(deck_id)
    if manifest is None:
        known = ", ".join(sorted(manifests))
        raise ContentError(f"Unknown deck: {deck_id} (known: {known})")
    deck, report = hydrate_deck(pool, manifest)
    if not report.complete:
        print(f"warning: {report.summary()}", file=sys.stderr)
    if not deck:
        raise ContentError(f"Deck {deck_id} has no playable cards")
    return deck


def _telemetry(args: argparse.Namespace) -> TelemetryService | None:
    if args.telemetry is None:
        return None
    return TelemetryService(args.telemetry)


def cmd_decks(args: argparse.Namespace, content: ContentService) -> int:
    pool = content.load_card_pool()
    for deck_id, manifest in sorted(content.load_deck_manifests().items()):
        _, report = hydrate_deck(pool, manifest)
        status = "ok" if report.complete else "incomplete"
        print(f"{deck_id:<20} {manifest.name:<24} [{status}] {report.summary()}")
    return 0


def cmd_simulate(args: argparse.Namespace, content: ContentService) -> int:
    pool = content.load_card_pool()
    deck = _load_deck(content, pool, args.deck)
    opponent = _load_deck(content, pool, args.vs) if args.vs else None

    def progress(i: int) -> None:
        done = i + 1
        if not args.json and (done % 10 == 0 or done == args.iterations):
            print(f"  {done}/{args.iterations} matches", file=sys.stderr)

    report = run_batch(
        deck,
        args.iterations,
        on_progress=progress,
        opponent_pool=opponent,
        seed=args.seed,
        sample=not args.fixed,
        config=MatchConfig(),
        ai=AISpec(),
        workers=args.workers,
    )

    telemetry = _telemetry(args)
    if telemetry is not None:
        telemetry.batch_completed(args.deck, args.vs, args.seed, args.iterations, report)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, sort_keys=True))
        return 0
    print(f"Deck:           {args.deck} vs {args.vs or args.deck}")
    print(f"Matches:        {report.matches_played} ({report.wins}W/{report.losses}L/{report.draws}D)")
    print(f"Win rate:       {report.win_rate:.1f}%")
    print(f"Avg turns:      {report.avg_turns:.1f}")
    print(f"Lore velocity:  {report.avg_lore_velocity:.2f}")
    print(f"Power score:    {report.power_score:.1f}")
    return 0


def cmd_play(args: argparse.Namespace, content: ContentService) -> int:
    pool = content.load_card_pool()
    deck_a = _load_deck(content, pool, args.deck)
    deck_b = _load_deck(content, pool, args.vs) if args.vs else deck_a

    def show(label: str, rationale: str) -> None:
        for line in rationale.splitlines():
            print(f"{label} {line}")

    result = run_match(deck_a, deck_b, args.seed, MatchConfig(), AISpec(), on_move=show)
    print(
        f"Result: {result.winner} ({result.reason}) after {result.turns} rounds, "
        f"lore {result.lore_a}-{result.lore_b}"
    )

    telemetry = _telemetry(args)
    if telemetry is not None:
        telemetry.match_completed(args.deck, args.vs, result)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="deckforge", description="Headless deck simulator.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("decks", help="list deck manifests and how well they hydrate")
    p.set_defaults(func=cmd_decks)

    p = sub.add_parser("simulate", help="score a deck over a batch of AI-vs-AI matches")
    p.add_argument("deck")
    p.add_argument("--vs", default=None, help="opponent deck id (default: mirror match)")
    p.add_argument("-n", "--iterations", type=int, default=100)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--workers", type=int, default=None)
    p.add_argument("--fixed", action="store_true", help="play the manifest as-is instead of sampling")
    p.add_argument("--json", action="store_true")
    p.add_argument("--telemetry", type=Path, default=None, help="append a JSON-lines record here")
    p.set_defaults(func=cmd_simulate)

    p = sub.add_parser("play", help="play and narrate one AI-vs-AI match")
    p.add_argument("deck")
    p.add_argument("--vs", default=None)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--telemetry", type=Path, default=None)
    p.set_defaults(func=cmd_play)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if getattr(args, "iterations", 0) < 0:
        print("error: iterations must be >= 0", file=sys.stderr)
        return 2

    paths = get_paths()
    content = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)
    try:
        return args.func(args, content)
    except ContentError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

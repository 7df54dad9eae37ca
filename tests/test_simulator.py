from __future__ import annotations

import asyncio
import random

import pytest
from helpers import character

from deckforge.engine.match import MatchConfig
from deckforge.engine.simulator import (
    BatchReport,
    MatchResult,
    build_deck,
    iter_matches,
    run_batch,
    run_batch_async,
    run_match,
    summarize,
)

SMALL = MatchConfig(deck_size=20)


def _result(winner: str, velocity: float, turns: int = 10) -> MatchResult:
    return MatchResult(winner=winner, reason="lore", turns=turns, velocity=velocity, lore_a=0, lore_b=0, seed=0)  # type: ignore[arg-type]


def test_build_deck() -> None:
    pool = [character(1), character(2)]
    deck = build_deck(pool, random.Random(1), size=30)
    assert len(deck) == 30
    assert set(deck) <= set(pool)
    assert build_deck(pool, random.Random(1), sample=False) == pool
    with pytest.raises(ValueError):
        build_deck([], random.Random(1))


def test_summarize() -> None:
    results = [_result("A", 1.0), _result("A", 2.0), _result("B", 0.5, turns=20), _result("DRAW", 0.5, turns=60)]
    report = summarize(results)
    assert report == BatchReport(
        matches_played=4,
        wins=2,
        losses=1,
        draws=1,
        win_rate=50.0,
        avg_turns=25.0,
        avg_lore_velocity=1.0,
        power_score=60.0,
    )
    assert summarize([]).matches_played == 0


def test_deck_out_loses() -> None:
    # nothing in either deck can be played or inked
    brick = character(1, cost=9, inkable=False)
    cfg = MatchConfig(opening_hand=1, ramp_ink=0)
    result = run_match([brick], [brick] * 5, seed=1, config=cfg)
    assert result.winner == "B"
    assert result.reason == "deck_out"
    assert result.turns == 1


def test_lore_win() -> None:
    cheap = character(1, cost=0, lore=1)
    result = run_match([cheap] * 10, [cheap] * 10, seed=3, config=MatchConfig(win_lore=1))
    assert result.winner == "A"
    assert result.reason == "lore"
    assert result.turns == 2
    assert result.lore_a >= 1


def test_turn_cap_is_a_draw() -> None:
    brick = character(1, cost=9, inkable=False)
    result = run_match([brick] * 20, [brick] * 20, seed=1, config=MatchConfig(max_turns=3))
    assert result.winner == "DRAW"
    assert result.reason == "turn_cap"
    assert result.turns == 3


def test_on_move_reports_each_rationale() -> None:
    cheap = character(1, cost=0, lore=1)
    seen: list[tuple[str, str]] = []
    run_match([cheap] * 10, [cheap] * 10, seed=3, config=MatchConfig(win_lore=1), on_move=lambda s, r: seen.append((s, r)))
    assert seen
    assert {label for label, _ in seen} == {"A", "B"}
    assert all(r.startswith("[AI] ") for _, r in seen)


def test_iter_matches_is_lazy_and_ordered() -> None:
    pool = [character(1, cost=1, lore=1), character(2, cost=2, strength=2, willpower=2)]
    results = list(iter_matches(pool, 4, seed=9, config=SMALL))
    assert len(results) == 4
    again = [r.seed for r in iter_matches(pool, 4, seed=9, config=SMALL)]
    assert [r.seed for r in results] == again

    with pytest.raises(ValueError):
        list(iter_matches(pool, -1))


def test_progress_callback() -> None:
    pool = [character(1, cost=1, lore=1)]
    calls: list[int] = []
    report = run_batch(pool, 5, on_progress=calls.append, seed=5, config=SMALL)
    assert calls == [0, 1, 2, 3, 4]
    assert report.matches_played == 5


def test_opponent_pool() -> None:
    strong = [character(1, cost=1, strength=3, willpower=3, lore=2)]
    weak = [character(2, cost=9, inkable=False)]
    report = run_batch(strong, 5, opponent_pool=weak, seed=11, config=SMALL)
    assert report.wins == 5
    assert report.win_rate == 100.0


def test_async_batch_matches_sync() -> None:
    pool = [character(1, cost=1, lore=1), character(2, cost=2, strength=2, willpower=2)]
    sync = run_batch(pool, 6, seed=3, config=SMALL)
    calls: list[int] = []
    report = asyncio.run(run_batch_async(pool, 6, on_progress=calls.append, yield_every=2, seed=3, config=SMALL))
    assert report == sync
    assert calls == list(range(6))

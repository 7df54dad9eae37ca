"""Headless AI-vs-AI match runner and deck power scoring.

Every match owns its own ``random.Random`` derived from the batch seed, so a
batch is reproducible and can be spread over worker processes without
sharing RNG state.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ProcessPoolExecutor
from dataclasses import asdict, dataclass
from functools import partial
from typing import Literal

from .ai import AISpec, generate_ai_move
from .match import MatchConfig, new_match, start_turn
from .state import GameState, swap
from .types import CardTemplate

Winner = Literal["A", "B", "DRAW"]
EndReason = Literal["lore", "deck_out", "turn_cap"]
ProgressFn = Callable[[int], None]
MoveFn = Callable[[str, str], None]


@dataclass(frozen=True)
class MatchResult:
    winner: Winner
    reason: EndReason
    turns: int  # full rounds played
    velocity: float  # deck A's lore velocity averaged over its turns
    lore_a: int
    lore_b: int
    seed: int


@dataclass(frozen=True)
class BatchReport:
    matches_played: int
    wins: int
    losses: int
    draws: int
    win_rate: float  # 0-100
    avg_turns: float
    avg_lore_velocity: float
    power_score: float

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class _MatchTask:
    deck_a: tuple[CardTemplate, ...]
    deck_b: tuple[CardTemplate, ...]
    seed: int
    config: MatchConfig
    ai: AISpec


def build_deck(
    pool: Sequence[CardTemplate], rng: random.Random, size: int = 60, sample: bool = True
) -> list[CardTemplate]:
    """Sample ``size`` cards uniformly with replacement, or copy a fixed list."""
    if not pool:
        raise ValueError("Card pool is empty.")
    if sample:
        return [rng.choice(pool) for _ in range(size)]
    return list(pool)


def play_side_turn(
    state: GameState, config: MatchConfig, ai: AISpec, on_move: Callable[[str], None] | None = None
) -> tuple[GameState, bool]:
    """Start the active side's turn and let the AI act until it runs out of
    moves or hits the per-turn cap. Also reports whether the draw step found
    an empty deck."""
    decked_out = not state.active.deck
    state = start_turn(state)
    for _ in range(config.max_moves_per_turn):
        new_state, rationale = generate_ai_move(state, spec=ai)
        if new_state is state:
            break
        state = new_state
        if on_move is not None:
            on_move(rationale)
    return state, decked_out


def run_match(
    deck_a: Sequence[CardTemplate],
    deck_b: Sequence[CardTemplate],
    seed: int,
    config: MatchConfig | None = None,
    ai: AISpec | None = None,
    on_move: MoveFn | None = None,
) -> MatchResult:
    """Play one match to completion. Deck A always goes first.

    ``on_move(label, rationale)`` is called after every committed AI move,
    with ``label`` "A" or "B".
    """
    cfg = config or MatchConfig()
    spec = ai or AISpec()
    state = new_match(deck_a, deck_b, seed=seed, config=cfg)
    report_a = report_b = None
    if on_move is not None:
        report_a = partial(on_move, "A")
        report_b = partial(on_move, "B")

    def result(winner: Winner, reason: EndReason, rounds: int, total_velocity: float) -> MatchResult:
        return MatchResult(
            winner=winner,
            reason=reason,
            turns=rounds,
            velocity=total_velocity / rounds if rounds else 0.0,
            lore_a=state.active.lore,
            lore_b=state.opposing.lore,
            seed=seed,
        )

    rounds = 0
    total_velocity = 0.0
    while rounds < cfg.max_turns:
        rounds += 1

        state, decked_out = play_side_turn(state, cfg, spec, report_a)
        total_velocity += state.lore_velocity
        if state.active.lore >= cfg.win_lore:
            return result("A", "lore", rounds, total_velocity)
        if decked_out:
            return result("B", "deck_out", rounds, total_velocity)

        state, decked_out = play_side_turn(swap(state), cfg, spec, report_b)
        state = swap(state)
        if state.opposing.lore >= cfg.win_lore:
            return result("B", "lore", rounds, total_velocity)
        if decked_out:
            return result("A", "deck_out", rounds, total_velocity)

    return result("DRAW", "turn_cap", rounds, total_velocity)


def _run_task(task: _MatchTask) -> MatchResult:
    return run_match(task.deck_a, task.deck_b, task.seed, task.config, task.ai)


def _tasks(
    deck_pool: Sequence[CardTemplate],
    opponent_pool: Sequence[CardTemplate],
    iterations: int,
    seed: int,
    sample: bool,
    config: MatchConfig,
    ai: AISpec,
) -> Iterator[_MatchTask]:
    master = random.Random(seed)
    for _ in range(iterations):
        match_seed = master.getrandbits(32)
        rng = random.Random(match_seed)
        deck_a = build_deck(deck_pool, rng, config.deck_size, sample)
        deck_b = build_deck(opponent_pool, rng, config.deck_size, sample)
        yield _MatchTask(tuple(deck_a), tuple(deck_b), match_seed, config, ai)


def iter_matches(
    deck_pool: Sequence[CardTemplate],
    iterations: int,
    *,
    opponent_pool: Sequence[CardTemplate] | None = None,
    seed: int | None = None,
    sample: bool = True,
    config: MatchConfig | None = None,
    ai: AISpec | None = None,
    workers: int | None = None,
) -> Iterator[MatchResult]:
    """Yield match results one at a time, in submission order.

    Without ``opponent_pool`` the deck plays a mirror match. With
    ``workers > 1`` matches run in a process pool.
    """
    if iterations < 0:
        raise ValueError("iterations must be >= 0")
    cfg = config or MatchConfig()
    spec = ai or AISpec()
    if seed is None:
        seed = random.SystemRandom().randrange(2**32)
    tasks = _tasks(deck_pool, opponent_pool or deck_pool, iterations, seed, sample, cfg, spec)

    if workers is not None and workers > 1:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            yield from pool.map(_run_task, tasks, chunksize=4)
        return
    for task in tasks:
        yield _run_task(task)


def summarize(results: Sequence[MatchResult]) -> BatchReport:
    count = len(results)
    if count == 0:
        return BatchReport(0, 0, 0, 0, 0.0, 0.0, 0.0, 0.0)
    wins = sum(1 for r in results if r.winner == "A")
    losses = sum(1 for r in results if r.winner == "B")
    draws = count - wins - losses
    win_rate = round(wins / count * 100, 1)
    avg_velocity = round(sum(r.velocity for r in results) / count, 2)
    return BatchReport(
        matches_played=count,
        wins=wins,
        losses=losses,
        draws=draws,
        win_rate=win_rate,
        avg_turns=round(sum(r.turns for r in results) / count, 1),
        avg_lore_velocity=avg_velocity,
        power_score=round(win_rate + avg_velocity * 10, 1),
    )


def run_batch(
    deck_pool: Sequence[CardTemplate],
    iterations: int = 100,
    on_progress: ProgressFn | None = None,
    **kwargs: object,
) -> BatchReport:
    """Run ``iterations`` matches and score the deck.

    ``power_score = win_rate + 10 * avg_lore_velocity``. Keyword arguments are
    passed to ``iter_matches``.
    """
    results: list[MatchResult] = []
    for i, r in enumerate(iter_matches(deck_pool, iterations, **kwargs)):  # type: ignore[arg-type]
        if on_progress is not None:
            on_progress(i)
        results.append(r)
    return summarize(results)


async def run_batch_async(
    deck_pool: Sequence[CardTemplate],
    iterations: int = 100,
    on_progress: ProgressFn | None = None,
    yield_every: int = 5,
    **kwargs: object,
) -> BatchReport:
    """Like ``run_batch`` but hands control back to the event loop between
    matches every ``yield_every`` matches."""
    results: list[MatchResult] = []
    for i, r in enumerate(iter_matches(deck_pool, iterations, **kwargs)):  # type: ignore[arg-type]
        if i % yield_every == 0:
            await asyncio.sleep(0)
        if on_progress is not None:
            on_progress(i)
        results.append(r)
    return summarize(results)

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .actions import Action, ChallengeAction, InkAction, PlayAction, QuestAction
from .match import challenge, challenge_damage, can_challenge, legal_targets, play, step
from .state import CardInstance, GameState, Side, clone_state, lore_velocity, swap

Mode = Literal["control", "rush", "balanced"]
CandidateKind = Literal["quest", "challenge", "play", "ink"]

NO_MOVE = "[AI] No valid moves available. Turn passed."


@dataclass(frozen=True)
class AISpec:
    """Heuristic tuning parameters.

    race_factor scales quest vs challenge weights: the side behind in the lore
    race multiplies challenge scores by it and divides quest scores by it, the
    side ahead does the opposite.
    """

    quest_per_lore: float = 50.0
    quest_threat_penalty: float = 20.0
    challenge_base: float = 40.0
    challenge_per_lore: float = 10.0
    challenge_per_cost: float = 5.0
    trade_penalty_per_cost: float = 5.0
    play_per_cost: float = 10.0
    ink_score: float = 15.0
    race_factor: float = 1.5
    target_reward: float = 100.0  # per point of opposing velocity removed


@dataclass(frozen=True)
class Candidate:
    kind: CandidateKind
    score: float
    action: Action
    desc: str


@dataclass(frozen=True)
class Decision:
    mode: Mode
    quest_weight: float
    challenge_weight: float
    active_velocity: float
    opposing_velocity: float
    candidates: tuple[Candidate, ...]

    @property
    def best(self) -> Candidate | None:
        return self.candidates[0] if self.candidates else None


def strategy_weights(active_velocity: float, opposing_velocity: float, spec: AISpec) -> tuple[Mode, float, float]:
    """Return (mode, quest_weight, challenge_weight)."""
    f = spec.race_factor
    if opposing_velocity > active_velocity:
        return "control", 1.0 / f, f
    if active_velocity > opposing_velocity:
        return "rush", f, 1.0 / f
    return "balanced", 1.0, 1.0


def _threatened(card: CardInstance, enemies: tuple[CardInstance, ...]) -> bool:
    """Could a ready enemy banish ``card`` once questing exerts it?"""
    if card.willpower <= 0:
        return False
    for e in enemies:
        if e.exerted or not e.is_character or e.modifiers.cannot_challenge:
            continue
        if card.evasive and not e.evasive:
            continue
        if card.damage + challenge_damage(e, card) >= card.willpower:
            return True
    return False


def _quest_candidates(state: GameState, spec: AISpec, weight: float) -> list[Candidate]:
    out: list[Candidate] = []
    for card in state.active.field:
        if not card.can_quest() or card.lore <= 0:
            continue
        score = spec.quest_per_lore * card.lore
        if _threatened(card, state.opposing.field):
            score -= spec.quest_threat_penalty
        score *= weight
        out.append(
            Candidate("quest", score, QuestAction(uid=card.uid), f"Quest with {card.name} (Value: {score:.1f})")
        )
    return out


def _challenge_candidates(state: GameState, spec: AISpec, weight: float) -> list[Candidate]:
    out: list[Candidate] = []
    for attacker in state.active.field:
        for defender in state.opposing.field:
            if not can_challenge(attacker, defender):
                continue
            # Judged on a copy: on_challenge abilities resolve before damage.
            outcome = challenge(clone_state(state), attacker.uid, defender.uid)
            if outcome.opposing.get("field", defender.uid) is not None:
                continue
            attacker_dies = outcome.active.get("field", attacker.uid) is None
            score = spec.challenge_base + spec.challenge_per_lore * defender.lore + spec.challenge_per_cost * defender.cost
            if attacker_dies:
                score -= spec.trade_penalty_per_cost * attacker.cost
            score *= weight
            out.append(
                Candidate(
                    "challenge",
                    score,
                    ChallengeAction(attacker=attacker.uid, defender=defender.uid),
                    f"Challenge {defender.name} with {attacker.name} (Value: {score:.1f})",
                )
            )
    return out


def _play_candidates(state: GameState, spec: AISpec) -> list[Candidate]:
    out: list[Candidate] = []
    ink_available = state.active.available_ink
    opposing_before = lore_velocity(state.opposing, state.turn)
    for card in state.active.hand:
        if card.cost > ink_available:
            continue
        t = card.template
        base = spec.play_per_cost * card.cost + t.strength + t.willpower + t.lore

        out.append(Candidate("play", base, PlayAction(uid=card.uid), f"Play {card.name} (Value: {base:.1f})"))

        # Targeted cards also get one candidate per enemy target.
        enemy = {c.uid for c in state.opposing.field}
        for target_uid in legal_targets(state, card):
            if target_uid not in enemy:
                continue
            trial = play(clone_state(state), card.uid, target_uid)
            reduction = opposing_before - lore_velocity(trial.opposing, trial.turn)
            score = base + (spec.target_reward * reduction if reduction > 0 else 0.0)
            target = state.opposing.get("field", target_uid)
            target_name = target.name if target is not None else str(target_uid)
            out.append(
                Candidate(
                    "play",
                    score,
                    PlayAction(uid=card.uid, target=target_uid),
                    f"Play {card.name} targeting {target_name} (Value: {score:.1f})",
                )
            )
    return out


def _ink_candidates(state: GameState, spec: AISpec) -> list[Candidate]:
    ps = state.active
    if ps.has_inked_this_turn:
        return []
    out: list[Candidate] = []
    for card in ps.hand:
        if not card.template.inkable:
            continue
        if card.cost > ps.available_ink or len(ps.hand) > 1:
            out.append(
                Candidate("ink", spec.ink_score, InkAction(uid=card.uid), f"Ink {card.name} (Value: {spec.ink_score:.1f})")
            )
    return out


def decide(state: GameState, spec: AISpec | None = None) -> Decision:
    """Score every candidate move for the active side, best first."""
    spec = spec or AISpec()
    active_velocity = lore_velocity(state.active, state.turn)
    opposing_velocity = lore_velocity(state.opposing, state.turn)
    mode, quest_weight, challenge_weight = strategy_weights(active_velocity, opposing_velocity, spec)

    candidates: list[Candidate] = []
    candidates.extend(_quest_candidates(state, spec, quest_weight))
    candidates.extend(_challenge_candidates(state, spec, challenge_weight))
    candidates.extend(_play_candidates(state, spec))
    candidates.extend(_ink_candidates(state, spec))

    # sorted() is stable: equal scores keep enumeration order.
    ranked = tuple(sorted(candidates, key=lambda c: -c.score))
    return Decision(
        mode=mode,
        quest_weight=quest_weight,
        challenge_weight=challenge_weight,
        active_velocity=active_velocity,
        opposing_velocity=opposing_velocity,
        candidates=ranked,
    )


def _rationale(decision: Decision) -> str:
    best = decision.best
    if best is None:
        return NO_MOVE
    return "\n".join(
        [
            f"[AI] {best.desc}",
            f"[AI] Strategy: {decision.mode} (velocity {decision.active_velocity:.2f} vs "
            f"{decision.opposing_velocity:.2f})",
            f"[AI] Heuristics: Selected score {best.score:.1f} over {len(decision.candidates) - 1} other options.",
        ]
    )


def generate_ai_move(
    state: GameState, side: Side = "active", spec: AISpec | None = None
) -> tuple[GameState, str]:
    """Pick and commit the single best move for ``side``.

    Returns the new state and a human-readable rationale. When nothing can
    be done the state is returned unchanged; advancing the turn is up to the
    caller.
    """
    view = swap(state) if side == "opposing" else state
    decision = decide(view, spec)
    best = decision.best
    if best is None:
        return state, NO_MOVE
    result = step(view, best.action)
    if side == "opposing":
        result = swap(result)
    return result, _rationale(decision)

"""Turn structure and player actions. Every operation returns a new state."""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from .actions import (
    Action,
    ChallengeAction,
    EndTurnAction,
    InkAction,
    MoveAction,
    PlayAction,
    QuestAction,
)
from .cleanup import fire_hook, run_cleanup
from .registry import get_card_logic
from .state import (
    NO_MODIFIERS,
    CardInstance,
    GameState,
    PlayerState,
    new_instance,
    swap,
    with_velocities,
)
from .types import CardTemplate


@dataclass(frozen=True)
class MatchConfig:
    deck_size: int = 60
    opening_hand: int = 7
    ramp_ink: int = 2  # hand cards put straight into the inkwell at setup
    win_lore: int = 20
    max_turns: int = 60
    max_moves_per_turn: int = 10


def _draw_one(ps: PlayerState) -> PlayerState:
    if not ps.deck:
        return ps
    top = ps.deck[0]
    return replace(ps, deck=ps.deck[1:], hand=ps.hand + (top,))


def _pay_ink(ps: PlayerState, cost: int) -> PlayerState:
    """Exert ``cost`` un-exerted ink cards. Caller checks affordability."""
    assert cost <= ps.available_ink, "paying more ink than available"
    if cost <= 0:
        return ps
    paid = 0
    inkwell: list[CardInstance] = []
    for c in ps.inkwell:
        if paid < cost and not c.exerted:
            inkwell.append(replace(c, exerted=True))
            paid += 1
        else:
            inkwell.append(c)
    return replace(ps, inkwell=tuple(inkwell))


def _ready(ps: PlayerState) -> PlayerState:
    field: list[CardInstance] = []
    for c in ps.field:
        mods = c.modifiers.reset_transient()
        if c.modifiers.frozen:
            # Skips exactly one readying.
            field.append(replace(c, summoning_sick=False, modifiers=replace(mods, frozen=False)))
        else:
            field.append(replace(c, exerted=False, summoning_sick=False, modifiers=mods))
    inkwell = tuple(replace(c, exerted=False) if c.exerted else c for c in ps.inkwell)
    return replace(ps, field=tuple(field), inkwell=inkwell, has_inked_this_turn=False)


def start_turn(state: GameState) -> GameState:
    """Run READY, SET and DRAW for the active side and leave it in MAIN."""
    state = replace(state, turn=state.turn + 1, phase="READY", selected_uid=None)
    state = state.with_player("active", _ready(state.active))
    state = state.emit("TURN_STARTED", side="active")

    # SET: locations pay out, then start-of-turn abilities
    state = replace(state, phase="SET")
    location_lore = sum(c.lore for c in state.active.field if c.is_location)
    if location_lore:
        ps = state.active
        state = state.with_player("active", replace(ps, lore=ps.lore + location_lore))
        state = state.emit("LOCATION_LORE", side="active", lore=location_lore)
    for uid in [c.uid for c in state.active.field]:
        card = state.active.get("field", uid)
        if card is not None:
            state = fire_hook(state, "active", card, "on_turn_start")
    state = run_cleanup(state)

    state = replace(state, phase="DRAW")
    if state.active.deck:
        drawn = state.active.deck[0]
        state = state.with_player("active", _draw_one(state.active))
        state = state.emit("CARD_DRAWN", side="active", uid=drawn.uid)
    else:
        state = state.emit("DECK_EMPTY", side="active")

    return with_velocities(replace(state, phase="MAIN"))


def end_turn(state: GameState) -> GameState:
    """Hand the turn to the other side: swap perspective and start its turn."""
    return start_turn(swap(state))


def ink(state: GameState, uid: int) -> GameState:
    ps = state.active
    card = ps.get("hand", uid)
    if card is None or not card.template.inkable or ps.has_inked_this_turn:
        return state
    ps = ps.move(uid, "hand", "inkwell", face_down=True, exerted=False, damage=0)
    ps = replace(ps, has_inked_this_turn=True)
    state = state.with_player("active", ps).emit("CARD_INKED", side="active", uid=uid, name=card.name)
    return with_velocities(state)


def play(state: GameState, uid: int, target_uid: int | None = None) -> GameState:
    ps = state.active
    card = ps.get("hand", uid)
    if card is None or card.cost > ps.available_ink:
        return state

    ps = _pay_ink(ps, card.cost)
    dest = "field" if card.template.is_permanent else "discard"
    ps = ps.move(
        uid,
        "hand",
        dest,
        exerted=False,
        summoning_sick=True,
        face_down=False,
        damage=0,
        modifiers=NO_MODIFIERS,
        location_uid=None,
    )
    state = state.with_player("active", ps).emit(
        "CARD_PLAYED", side="active", uid=uid, name=card.name, cost=card.cost, target=target_uid
    )
    played = ps.get(dest, uid)
    assert played is not None
    state = fire_hook(state, "active", played, "on_play", target_uid)
    return run_cleanup(state)


def quest(state: GameState, uid: int) -> GameState:
    card = state.active.get("field", uid)
    if card is None or not card.can_quest():
        return state
    quester = replace(card, exerted=True)
    ps = state.active.put("field", quester)
    ps = replace(ps, lore=ps.lore + card.lore)
    state = state.with_player("active", ps).emit("QUESTED", side="active", uid=uid, lore=card.lore)
    state = fire_hook(state, "active", quester, "on_quest")
    return run_cleanup(state)


def challenge_damage(source: CardInstance, target: CardInstance) -> int:
    return max(0, source.strength - target.resist)


def can_challenge(attacker: CardInstance, defender: CardInstance) -> bool:
    if not attacker.can_challenge():
        return False
    if not defender.is_character or not defender.exerted:
        return False
    if defender.evasive and not attacker.evasive:
        return False
    return True


def challenge(state: GameState, attacker_uid: int, defender_uid: int) -> GameState:
    attacker = state.active.get("field", attacker_uid)
    defender = state.opposing.get("field", defender_uid)
    if attacker is None or defender is None or not can_challenge(attacker, defender):
        return state

    attacker = replace(attacker, exerted=True)
    state = state.with_player("active", state.active.put("field", attacker))
    state = fire_hook(state, "active", attacker, "on_challenge", defender_uid)

    # Abilities may have changed either combatant.
    attacker = state.active.get("field", attacker_uid)
    defender = state.opposing.get("field", defender_uid)
    if attacker is not None and defender is not None:
        to_defender = challenge_damage(attacker, defender)
        to_attacker = challenge_damage(defender, attacker)
        state = state.with_player(
            "active", state.active.put("field", replace(attacker, damage=attacker.damage + to_attacker))
        )
        state = state.with_player(
            "opposing", state.opposing.put("field", replace(defender, damage=defender.damage + to_defender))
        )
        state = state.emit(
            "CHALLENGED",
            side="active",
            attacker=attacker_uid,
            defender=defender_uid,
            to_attacker=to_attacker,
            to_defender=to_defender,
        )

    state = replace(state, selected_uid=None)
    return run_cleanup(state)


def move_to_location(state: GameState, character_uid: int, location_uid: int) -> GameState:
    ps = state.active
    character = ps.get("field", character_uid)
    location = ps.get("field", location_uid)
    if character is None or location is None:
        return state
    if not character.is_character or not location.is_location:
        return state
    if character.location_uid == location_uid:
        return state
    cost = location.template.move_cost
    if cost > ps.available_ink:
        return state

    ps = _pay_ink(ps, cost).put("field", replace(character, location_uid=location_uid))
    state = state.with_player("active", ps).emit(
        "MOVED_TO_LOCATION", side="active", uid=character_uid, location=location_uid, cost=cost
    )
    return run_cleanup(state)


def legal_targets(state: GameState, card: CardInstance) -> list[int]:
    """Instance ids ``card``'s on_play ability may target right now."""
    logic = get_card_logic(card.key)
    if logic is None or logic.target is None or logic.on_play is None:
        return []
    own = [c.uid for c in state.active.field if c.is_character and c.uid != card.uid]
    enemy = [c.uid for c in state.opposing.field if c.is_character]
    if logic.target == "opposing_character":
        return enemy
    if logic.target == "own_character":
        return own
    return enemy + own


def legal_actions(state: GameState) -> list[Action]:
    """Every action the active side may legally take right now."""
    ps = state.active
    out: list[Action] = []

    if not ps.has_inked_this_turn:
        out.extend(InkAction(uid=c.uid) for c in ps.hand if c.template.inkable)

    ink_available = ps.available_ink
    for c in ps.hand:
        if c.cost > ink_available:
            continue
        out.append(PlayAction(uid=c.uid))
        out.extend(PlayAction(uid=c.uid, target=t) for t in legal_targets(state, c))

    out.extend(QuestAction(uid=c.uid) for c in ps.field if c.can_quest())

    for attacker in ps.field:
        for defender in state.opposing.field:
            if can_challenge(attacker, defender):
                out.append(ChallengeAction(attacker=attacker.uid, defender=defender.uid))

    for loc in ps.field:
        if not loc.is_location or loc.template.move_cost > ink_available:
            continue
        for c in ps.field:
            if c.is_character and c.location_uid != loc.uid:
                out.append(MoveAction(character=c.uid, location=loc.uid))

    return out


def step(state: GameState, action: Action) -> GameState:
    """Apply a single action. Illegal actions return ``state`` unchanged."""
    if isinstance(action, InkAction):
        return ink(state, action.uid)
    if isinstance(action, PlayAction):
        return play(state, action.uid, action.target)
    if isinstance(action, QuestAction):
        return quest(state, action.uid)
    if isinstance(action, ChallengeAction):
        return challenge(state, action.attacker, action.defender)
    if isinstance(action, MoveAction):
        return move_to_location(state, action.character, action.location)
    if isinstance(action, EndTurnAction):
        return end_turn(state)
    return state


def new_match(
    deck_a: Sequence[CardTemplate],
    deck_b: Sequence[CardTemplate],
    seed: int = 0,
    config: MatchConfig | None = None,
) -> GameState:
    """Build the opening state: shuffled decks, opening hands, ramp ink.

    Side A starts as ``active``. No turn has started yet (turn 0, READY);
    call ``start_turn`` to begin play.
    """
    cfg = config or MatchConfig()
    rng = random.Random(seed)
    uids = itertools.count(1)

    def build(deck: Sequence[CardTemplate]) -> PlayerState:
        cards = [new_instance(t, next(uids)) for t in deck]
        rng.shuffle(cards)
        ps = PlayerState(deck=tuple(cards))
        for _ in range(cfg.opening_hand):
            ps = _draw_one(ps)
        for _ in range(cfg.ramp_ink):
            if not ps.hand:
                break
            last = ps.hand[-1]
            ps = ps.move(last.uid, "hand", "inkwell", face_down=True, exerted=False)
        return ps

    state = GameState(active=build(deck_a), opposing=build(deck_b), seed=seed)
    all_uids = [c.uid for ps in (state.active, state.opposing) for c in ps.all_cards()]
    assert len(all_uids) == len(set(all_uids)), "duplicate instance ids"
    return state.emit("MATCH_CREATED", seed=seed)


def replay(
    deck_a: Sequence[CardTemplate],
    deck_b: Sequence[CardTemplate],
    seed: int,
    actions: Iterable[Action],
    config: MatchConfig | None = None,
) -> GameState:
    state = start_turn(new_match(deck_a, deck_b, seed=seed, config=config))
    for a in actions:
        state = step(state, a)
    return state

"""Programmed card abilities.

Only a handful of cards are implemented; anything not registered here plays
as a vanilla card with its printed keywords. Every callback sees its owner
as ``active``.
"""

from __future__ import annotations

from dataclasses import replace

from .cleanup import banish
from .registry import ability
from .state import CardInstance, GameState, Modifiers, Side


def _field_card(state: GameState, uid: int | None) -> tuple[Side, CardInstance] | None:
    if uid is None:
        return None
    found = state.on_field(uid)
    if found is None or not found[1].is_character:
        return None
    return found


def _put(state: GameState, side: Side, card: CardInstance) -> GameState:
    return state.with_player(side, state.player(side).put("field", card))


def _modify(state: GameState, side: Side, card: CardInstance, **changes: object) -> GameState:
    return _put(state, side, replace(card, modifiers=replace(card.modifiers, **changes)))


def deal_damage(state: GameState, uid: int | None, amount: int) -> GameState:
    """Damage a character on either field. Resist applies."""
    found = _field_card(state, uid)
    if found is None:
        return state
    side, card = found
    dealt = max(0, amount - card.resist)
    if dealt == 0:
        return state
    return _put(state, side, replace(card, damage=card.damage + dealt))


# Be Prepared: Banish all characters.
@ability("1-128", "on_play")
def be_prepared(state: GameState, source: CardInstance, target_uid: int | None) -> GameState:
    doomed = [c.uid for c in state.active.field if c.is_character]
    doomed += [c.uid for c in state.opposing.field if c.is_character]
    return banish(state, doomed)


# Dr. Facilier - Agent Provocateur: whenever another of your characters is
# banished, return that card to your hand.
@ability("1-66", "on_ally_banished")
def into_the_shadows(state: GameState, source: CardInstance, target_uid: int | None) -> GameState:
    if target_uid is None or target_uid == source.uid:
        return state
    ps = state.active
    card = ps.get("discard", target_uid)
    if card is None or not card.is_character:
        return state
    ps = ps.move(target_uid, "discard", "hand", damage=0, exerted=False, modifiers=Modifiers())
    return state.with_player("active", ps).emit("RETURNED_TO_HAND", side="active", uid=target_uid)


# Smash: Deal 3 damage to chosen character. Either side may be chosen.
@ability("1-196", "on_play", target="any_character")
def smash(state: GameState, source: CardInstance, target_uid: int | None) -> GameState:
    return deal_damage(state, target_uid, 3)


# Maleficent - Monstrous Dragon (Dragon Fire): banish chosen opposing character.
@ability("1-106", "on_play", target="opposing_character")
def dragon_fire(state: GameState, source: CardInstance, target_uid: int | None) -> GameState:
    if _field_card(state, target_uid) is None:
        return state
    return banish(state, [target_uid])  # type: ignore[list-item]


# Elsa - Spirit of Winter: exert chosen opposing character; it can't ready at
# the start of its next turn.
@ability("1-42", "on_play", target="opposing_character")
def deep_freeze(state: GameState, source: CardInstance, target_uid: int | None) -> GameState:
    card = state.opposing.get("field", target_uid) if target_uid is not None else None
    if card is None or not card.is_character:
        return state
    frozen = replace(card, exerted=True, modifiers=replace(card.modifiers, frozen=True))
    return _put(state, "opposing", frozen)


# Tangle: chosen opposing character can't quest or challenge while in play.
@ability("1-176", "on_play", target="opposing_character")
def tangle(state: GameState, source: CardInstance, target_uid: int | None) -> GameState:
    card = state.opposing.get("field", target_uid) if target_uid is not None else None
    if card is None or not card.is_character:
        return state
    return _modify(state, "opposing", card, cannot_quest=True, cannot_challenge=True)


# Fairy Dust: chosen character of yours gains Evasive and Resist +1 this turn.
@ability("1-164", "on_play", target="own_character")
def fairy_dust(state: GameState, source: CardInstance, target_uid: int | None) -> GameState:
    card = state.active.get("field", target_uid) if target_uid is not None else None
    if card is None or not card.is_character:
        return state
    return _modify(
        state, "active", card, evasive_granted=True, resist_granted=card.modifiers.resist_granted + 1
    )


# Captain Hook - Forceful Duelist: Challenger +2.
@ability("1-116", "on_challenge")
def forceful_duelist(state: GameState, source: CardInstance, target_uid: int | None) -> GameState:
    card = state.active.get("field", source.uid)
    if card is None:
        return state
    return _modify(state, "active", card, strength_bonus=card.modifiers.strength_bonus + 2)


# Sebastian - Court Composer: whenever he quests, draw a card.
@ability("1-179", "on_quest")
def court_composer(state: GameState, source: CardInstance, target_uid: int | None) -> GameState:
    ps = state.active
    if not ps.deck:
        return state
    top = ps.deck[0]
    ps = replace(ps, deck=ps.deck[1:], hand=ps.hand + (top,))
    return state.with_player("active", ps).emit("CARD_DRAWN", side="active", uid=top.uid)


# Lantern: at the start of your turn, your characters get +1 strength this turn.
@ability("1-187", "on_turn_start")
def lantern(state: GameState, source: CardInstance, target_uid: int | None) -> GameState:
    for uid in [c.uid for c in state.active.field if c.is_character]:
        card = state.active.get("field", uid)
        if card is not None:
            state = _modify(state, "active", card, strength_bonus=card.modifiers.strength_bonus + 1)
    return state

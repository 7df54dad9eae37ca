from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from .registry import Hook, get_hook
from .state import CardInstance, GameState, PlayerState, Side, swap, with_velocities


def fire_hook(
    state: GameState, side: Side, card: CardInstance, hook: Hook, target_uid: int | None = None
) -> GameState:
    """Run ``card``'s ``hook`` callback, if any.

    Callbacks are written from their owner's point of view, so a card on the
    opposing side runs with the perspective swapped.
    """
    fn = get_hook(card.key, hook)
    if fn is None:
        return state
    state = state.emit("ABILITY_TRIGGERED", side=side, uid=card.uid, key=card.key, hook=hook, target=target_uid)
    if side == "active":
        return fn(state, card, target_uid)
    return swap(fn(swap(state), card, target_uid))


def _detach(ps: PlayerState, location_uid: int) -> PlayerState:
    if not any(c.location_uid == location_uid for c in ps.field):
        return ps
    field = tuple(replace(c, location_uid=None) if c.location_uid == location_uid else c for c in ps.field)
    return replace(ps, field=field)


def banish(state: GameState, uids: Iterable[int]) -> GameState:
    """Move field instances to their owners' discard, then fire
    ``on_ally_banished`` on each surviving ally once per banished card."""
    banished: list[tuple[Side, CardInstance]] = []
    for uid in uids:
        found = state.on_field(uid)
        if found is None:
            continue
        side, card = found
        ps = state.player(side).move(uid, "field", "discard", exerted=False, location_uid=None)
        if card.is_location:
            ps = _detach(ps, uid)
        state = state.with_player(side, ps).emit("CARD_BANISHED", side=side, uid=uid, name=card.name)
        banished.append((side, card))

    for side, dead in banished:
        listeners = [c.uid for c in state.player(side).field if get_hook(c.key, "on_ally_banished")]
        for src_uid in listeners:
            if src_uid == dead.uid:
                continue
            src = state.player(side).get("field", src_uid)
            if src is None:
                continue
            state = fire_hook(state, side, src, "on_ally_banished", dead.uid)
    return state


def _dead_on_field(state: GameState) -> list[int]:
    dead: list[int] = []
    for ps in (state.active, state.opposing):
        dead.extend(c.uid for c in ps.field if c.is_banishable)
    return dead


def run_cleanup(state: GameState) -> GameState:
    """State-based banish sweep, repeated until no lethal damage remains."""
    dead = _dead_on_field(state)
    while dead:
        state = banish(state, dead)
        dead = _dead_on_field(state)
    return with_velocities(state)

"""Value types for card instances, players and the game state.

Everything here is a frozen dataclass. Engine operations never mutate a
state in place; they build a new one with ``dataclasses.replace`` and share
whatever did not change.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, replace
from typing import Literal

from .types import CardTemplate

Zone = Literal["deck", "hand", "inkwell", "field", "discard"]
Side = Literal["active", "opposing"]
Phase = Literal["READY", "SET", "DRAW", "MAIN"]

ZONES: tuple[Zone, ...] = ("deck", "hand", "inkwell", "field", "discard")

Event = dict[str, object]

_uids = itertools.count(1)


@dataclass(frozen=True)
class Modifiers:
    cannot_quest: bool = False
    cannot_challenge: bool = False
    frozen: bool = False
    evasive_granted: bool = False
    resist_granted: int = 0
    strength_bonus: int = 0

    def reset_transient(self) -> Modifiers:
        if not (self.strength_bonus or self.evasive_granted or self.resist_granted):
            return self
        return replace(self, strength_bonus=0, evasive_granted=False, resist_granted=0)


NO_MODIFIERS = Modifiers()


@dataclass(frozen=True)
class CardInstance:
    uid: int
    template: CardTemplate
    exerted: bool = False
    summoning_sick: bool = True
    face_down: bool = False
    damage: int = 0
    modifiers: Modifiers = NO_MODIFIERS
    location_uid: int | None = None
    abilities: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        assert self.damage >= 0, f"negative damage on instance {self.uid}"

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def key(self) -> str:
        return self.template.key

    @property
    def card_type(self) -> str:
        return self.template.type

    @property
    def cost(self) -> int:
        return self.template.cost

    @property
    def lore(self) -> int:
        return self.template.lore

    @property
    def willpower(self) -> int:
        return self.template.willpower

    @property
    def strength(self) -> int:
        return max(0, self.template.strength + self.modifiers.strength_bonus)

    @property
    def resist(self) -> int:
        return self.template.resist + self.modifiers.resist_granted

    @property
    def evasive(self) -> bool:
        return self.template.evasive or self.modifiers.evasive_granted

    @property
    def is_character(self) -> bool:
        return self.template.type == "Character"

    @property
    def is_location(self) -> bool:
        return self.template.type == "Location"

    @property
    def is_banishable(self) -> bool:
        return self.willpower > 0 and self.damage >= self.willpower

    def can_quest(self) -> bool:
        return (
            self.is_character
            and not self.exerted
            and not self.summoning_sick
            and not self.modifiers.cannot_quest
        )

    def can_challenge(self) -> bool:
        return (
            self.is_character
            and not self.exerted
            and not self.summoning_sick
            and not self.modifiers.cannot_challenge
        )


@dataclass(frozen=True)
class PlayerState:
    deck: tuple[CardInstance, ...] = ()
    hand: tuple[CardInstance, ...] = ()
    inkwell: tuple[CardInstance, ...] = ()
    field: tuple[CardInstance, ...] = ()
    discard: tuple[CardInstance, ...] = ()
    lore: int = 0
    has_inked_this_turn: bool = False

    def zone(self, name: Zone) -> tuple[CardInstance, ...]:
        return getattr(self, name)

    def get(self, zone: Zone, uid: int) -> CardInstance | None:
        for c in self.zone(zone):
            if c.uid == uid:
                return c
        return None

    def locate(self, uid: int) -> Zone | None:
        for z in ZONES:
            if self.get(z, uid) is not None:
                return z
        return None

    @property
    def available_ink(self) -> int:
        return sum(1 for c in self.inkwell if not c.exerted)

    def put(self, zone: Zone, card: CardInstance) -> PlayerState:
        """Replace the card with the same uid in ``zone``."""
        cards = tuple(card if c.uid == card.uid else c for c in self.zone(zone))
        return replace(self, **{zone: cards})

    def remove(self, zone: Zone, uid: int) -> PlayerState:
        cards = tuple(c for c in self.zone(zone) if c.uid != uid)
        return replace(self, **{zone: cards})

    def add(self, zone: Zone, card: CardInstance) -> PlayerState:
        return replace(self, **{zone: self.zone(zone) + (card,)})

    def move(self, uid: int, src: Zone, dst: Zone, **changes: object) -> PlayerState:
        card = self.get(src, uid)
        assert card is not None, f"instance {uid} not in {src}"
        moved = replace(card, **changes) if changes else card
        return self.remove(src, uid).add(dst, moved)

    def all_cards(self) -> list[CardInstance]:
        out: list[CardInstance] = []
        for z in ZONES:
            out.extend(self.zone(z))
        return out


@dataclass(frozen=True)
class GameState:
    active: PlayerState
    opposing: PlayerState
    turn: int = 0
    phase: Phase = "READY"
    selected_uid: int | None = None
    lore_velocity: float = 0.0
    opposing_velocity: float = 0.0
    seed: int | None = None
    log: tuple[Event, ...] = ()

    def player(self, side: Side) -> PlayerState:
        return self.active if side == "active" else self.opposing

    def with_player(self, side: Side, ps: PlayerState) -> GameState:
        if side == "active":
            return replace(self, active=ps)
        return replace(self, opposing=ps)

    def locate(self, uid: int) -> tuple[Side, Zone, CardInstance] | None:
        for side in ("active", "opposing"):
            ps = self.player(side)
            for z in ZONES:
                c = ps.get(z, uid)
                if c is not None:
                    return side, z, c
        return None

    def on_field(self, uid: int) -> tuple[Side, CardInstance] | None:
        for side in ("active", "opposing"):
            c = self.player(side).get("field", uid)
            if c is not None:
                return side, c
        return None

    def emit(self, event_type: str, **payload: object) -> GameState:
        event: Event = {"type": event_type, "turn": self.turn}
        event.update(payload)
        return replace(self, log=self.log + (event,))


def other_side(side: Side) -> Side:
    return "opposing" if side == "active" else "active"


def new_instance(template: CardTemplate, uid: int | None = None) -> CardInstance:
    """Create a fresh runtime instance of ``template``."""
    return CardInstance(
        uid=next(_uids) if uid is None else uid,
        template=template,
        exerted=False,
        summoning_sick=True,
        face_down=False,
        damage=0,
        modifiers=NO_MODIFIERS,
        abilities=tuple(template.abilities),
    )


def swap(state: GameState) -> GameState:
    """Relabel active/opposing. ``swap(swap(s)) == s``."""
    return replace(
        state,
        active=state.opposing,
        opposing=state.active,
        lore_velocity=state.opposing_velocity,
        opposing_velocity=state.lore_velocity,
    )


def clone_card(card: CardInstance) -> CardInstance:
    return replace(card, abilities=tuple(card.abilities))


def clone_player(ps: PlayerState) -> PlayerState:
    return replace(
        ps,
        deck=tuple(clone_card(c) for c in ps.deck),
        hand=tuple(clone_card(c) for c in ps.hand),
        inkwell=tuple(clone_card(c) for c in ps.inkwell),
        field=tuple(clone_card(c) for c in ps.field),
        discard=tuple(clone_card(c) for c in ps.discard),
    )


def clone_state(state: GameState) -> GameState:
    """Deep copy for look-ahead. Instance uids are preserved."""
    return replace(
        state,
        active=clone_player(state.active),
        opposing=clone_player(state.opposing),
        log=tuple(dict(e) for e in state.log),
    )


def questable_lore(ps: PlayerState) -> int:
    total = 0
    for c in ps.field:
        if c.is_location:
            total += c.lore
        elif c.can_quest():
            total += c.lore
    return total


def lore_velocity(ps: PlayerState, turn: int) -> float:
    if turn <= 0:
        return 0.0
    return (ps.lore + questable_lore(ps)) / turn


def with_velocities(state: GameState) -> GameState:
    return replace(
        state,
        lore_velocity=lore_velocity(state.active, state.turn),
        opposing_velocity=lore_velocity(state.opposing, state.turn),
    )

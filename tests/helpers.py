"""Builders for hand-made game states."""

from __future__ import annotations

from dataclasses import replace

from deckforge.engine.state import CardInstance, GameState, PlayerState, new_instance, with_velocities
from deckforge.engine.types import CardTemplate

VANILLA_SET = 9  # no abilities are registered in this set

FACILIER = CardTemplate(1, 66, "Dr. Facilier - Agent Provocateur", 7, "Character", False, 4, 5, 3)
ELSA = CardTemplate(1, 42, "Elsa - Spirit of Winter", 8, "Character", False, 4, 6, 3)
MALEFICENT = CardTemplate(1, 106, "Maleficent - Monstrous Dragon", 9, "Character", False, 7, 5, 2)
CAPTAIN_HOOK = CardTemplate(1, 116, "Captain Hook - Forceful Duelist", 1, "Character", True, 1, 2, 1)
SEBASTIAN = CardTemplate(1, 179, "Sebastian - Court Composer", 2, "Character", True, 1, 3, 1)
BE_PREPARED = CardTemplate(1, 128, "Be Prepared", 7, "Song", False)
SMASH = CardTemplate(1, 196, "Smash", 3, "Action", True)
TANGLE = CardTemplate(1, 176, "Tangle", 2, "Action", True)
FAIRY_DUST = CardTemplate(1, 164, "Fairy Dust", 1, "Action", True)
LANTERN = CardTemplate(1, 187, "Lantern", 2, "Item", True)

INK = CardTemplate(VANILLA_SET, 900, "Ink Filler", 1, "Character", True, 1, 1, 1)


def character(
    num: int,
    *,
    cost: int = 1,
    strength: int = 1,
    willpower: int = 1,
    lore: int = 1,
    evasive: bool = False,
    resist: int = 0,
    inkable: bool = True,
    set_num: int = VANILLA_SET,
) -> CardTemplate:
    return CardTemplate(
        set_num=set_num,
        card_num=num,
        name=f"Character {num}",
        cost=cost,
        type="Character",
        inkable=inkable,
        strength=strength,
        willpower=willpower,
        lore=lore,
        evasive=evasive,
        resist=resist,
    )


def action(num: int, *, cost: int = 0) -> CardTemplate:
    return CardTemplate(VANILLA_SET, num, f"Action {num}", cost, "Action", True)


def location(num: int, *, willpower: int = 5, lore: int = 1, move_cost: int = 1) -> CardTemplate:
    return CardTemplate(
        VANILLA_SET, num, f"Location {num}", 1, "Location", True, willpower=willpower, lore=lore, move_cost=move_cost
    )


def in_hand(template: CardTemplate, uid: int) -> CardInstance:
    return new_instance(template, uid)


def on_field(
    template: CardTemplate, uid: int, *, exerted: bool = False, sick: bool = False, damage: int = 0, **changes: object
) -> CardInstance:
    card = replace(new_instance(template, uid), exerted=exerted, summoning_sick=sick, damage=damage)
    return replace(card, **changes) if changes else card


def ink_cards(count: int, first_uid: int = 100, *, exerted: bool = False) -> tuple[CardInstance, ...]:
    return tuple(
        replace(new_instance(INK, first_uid + i), face_down=True, exerted=exerted, summoning_sick=False)
        for i in range(count)
    )


def player(
    *,
    deck: tuple[CardInstance, ...] = (),
    hand: tuple[CardInstance, ...] = (),
    inkwell: tuple[CardInstance, ...] = (),
    field: tuple[CardInstance, ...] = (),
    discard: tuple[CardInstance, ...] = (),
    lore: int = 0,
    inked: bool = False,
) -> PlayerState:
    return PlayerState(
        deck=deck, hand=hand, inkwell=inkwell, field=field, discard=discard, lore=lore, has_inked_this_turn=inked
    )


def game(active: PlayerState, opposing: PlayerState | None = None, *, turn: int = 1) -> GameState:
    state = GameState(active=active, opposing=opposing or PlayerState(), turn=turn, phase="MAIN")
    return with_velocities(state)


def events(state: GameState, event_type: str) -> list[dict[str, object]]:
    return [e for e in state.log if e["type"] == event_type]

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

CardType = Literal["Character", "Item", "Action", "Song", "Location"]
Rarity = Literal["Common", "Uncommon", "Rare", "Super Rare", "Legendary", "Enchanted", "Promo"]

PERMANENT_TYPES: frozenset[str] = frozenset({"Character", "Item", "Location"})


def card_key(set_num: int, card_num: int) -> str:
    return f"{set_num}-{card_num}"


@dataclass(frozen=True)
class CardTemplate:
    """Static card identity, shared by every instance of the card."""

    set_num: int
    card_num: int
    name: str
    cost: int
    type: CardType
    inkable: bool
    strength: int = 0
    willpower: int = 0
    lore: int = 0
    evasive: bool = False
    resist: int = 0
    move_cost: int = 0
    rarity: Rarity = "Common"
    classifications: tuple[str, ...] = ()
    abilities: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return card_key(self.set_num, self.card_num)

    @property
    def is_permanent(self) -> bool:
        return self.type in PERMANENT_TYPES


@dataclass(frozen=True)
class CardPool:
    """Immutable card pool keyed by "<set>-<number>"."""

    cards: dict[str, CardTemplate]

    def get(self, key: str) -> CardTemplate:
        return self.cards[key]

    def all_keys(self) -> Sequence[str]:
        return list(self.cards.keys())

    def templates(self) -> list[CardTemplate]:
        return list(self.cards.values())

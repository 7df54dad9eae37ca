"""Card ability registry.

Maps a card key ("<set>-<number>") to a ``CardLogic`` holding optional
callbacks for a fixed set of hooks. Abilities register themselves with the
``ability`` decorator at import time (see ``abilities.py``); after that the
registry is only read.

Usage:
    @ability("1-196", "on_play", target="any_character")
    def smash(state, source, target_uid):
        return deal_damage(state, target_uid, 3)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Literal, Mapping

if TYPE_CHECKING:
    from .state import CardInstance, GameState

Hook = Literal["on_play", "on_quest", "on_challenge", "on_ally_banished", "on_turn_start"]
HOOKS: tuple[Hook, ...] = ("on_play", "on_quest", "on_challenge", "on_ally_banished", "on_turn_start")

# What an on_play target may be. The AI only builds targeted candidates for
# kinds that can reach the opposing field.
TargetKind = Literal["opposing_character", "any_character", "own_character"]

EffectFn = Callable[["GameState", "CardInstance", "int | None"], "GameState"]


@dataclass(frozen=True)
class CardLogic:
    on_play: EffectFn | None = None
    on_quest: EffectFn | None = None
    on_challenge: EffectFn | None = None
    on_ally_banished: EffectFn | None = None
    on_turn_start: EffectFn | None = None
    target: TargetKind | None = None

    def hook(self, name: Hook) -> EffectFn | None:
        return getattr(self, name)

    def hooks(self) -> list[Hook]:
        return [h for h in HOOKS if self.hook(h) is not None]


_REGISTRY: dict[str, CardLogic] = {}

CARD_REGISTRY: Mapping[str, CardLogic] = MappingProxyType(_REGISTRY)


def ability(
    key: str, hook: Hook, *, target: TargetKind | None = None
) -> Callable[[EffectFn], EffectFn]:
    """Register ``fn`` as the ``hook`` callback of card ``key``."""
    if hook not in HOOKS:
        raise ValueError(f"Unknown hook: {hook}")

    def decorator(fn: EffectFn) -> EffectFn:
        logic = _REGISTRY.get(key, CardLogic())
        if logic.hook(hook) is not None:
            raise ValueError(f"{key} already has an {hook} ability")
        changes: dict[str, object] = {hook: fn}
        if target is not None:
            changes["target"] = target
        _REGISTRY[key] = replace(logic, **changes)
        return fn

    return decorator


def get_card_logic(key: str) -> CardLogic | None:
    return _REGISTRY.get(key)


def get_hook(key: str, hook: Hook) -> EffectFn | None:
    logic = _REGISTRY.get(key)
    if logic is None:
        return None
    return logic.hook(hook)


def registered_keys() -> list[str]:
    return sorted(_REGISTRY.keys())

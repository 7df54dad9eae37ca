from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InkAction:
    uid: int


@dataclass(frozen=True)
class PlayAction:
    uid: int
    target: int | None = None


@dataclass(frozen=True)
class QuestAction:
    uid: int


@dataclass(frozen=True)
class ChallengeAction:
    attacker: int
    defender: int


@dataclass(frozen=True)
class MoveAction:
    character: int
    location: int


@dataclass(frozen=True)
class EndTurnAction:
    pass


Action = InkAction | PlayAction | QuestAction | ChallengeAction | MoveAction | EndTurnAction

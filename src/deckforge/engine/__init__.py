"""Deterministic, headless rules engine for DeckForge.

IMPORTANT: This package performs no I/O; card data is passed in.
"""

from . import abilities  # noqa: F401  (registers card abilities)
from .actions import ChallengeAction, EndTurnAction, InkAction, MoveAction, PlayAction, QuestAction
from .ai import AISpec, decide, generate_ai_move
from .match import (
    MatchConfig,
    challenge,
    end_turn,
    ink,
    legal_actions,
    move_to_location,
    new_match,
    play,
    quest,
    replay,
    start_turn,
    step,
)
from .registry import CARD_REGISTRY, CardLogic, ability, get_card_logic
from .simulator import BatchReport, MatchResult, run_batch, run_batch_async, run_match
from .state import CardInstance, GameState, Modifiers, PlayerState, clone_state, new_instance, swap
from .types import CardPool, CardTemplate, CardType

__all__ = [
    "AISpec",
    "BatchReport",
    "CARD_REGISTRY",
    "CardInstance",
    "CardLogic",
    "CardPool",
    "CardTemplate",
    "CardType",
    "ChallengeAction",
    "EndTurnAction",
    "GameState",
    "InkAction",
    "MatchConfig",
    "MatchResult",
    "Modifiers",
    "MoveAction",
    "PlayAction",
    "PlayerState",
    "QuestAction",
    "ability",
    "challenge",
    "clone_state",
    "decide",
    "end_turn",
    "generate_ai_move",
    "get_card_logic",
    "ink",
    "legal_actions",
    "move_to_location",
    "new_instance",
    "new_match",
    "play",
    "quest",
    "replay",
    "run_batch",
    "run_batch_async",
    "run_match",
    "start_turn",
    "step",
    "swap",
]

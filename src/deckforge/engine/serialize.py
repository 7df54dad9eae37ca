from __future__ import annotations


from .actions import Action, ChallengeAction, EndTurnAction, InkAction, MoveAction, PlayAction, QuestAction
from .state import CardInstance, GameState, Modifiers, PlayerState


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, InkAction):
        return {"type": "ink", "uid": a.uid}
    if isinstance(a, PlayAction):
        return {"type": "play", "uid": a.uid, "target": a.target}
    if isinstance(a, QuestAction):
        return {"type": "quest", "uid": a.uid}
    if isinstance(a, ChallengeAction):
        return {"type": "challenge", "attacker": a.attacker, "defender": a.defender}
    if isinstance(a, MoveAction):
        return {"type": "move", "character": a.character, "location": a.location}
    if isinstance(a, EndTurnAction):
        return {"type": "end_turn"}
    # should be unreachable
    return {"type": "unknown"}


def _modifiers_to_dict(m: Modifiers) -> dict[str, object]:
    return {
        "cannot_quest": m.cannot_quest,
        "cannot_challenge": m.cannot_challenge,
        "frozen": m.frozen,
        "evasive_granted": m.evasive_granted,
        "resist_granted": m.resist_granted,
        "strength_bonus": m.strength_bonus,
    }


def _card_to_dict(c: CardInstance) -> dict[str, object]:
    return {
        "uid": c.uid,
        "key": c.key,
        "name": c.name,
        "exerted": c.exerted,
        "summoning_sick": c.summoning_sick,
        "face_down": c.face_down,
        "damage": c.damage,
        "modifiers": _modifiers_to_dict(c.modifiers),
        "location_uid": c.location_uid,
    }


def _player_to_dict(p: PlayerState) -> dict[str, object]:
    return {
        "lore": p.lore,
        "has_inked_this_turn": p.has_inked_this_turn,
        "deck": [_card_to_dict(c) for c in p.deck],
        "hand": [_card_to_dict(c) for c in p.hand],
        "inkwell": [_card_to_dict(c) for c in p.inkwell],
        "field": [_card_to_dict(c) for c in p.field],
        "discard": [_card_to_dict(c) for c in p.discard],
    }


def snapshot(state: GameState, include_log: bool = False) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the game state."""
    out: dict[str, object] = {
        "seed": state.seed,
        "turn": state.turn,
        "phase": state.phase,
        "selected_uid": state.selected_uid,
        "lore_velocity": state.lore_velocity,
        "opposing_velocity": state.opposing_velocity,
        "active": _player_to_dict(state.active),
        "opposing": _player_to_dict(state.opposing),
    }
    if include_log:
        out["log"] = [dict(e) for e in state.log]
    return out

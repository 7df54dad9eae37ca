from __future__ import annotations

import pytest
from helpers import (
    CAPTAIN_HOOK,
    ELSA,
    FAIRY_DUST,
    MALEFICENT,
    SMASH,
    character,
    game,
    in_hand,
    ink_cards,
    on_field,
    player,
)

from deckforge.engine.actions import ChallengeAction, InkAction, PlayAction, QuestAction
from deckforge.engine.ai import NO_MOVE, AISpec, decide, generate_ai_move, strategy_weights
from deckforge.engine.serialize import snapshot


def test_strategy_weights() -> None:
    spec = AISpec()
    assert strategy_weights(1.0, 2.0, spec) == ("control", pytest.approx(1 / 1.5), 1.5)
    assert strategy_weights(2.0, 1.0, spec) == ("rush", 1.5, pytest.approx(1 / 1.5))
    assert strategy_weights(1.0, 1.0, spec) == ("balanced", 1.0, 1.0)


def test_ahead_in_the_race_quests() -> None:
    state = game(player(field=(on_field(character(1, lore=2), 1),)))
    decision = decide(state)
    assert decision.mode == "rush"
    best = decision.best
    assert best is not None
    assert best.action == QuestAction(uid=1)
    assert best.score == pytest.approx(150.0)


def test_threatened_quester_is_penalised() -> None:
    ours = on_field(character(1, strength=1, willpower=2, lore=1), 1)
    enemy = on_field(character(20, strength=3, willpower=3, lore=1), 20)
    decision = decide(game(player(field=(ours,)), player(field=(enemy,))))
    assert decision.mode == "balanced"
    best = decision.best
    assert best is not None
    assert best.kind == "quest"
    assert best.score == pytest.approx(30.0)


def test_only_lethal_challenges_are_candidates() -> None:
    attacker = on_field(character(1, cost=3, strength=3, willpower=3, lore=0), 1)
    weak = on_field(character(20, cost=2, strength=1, willpower=2, lore=2), 20, exerted=True)
    tough = on_field(character(21, cost=2, strength=1, willpower=5, lore=2), 21, exerted=True)
    decision = decide(game(player(field=(attacker,)), player(field=(weak, tough))))

    challenges = [c for c in decision.candidates if c.kind == "challenge"]
    assert [c.action for c in challenges] == [ChallengeAction(attacker=1, defender=20)]
    assert challenges[0].score == pytest.approx(70.0)


def test_trade_penalty_when_attacker_dies_too() -> None:
    attacker = on_field(character(1, cost=3, strength=3, willpower=3, lore=0), 1)
    defender = on_field(character(20, cost=2, strength=3, willpower=2, lore=2), 20, exerted=True)
    decision = decide(game(player(field=(attacker,)), player(field=(defender,))))
    best = decision.best
    assert best is not None
    assert best.score == pytest.approx(55.0)


def test_play_score() -> None:
    hand = (in_hand(character(2, cost=2, strength=2, willpower=3, lore=1), 2),)
    decision = decide(game(player(hand=hand, inkwell=ink_cards(2))))
    assert [c.kind for c in decision.candidates] == ["play"]
    best = decision.best
    assert best is not None
    assert best.score == pytest.approx(26.0)


def test_ink_when_nothing_is_affordable() -> None:
    hand = (in_hand(character(2, cost=5), 2), in_hand(character(3, cost=5), 3))
    decision = decide(game(player(hand=hand)))
    assert [c.action for c in decision.candidates] == [InkAction(uid=2), InkAction(uid=3)]
    best = decision.best
    assert best is not None and best.score == pytest.approx(15.0)


def test_targeted_play_is_scored_on_a_copy() -> None:
    enemy = on_field(character(20, lore=2), 20)
    state = game(player(hand=(in_hand(MALEFICENT, 1),), inkwell=ink_cards(9)), player(field=(enemy,)))
    before = snapshot(state, include_log=True)

    decision = decide(state)
    assert decision.mode == "control"
    best = decision.best
    assert best is not None
    assert best.action == PlayAction(uid=1, target=20)
    # 10*9 + 7 + 5 + 2, plus 100 per point of opposing velocity removed
    assert best.score == pytest.approx(304.0)
    assert snapshot(state, include_log=True) == before


def test_friendly_fire_is_never_proposed() -> None:
    ours = on_field(character(2, lore=1), 2)
    enemy = on_field(character(20, willpower=3, lore=1), 20)
    state = game(player(hand=(in_hand(SMASH, 1),), inkwell=ink_cards(3), field=(ours,)), player(field=(enemy,)))
    decision = decide(state)

    plays = [c.action for c in decision.candidates if c.kind == "play"]
    assert plays == [PlayAction(uid=1, target=20), PlayAction(uid=1)]
    best = decision.best
    assert best is not None
    assert best.action == PlayAction(uid=1, target=20)
    assert best.score == pytest.approx(130.0)


def test_own_target_cards_are_played_untargeted() -> None:
    ours = on_field(character(2, lore=1), 2)
    state = game(player(hand=(in_hand(FAIRY_DUST, 1),), inkwell=ink_cards(1), field=(ours,)))
    plays = [c for c in decide(state).candidates if c.kind == "play"]
    assert [c.action for c in plays] == [PlayAction(uid=1)]
    assert plays[0].score == pytest.approx(10.0)


def test_targeted_characters_are_played_with_no_enemy_on_the_field() -> None:
    hand = (in_hand(MALEFICENT, 1), in_hand(ELSA, 2))
    state = game(player(hand=hand, inkwell=ink_cards(9)))
    decision = decide(state)
    assert [(c.action, c.score) for c in decision.candidates] == [
        (PlayAction(uid=1), pytest.approx(104.0)),
        (PlayAction(uid=2), pytest.approx(93.0)),
    ]

    new_state, rationale = generate_ai_move(state)
    assert new_state.active.get("field", 1) is not None
    assert rationale.startswith("[AI] Play Maleficent - Monstrous Dragon")


def test_targeted_candidates_are_added_on_top_of_the_plain_play() -> None:
    enemy = on_field(character(20, lore=2), 20)
    state = game(player(hand=(in_hand(ELSA, 1),), inkwell=ink_cards(8)), player(field=(enemy,)))
    plays = [c.action for c in decide(state).candidates if c.kind == "play"]
    assert set(plays) == {PlayAction(uid=1), PlayAction(uid=1, target=20)}


def test_challenger_bonus_makes_a_challenge_lethal() -> None:
    hook = on_field(CAPTAIN_HOOK, 1)
    defender = on_field(character(20, strength=0, willpower=3), 20, exerted=True)
    state = game(player(field=(hook,)), player(field=(defender,)))
    before = snapshot(state, include_log=True)

    challenges = [c for c in decide(state).candidates if c.kind == "challenge"]
    assert [c.action for c in challenges] == [ChallengeAction(attacker=1, defender=20)]
    # rush: (40 + 10*1 + 5*1) / 1.5
    assert challenges[0].score == pytest.approx(55.0 / 1.5)
    assert snapshot(state, include_log=True) == before


def test_no_move_leaves_state_alone() -> None:
    state = game(player())
    new_state, rationale = generate_ai_move(state)
    assert new_state is state
    assert rationale == NO_MOVE


def test_generate_move_commits_best_candidate() -> None:
    state = game(player(field=(on_field(character(1, lore=2), 1),)))
    new_state, rationale = generate_ai_move(state)
    assert new_state.active.lore == 2
    assert rationale.startswith("[AI] Quest with")
    assert "Strategy: rush" in rationale


def test_generate_move_for_opposing_side() -> None:
    state = game(player(), player(field=(on_field(character(20, lore=2), 20),)))
    new_state, rationale = generate_ai_move(state, side="opposing")
    assert new_state.opposing.lore == 2
    assert new_state.active == state.active
    assert rationale.startswith("[AI] Quest with")


def test_equal_scores_keep_enumeration_order() -> None:
    field = (on_field(character(1, lore=1), 1), on_field(character(2, lore=1), 2))
    decision = decide(game(player(field=field)))
    assert [c.action for c in decision.candidates] == [QuestAction(uid=1), QuestAction(uid=2)]

import pytest

from dealgame.domain import engine
from dealgame.domain.engine import ChallengeCompletion, GameMode, SessionSnapshot
from dealgame.domain.types import Decision, Severity


def _run_clock(state, seconds):
    outcomes = []
    for _ in range(seconds):
        state, outcome = engine.tick(state)
        if outcome is not None:
            outcomes.append(outcome)
    return state, outcomes


def test_good_buy_end_to_end(make_case, case_source):
    state = engine.start_regular_game(case_source([make_case()]))
    state, outcome = engine.submit_decision(state, Decision.BUY)

    assert outcome.result.points == 100
    assert "$70,000" in outcome.result.explanation
    assert state.score.points == 100
    assert state.score.good_deals == 1
    assert isinstance(outcome.persist, SessionSnapshot)
    assert outcome.persist.to_payload()["points"] == 100


def test_bad_buy_with_hidden_high_flag_end_to_end(make_case, make_flag, case_source):
    case = make_case(is_good_deal=False, actual_value=150000, flags=(make_flag("f1", Severity.high),))
    state = engine.start_regular_game(case_source([case]))
    state, outcome = engine.submit_decision(state, "BUY")

    assert outcome.result.points == -200
    assert state.score.mistakes == 1


def test_timeout_forces_single_walk_away(make_case, case_source):
    state = engine.start_regular_game(case_source([make_case()]))
    state, outcomes = _run_clock(state, 300)

    assert len(outcomes) == 1
    forced = outcomes[0]
    assert forced.forced
    assert forced.decision == Decision.WALK_AWAY
    assert forced.time_taken == 300
    assert state.current.timer.expired

    # late ticks and late clicks are no-ops
    state, more = _run_clock(state, 5)
    assert more == []
    same, outcome = engine.submit_decision(state, Decision.BUY)
    assert outcome is None
    assert same.score == state.score


def test_decision_cancels_timer(make_case, case_source):
    state = engine.start_regular_game(case_source([make_case()]))
    state, _ = _run_clock(state, 42)
    state, outcome = engine.submit_decision(state, Decision.WALK_AWAY)
    assert outcome.time_taken == 42
    assert not outcome.forced

    state, later = _run_clock(state, 400)
    assert later == []
    assert state.score.cases_solved == 1


def test_second_decision_is_noop(make_case, case_source):
    state = engine.start_regular_game(case_source([make_case()]))
    state, _ = engine.submit_decision(state, Decision.BUY)
    again, outcome = engine.submit_decision(state, Decision.WALK_AWAY)
    assert outcome is None
    assert again == state


def test_no_decision_is_noop(make_case, case_source):
    state = engine.start_regular_game(case_source([make_case()]))
    same, outcome = engine.submit_decision(state, None)
    assert outcome is None
    assert same is state


def test_flag_reveal_scores_once(make_case, make_flag, case_source):
    case = make_case(flags=(make_flag("f1", Severity.medium),))
    state = engine.start_regular_game(case_source([case]))

    once = engine.select_flag(state, "f1")
    twice = engine.select_flag(once, "f1")

    assert twice == once
    assert once.score.points == 25
    assert once.score.red_flags_found == 1
    assert once.current.case_points == 25


def test_quiz_points_settle_at_decision(make_case, make_flag, case_source):
    case = make_case(is_good_deal=False, actual_value=100000, flags=(make_flag("q1", Severity.high, quiz=True, correct=1),))
    state = engine.start_regular_game(case_source([case]))

    state = engine.select_flag(state, "q1")
    assert state.current.pending_quiz_flag == "q1"
    assert state.score.points == 0

    state = engine.submit_quiz_answer(state, "q1", 1)
    assert state.current.pending_quiz_flag is None
    assert state.score.red_flags_found == 1
    assert state.score.points == 0

    state, outcome = engine.submit_decision(state, Decision.WALK_AWAY)
    assert outcome.quiz_points == 75
    assert state.score.points == 75 + 50
    assert state.score.red_flag_correct == 1
    assert state.score.bad_deals_avoided == 1


def test_cancel_quiz_leaves_flag_hidden(make_case, make_flag, case_source):
    case = make_case(flags=(make_flag("q1", quiz=True),))
    state = engine.start_regular_game(case_source([case]))
    state = engine.cancel_quiz(engine.select_flag(state, "q1"))
    assert state.current.pending_quiz_flag is None
    assert not state.current.case.flag("q1").discovered


def test_flags_locked_after_decision(make_case, make_flag, case_source):
    case = make_case(flags=(make_flag("f1", Severity.medium),))
    state = engine.start_regular_game(case_source([case]))
    state, _ = engine.submit_decision(state, Decision.BUY)
    assert engine.select_flag(state, "f1") is state


def test_daily_challenge_completion(make_case, make_flag):
    case = make_case(
        "daily-9",
        is_good_deal=False,
        actual_value=100000,
        flags=(make_flag("flag-0", Severity.medium), make_flag("flag-1", Severity.low, quiz=True, correct=1)),
    )
    state = engine.start_daily_challenge(case, 9)
    assert state.mode == GameMode.daily

    state, _ = _run_clock(state, 12)
    state = engine.select_flag(state, "flag-0")
    state = engine.submit_quiz_answer(engine.select_flag(state, "flag-1"), "flag-1", 0)
    state, outcome = engine.submit_decision(state, Decision.WALK_AWAY)

    assert isinstance(outcome.persist, ChallengeCompletion)
    assert outcome.persist.challenge_id == 9
    assert outcome.persist.points_earned == 25 - 25 + 50
    assert outcome.persist.to_payload() == {"decision": "WALK_AWAY", "points_earned": 50, "time_taken": 12}


def test_daily_challenge_has_one_case(make_case):
    state = engine.start_daily_challenge(make_case(), 1)
    with pytest.raises(ValueError):
        engine.load_next_case(state, None)


def test_next_case_excludes_completed_then_cycles(make_case, case_source):
    source = case_source([make_case("a"), make_case("b")])
    state = engine.start_regular_game(source)
    assert state.current.case.id == "a"

    state, _ = engine.submit_decision(state, Decision.BUY)
    state = engine.load_next_case(state, source)
    assert state.current.case.id == "b"
    assert state.current.timer.remaining_s == 300

    state, _ = engine.submit_decision(state, Decision.BUY)
    state = engine.load_next_case(state, source)
    # every case seen: start over
    assert state.current.case.id == "a"
    assert state.completed_case_ids == ()
    assert state.score.cases_solved == 2


def test_exit_drops_unresolved_case(make_case, case_source):
    state = engine.start_regular_game(case_source([make_case()]))
    state = engine.exit_game(state)
    assert state.current is None
    same, outcome = engine.submit_decision(state, Decision.BUY)
    assert outcome is None


def test_daily_points_earned_is_case_total_not_decision_points(make_case, make_flag):
    case = make_case("daily-3", flags=(make_flag("flag-0", Severity.medium),))
    state = engine.start_daily_challenge(case, 3)
    state = engine.select_flag(state, "flag-0")
    state, outcome = engine.submit_decision(state, Decision.BUY)

    assert outcome.result.points == 100
    assert outcome.persist.points_earned == 125

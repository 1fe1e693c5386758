from datetime import date, timedelta

import pytest

from dealgame.domain.types import Decision
from dealgame.models import Difficulty
from dealgame.service_layer import daily_challenges as svc

DAY = date(2025, 3, 14)


async def _challenge(session, scenario, day=DAY):
    ch = await svc.create_challenge(session, day, Difficulty.medium, scenario)
    await session.commit()
    return ch


async def _complete(session, user, ch, points=50, time_taken=30):
    row = await svc.complete_challenge(
        session,
        user_id=user.id,
        challenge_id=ch.id,
        decision=Decision.WALK_AWAY,
        points_earned=points,
        time_taken=time_taken,
    )
    await session.commit()
    return row


async def test_challenge_case_normalizes_stored_scenario(async_session_maker, scenario):
    async with async_session_maker() as session:
        ch = await _challenge(session, scenario)
        case = svc.challenge_case(ch)
    assert case.id == f"daily-{ch.id}"
    assert len(case.red_flags) == 2


async def test_one_challenge_per_date(async_session_maker, scenario):
    async with async_session_maker() as session:
        await _challenge(session, scenario)
        with pytest.raises(svc.ChallengeExists):
            await svc.create_challenge(session, DAY, Difficulty.hard, scenario)


async def test_duplicate_completion_rejected(async_session_maker, users, scenario):
    alice = users[0]
    async with async_session_maker() as session:
        ch = await _challenge(session, scenario)
        await _complete(session, alice, ch)

        with pytest.raises(svc.ChallengeAlreadyCompleted):
            await _complete(session, alice, ch)


async def test_concurrent_double_submit_caught_by_constraint(async_session_maker, users, scenario, monkeypatch):
    alice = users[0]
    async with async_session_maker() as session:
        ch = await _challenge(session, scenario)
        await _complete(session, alice, ch)

    # both requests passed the pre-check before either inserted
    async def _nothing_yet(*args, **kwargs):
        return None

    monkeypatch.setattr(svc, "get_completion", _nothing_yet)

    async with async_session_maker() as session:
        with pytest.raises(svc.ChallengeAlreadyCompleted):
            await _complete(session, alice, ch)

    async with async_session_maker() as session:
        monkeypatch.undo()
        assert await svc.get_completion(session, alice.id, ch.id) is not None


async def test_unknown_challenge(async_session_maker, users):
    async with async_session_maker() as session:
        with pytest.raises(svc.ChallengeNotFound):
            await svc.complete_challenge(
                session,
                user_id=users[0].id,
                challenge_id=999,
                decision=Decision.BUY,
                points_earned=100,
                time_taken=10,
            )


async def test_daily_leaderboard_orders_by_points_then_time(async_session_maker, users, scenario):
    alice, bob, carol = users
    async with async_session_maker() as session:
        ch = await _challenge(session, scenario)
        await _complete(session, alice, ch, points=50, time_taken=90)
        await _complete(session, bob, ch, points=125, time_taken=200)
        await _complete(session, carol, ch, points=50, time_taken=20)

        rows = await svc.daily_leaderboard(session, DAY)

    assert [r["username"] for r in rows] == ["Bob", "carol", "alice"]
    assert [r["rank"] for r in rows] == [1, 2, 3]
    assert rows[0]["points"] == 125


async def test_leaderboard_for_day_without_challenge_is_empty(async_session_maker):
    async with async_session_maker() as session:
        assert await svc.daily_leaderboard(session, DAY) == []


async def test_history_pages_newest_first(async_session_maker, users, scenario):
    alice = users[0]
    async with async_session_maker() as session:
        made = [await _challenge(session, scenario, DAY - timedelta(days=i)) for i in range(3)]
        await _complete(session, alice, made[1], points=75)

        page = await svc.challenge_history(session, alice.id, page=1, limit=2)
        rest = await svc.challenge_history(session, alice.id, page=2, limit=2)

    assert [c["challenge_date"] for c in page["challenges"]] == [DAY, DAY - timedelta(days=1)]
    assert page["challenges"][0]["completed"] is False
    assert page["challenges"][1]["completed"] is True
    assert page["challenges"][1]["points_earned"] == 75
    assert page["pagination"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}
    assert len(rest["challenges"]) == 1


async def test_replace_keeps_challenge_id(async_session_maker, scenario):
    async with async_session_maker() as session:
        ch = await _challenge(session, scenario)
        scenario["address"] = "14 Haunted Hollow Rd"
        again = await svc.replace_challenge_data(session, DAY, Difficulty.hard, scenario)
        await session.commit()

    assert again.id == ch.id
    assert svc.challenge_property_data(again)["address"] == "14 Haunted Hollow Rd"
    assert again.difficulty == Difficulty.hard

from datetime import date

from sqlalchemy import select

from dealgame.jobs.daily_challenge import ensure_todays_challenge, run_daily_challenge_job
from dealgame.models import DailyChallenge, JobRun, JobRunStatus

DAY = date(2025, 3, 14)


class FakeGenerator:
    def __init__(self, scenario=None, error=None):
        self.scenario = scenario
        self.error = error
        self.calls = 0

    async def generate(self, difficulty):
        self.calls += 1
        if self.error:
            raise self.error
        return dict(self.scenario)


async def _runs(async_session_maker):
    async with async_session_maker() as session:
        return (await session.execute(select(JobRun).order_by(JobRun.id))).scalars().all()


async def test_job_creates_then_skips(async_session_maker, scenario):
    gen = FakeGenerator(scenario)

    first = await run_daily_challenge_job(generator=gen, challenge_date=DAY, session_factory=async_session_maker)
    second = await run_daily_challenge_job(generator=gen, challenge_date=DAY, session_factory=async_session_maker)

    assert first["skipped"] is False
    assert first["difficulty"] in {"easy", "medium", "hard"}
    assert second == {"date": DAY.isoformat(), "skipped": True, "challenge_id": first["challenge_id"]}
    assert gen.calls == 1

    runs = await _runs(async_session_maker)
    assert [r.status for r in runs] == [JobRunStatus.success, JobRunStatus.success]


async def test_job_failure_is_recorded_not_raised(async_session_maker):
    gen = FakeGenerator(error=RuntimeError("model unavailable"))

    res = await run_daily_challenge_job(generator=gen, challenge_date=DAY, session_factory=async_session_maker)

    assert "model unavailable" in res["error"]
    runs = await _runs(async_session_maker)
    assert runs[0].status == JobRunStatus.failed
    assert "RuntimeError" in runs[0].error

    async with async_session_maker() as session:
        assert (await session.execute(select(DailyChallenge))).scalars().all() == []


async def test_ensure_todays_challenge_uses_today(async_session_maker, scenario, monkeypatch):
    import dealgame.jobs.daily_challenge as job

    monkeypatch.setattr(job, "today_in_timezone", lambda tz: DAY)
    res = await ensure_todays_challenge(generator=FakeGenerator(scenario), session_factory=async_session_maker)
    assert res["date"] == DAY.isoformat()

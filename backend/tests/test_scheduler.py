import asyncio

from sqlalchemy import select

from dealgame.jobs import scheduler as scheduler_mod
from dealgame.jobs.daily_challenge import ensure_todays_challenge, run_daily_challenge_job
from dealgame.models import DailyChallenge


class FakeGenerator:
    def __init__(self, scenario):
        self.scenario = scenario

    async def generate(self, difficulty):
        return dict(self.scenario)


async def _wait_for(predicate, timeout_s: float = 3.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_s
    while not predicate() and loop.time() < deadline:
        await asyncio.sleep(0.05)


def test_jobs_are_registered_as_coroutine_functions():
    sched = scheduler_mod.build_scheduler()
    jobs = {job.id: job for job in sched.get_jobs()}

    assert set(jobs) == {"daily_challenge", "daily_challenge_catch_up"}
    assert jobs["daily_challenge"].func is run_daily_challenge_job
    assert jobs["daily_challenge_catch_up"].func is ensure_todays_challenge


def test_catch_up_can_be_disabled():
    sched = scheduler_mod.build_scheduler(catch_up=False)
    assert [job.id for job in sched.get_jobs()] == ["daily_challenge"]


async def test_catch_up_job_runs_on_the_event_loop(monkeypatch):
    ran: list[asyncio.AbstractEventLoop] = []

    async def record() -> None:
        ran.append(asyncio.get_running_loop())

    monkeypatch.setattr(scheduler_mod, "ensure_todays_challenge", record)

    sched = scheduler_mod.build_scheduler()
    sched.start()
    try:
        await _wait_for(lambda: bool(ran))
    finally:
        sched.shutdown(wait=False)

    assert ran == [asyncio.get_running_loop()]


async def test_catch_up_generates_todays_challenge(monkeypatch, async_session_maker, scenario):
    results: list[dict] = []

    async def catch_up() -> None:
        results.append(
            await ensure_todays_challenge(generator=FakeGenerator(scenario), session_factory=async_session_maker)
        )

    monkeypatch.setattr(scheduler_mod, "ensure_todays_challenge", catch_up)

    sched = scheduler_mod.build_scheduler()
    sched.start()
    try:
        await _wait_for(lambda: bool(results))
    finally:
        sched.shutdown(wait=False)

    assert len(results) == 1
    assert results[0]["skipped"] is False
    assert "error" not in results[0]
    async with async_session_maker() as session:
        rows = (await session.execute(select(DailyChallenge))).scalars().all()
    assert len(rows) == 1

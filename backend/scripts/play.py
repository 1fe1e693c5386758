# scripts/play.py
"""
Terminal host for the game engine.

  python scripts/play.py                    # regular game, offline
  python scripts/play.py --user-id 1        # regular game, scores saved to the API
  python scripts/play.py --user-id 1 --daily

Commands while a case is open:
  f <n>          inspect red flag n
  a <n>          answer the open quiz with choice n
  c              close the open quiz
  buy | investigate | walk
  q              quit
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import time

from dealgame.adapters.clients.game_api import GameApiClient
from dealgame.adapters.repos.cases import default_case_repository
from dealgame.config import settings
from dealgame.domain import engine
from dealgame.domain.normalize import case_from_challenge
from dealgame.domain.policies import surviving_lien_total
from dealgame.domain.scoring import format_currency
from dealgame.domain.timer import whole_seconds
from dealgame.domain.types import Decision
from dealgame.service_layer.score_sync import ScoreSync

log = logging.getLogger("play")

COMMANDS = {
    "buy": Decision.BUY,
    "investigate": Decision.INVESTIGATE,
    "walk": Decision.WALK_AWAY,
}


def _quiet_logging() -> None:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s:%(name)s:%(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _render(state: engine.GameState) -> None:
    cur = state.current
    if cur is None:
        return
    case = cur.case
    print()
    print(f"=== {case.address}, {case.city}, {case.state} {case.zip} ===")
    print(case.description)
    print(f"  Auction price:   {format_currency(case.auction_price)}")
    print(f"  Market value:    {format_currency(case.property_value)}")
    print(f"  Repair estimate: {format_currency(case.repair_estimate)}")
    print(f"  Occupancy:       {case.occupancy_status.value}")
    for lien in case.liens:
        note = f" ({lien.notes})" if lien.notes else ""
        print(f"  Lien #{lien.priority}: {lien.type}, {lien.holder}, {format_currency(lien.amount)}{note}")
    print()
    for i, f in enumerate(case.red_flags):
        if f.discovered:
            print(f"  [{i}] {f.hidden_in}: {f.description} ({f.severity.value})")
        else:
            print(f"  [{i}] {f.hidden_in}: ???")
    print(f"\nScore {state.score.points}  |  {cur.timer.remaining_s}s left")

    if cur.pending_quiz_flag:
        flag = case.flag(cur.pending_quiz_flag)
        if flag is not None:
            print(f"\nQUIZ: {flag.question}")
            for i, choice in enumerate(flag.choices):
                print(f"  {i}) {choice}")


def _report(state: engine.GameState, outcome: engine.DecisionOutcome) -> None:
    case = state.current.case if state.current else None
    prefix = "Time's up! " if outcome.forced else ""
    print(f"\n{prefix}{outcome.result.message} ({outcome.result.points:+d})")
    print(outcome.result.explanation)
    if outcome.quiz_points:
        print(f"Quiz answers: {outcome.quiz_points:+d}")
    if case is not None:
        for f in case.red_flags:
            if f.is_quiz and f.user_answer is not None and f.answer_explanation:
                print(f"  - {f.answer_explanation}")
        surviving = surviving_lien_total(case)
        if surviving:
            print(f"Liens that survived the sale: {format_currency(surviving)}")
    print(f"Total score: {state.score.points}")


def _advance_clock(
    state: engine.GameState, seconds: int
) -> tuple[engine.GameState, engine.DecisionOutcome | None]:
    outcome = None
    for _ in range(seconds):
        state, fired = engine.tick(state)
        outcome = outcome or fired
    return state, outcome


def _apply(state: engine.GameState, cmd: str) -> tuple[engine.GameState, engine.DecisionOutcome | None]:
    parts = cmd.split()
    if not parts:
        return state, None
    head = parts[0].lower()

    if head in COMMANDS:
        return engine.submit_decision(state, COMMANDS[head])
    if head == "c":
        return engine.cancel_quiz(state), None
    if head in ("f", "a") and len(parts) == 2 and parts[1].isdigit():
        n = int(parts[1])
        cur = state.current
        if cur is None:
            return state, None
        if head == "f":
            if n < len(cur.case.red_flags):
                return engine.select_flag(state, cur.case.red_flags[n].id), None
            return state, None
        if cur.pending_quiz_flag is None:
            print("No quiz is open.")
            return state, None
        try:
            return engine.submit_quiz_answer(state, cur.pending_quiz_flag, n), None
        except ValueError as e:
            print(e)
            return state, None

    print("Unknown command.")
    return state, None


async def _play_case(state: engine.GameState, sync: ScoreSync | None) -> tuple[engine.GameState, bool]:
    """Returns (state, quit_requested)."""
    carry = 0.0
    while state.current is not None and not state.current.resolved:
        _render(state)
        started = time.monotonic()
        cmd = (await asyncio.to_thread(input, "> ")).strip()

        # the clock kept running while the player was reading
        seconds, carry = whole_seconds(time.monotonic() - started, carry)
        state, outcome = _advance_clock(state, seconds)
        if outcome is None and cmd.lower() == "q":
            return engine.exit_game(state), True
        if outcome is None:
            state, outcome = _apply(state, cmd)

        if outcome is not None:
            _report(state, outcome)
            if sync is not None:
                sync.submit(outcome.persist)
    return state, False


async def main() -> None:
    parser = argparse.ArgumentParser(description="Deal or Disaster in the terminal")
    parser.add_argument("--user-id", type=int, default=None, help="Save scores to the API as this user")
    parser.add_argument("--daily", action="store_true", help="Play today's daily challenge")
    parser.add_argument("--api", default=settings.GAME_API_BASE_URL)
    args = parser.parse_args()

    _quiet_logging()

    client = GameApiClient(args.user_id, base_url=args.api) if args.user_id is not None else None
    sync = ScoreSync(client) if client is not None else None
    budget = settings.CASE_TIME_LIMIT_S

    if args.daily:
        if client is None:
            parser.error("--daily needs --user-id")
        data = await client.today_challenge()
        if data.get("user_completion"):
            print("You've already completed today's challenge.")
            return
        ch = data["challenge"]
        state = engine.start_daily_challenge(
            case_from_challenge(ch["id"], ch["property_data"]), ch["id"], time_budget_s=budget
        )
        state, _ = await _play_case(state, sync)
    else:
        cases = default_case_repository()
        state = engine.start_regular_game(cases, time_budget_s=budget)
        while True:
            state, quit_requested = await _play_case(state, sync)
            if quit_requested:
                break
            again = (await asyncio.to_thread(input, "\nNext case? [Y/n] ")).strip().lower()
            if again.startswith("n"):
                state = engine.exit_game(state)
                break
            state = engine.load_next_case(state, cases)

    if sync is not None:
        await sync.drain()
    print(f"\nFinal score: {state.score.points} over {state.score.cases_solved} case(s).")


if __name__ == "__main__":
    asyncio.run(main())

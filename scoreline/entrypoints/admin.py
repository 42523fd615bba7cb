"""Admin console entrypoint.

Runs one operator action per invocation against the configured database:

    scoreline-admin init-db
    scoreline-admin set-result M1 2 1 --penalty-winner home
    scoreline-admin clear-result M1
    scoreline-admin recalculate --yes
    scoreline-admin rules show
    scoreline-admin rules set --perfect 5 --aggregate 3
    scoreline-admin check
"""

import argparse
import asyncio
import json
import logging
import os
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

from scoreline.config import Settings, load_settings
from scoreline.database import DBM, initialize
from scoreline.handlers.admin import AdminHandler
from scoreline.scoring.audit.logging import ScoringAuditLogger, set_audit_logger
from scoreline.shared.logging import EVENTS_LEVEL_NUM, configure_logging, setup_events_logger

logger = logging.getLogger("scoreline.admin")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scoreline-admin", description="Scoreline admin console")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the database and apply migrations")

    set_result = sub.add_parser("set-result", help="Record or correct a match result")
    set_result.add_argument("match_id")
    set_result.add_argument("home")
    set_result.add_argument("away")
    set_result.add_argument("--penalty-winner", choices=["home", "away"], default=None)

    clear_result = sub.add_parser("clear-result", help="Record an empty result (everyone scores Miss)")
    clear_result.add_argument("match_id")

    recalc = sub.add_parser("recalculate", help="Reset all scores and rebuild them from completed matches")
    recalc.add_argument("--yes", action="store_true", help="Confirm the reset")

    rules = sub.add_parser("rules", help="Show or change scoring rules")
    rules_sub = rules.add_subparsers(dest="rules_command", required=True)
    rules_sub.add_parser("show")
    rules_set = rules_sub.add_parser("set")
    rules_set.add_argument("--perfect", type=int, dest="perfect_score")
    rules_set.add_argument("--aggregate", type=int, dest="aggregate_score")
    rules_set.add_argument("--outcome", type=int, dest="outcome_score")
    rules_set.add_argument("--penalty-bonus", type=int, dest="penalty_bonus")

    sub.add_parser("check", help="Report users whose aggregates drifted from their predictions")
    return parser


def _setup_logging(settings: Settings) -> None:
    configure_logging(settings.logging.level, settings.logging.json_logs)
    if settings.logging.directory:
        events = setup_events_logger(settings.logging.directory, settings.logging.events_retention_size)
        set_audit_logger(ScoringAuditLogger(events, level=EVENTS_LEVEL_NUM))


async def run(args: argparse.Namespace, settings: Settings) -> int:
    if args.command == "init-db":
        initialize(settings)
        print(f"database ready: {settings.database_url()}")
        return 0

    dbm = DBM(settings)
    handler = AdminHandler(dbm, settings)
    try:
        if args.command == "set-result":
            outcome = await handler.record_result(args.match_id, args.home, args.away, args.penalty_winner)
        elif args.command == "clear-result":
            outcome = await handler.clear_result(args.match_id)
        elif args.command == "recalculate":
            outcome = await handler.recalculate_all(confirm=args.yes)
        elif args.command == "rules":
            if args.rules_command == "set":
                try:
                    rules = await handler.update_rules(
                        perfect_score=args.perfect_score,
                        aggregate_score=args.aggregate_score,
                        outcome_score=args.outcome_score,
                        penalty_bonus=args.penalty_bonus,
                    )
                except ValidationError as e:
                    problems = "; ".join(
                        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
                    )
                    print(f"Invalid scoring rules: {problems}")
                    return 1
            else:
                rules = await handler.get_rules()
            print(json.dumps(rules.model_dump(), indent=2))
            return 0
        elif args.command == "check":
            reports = await handler.check_drift()
            for r in reports:
                print(
                    f"{r.user_id}: stored {r.stored_total} {dict(r.stored_stats)} "
                    f"expected {r.expected_total} {dict(r.expected_stats)}"
                )
            if reports:
                print(f"{len(reports)} aggregate(s) drifted; run `scoreline-admin recalculate --yes`")
                return 1
            print("aggregates consistent")
            return 0
        else:
            raise ValueError(f"unknown command {args.command!r}")
    finally:
        await dbm.dispose()

    print(outcome.message)
    return 0 if outcome.ok else 1


def main(argv: list[str] | None = None) -> None:
    # Load .env if not in test mode
    if os.environ.get("SCORELINE_TEST_MODE") != "true":
        load_dotenv()

    args = build_parser().parse_args(argv)
    settings = load_settings()
    _setup_logging(settings)
    logger.debug({"admin": "starting", "command": args.command})

    sys.exit(asyncio.run(run(args, settings)))


if __name__ == "__main__":
    main()

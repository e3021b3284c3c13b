import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from seatkeeper.adapters.sqlite.migrator import SQLiteMigrator
from seatkeeper.app_shell.config import configure_logging
from seatkeeper.app_shell.context import ServiceContext, build_store
from seatkeeper.components.invitations import IssueInvitationsInput, Invitee
from seatkeeper.domain.errors import SeatkeeperError
from seatkeeper.domain.roles import INVITABLE_ROLES, role_label
from seatkeeper.ports.store import StoreError
from seatkeeper.rules.loader import load_rules
from seatkeeper.rules.models import Rules

logger = logging.getLogger("cli")

RULES_PATH = os.environ.get("SEATKEEPER_RULES_PATH", "rules.yaml")
DATA_DIR = os.environ.get("SEATKEEPER_DATA_DIR", "./data")
MIGRATIONS_DIR = "migrations"


def get_rules() -> Rules:
    if not Path(RULES_PATH).exists():
        logger.error("Rules file %s not found.", RULES_PATH)
        sys.exit(1)
    return load_rules(Path(RULES_PATH))


def get_context(rules: Rules) -> ServiceContext:
    store = build_store(rules, Path(DATA_DIR), Path(MIGRATIONS_DIR))
    return ServiceContext.create(store, rules)


def handle_migrate(rules: Rules, check: bool = False) -> None:
    Path(DATA_DIR).mkdir(parents=True, exist_ok=True)
    db_path = str(Path(DATA_DIR) / rules.store.sqlite_filename)
    migrator = SQLiteMigrator(db_path, MIGRATIONS_DIR)
    if check:
        pending = migrator.pending_migrations()
        print(f"{len(pending)} pending migrations for {db_path}.")
        for filename in pending:
            print(f"  {filename}")
        return
    applied = migrator.run_migrations()
    print(f"Applied {len(applied)} migrations to {db_path}.")


async def handle_seats(ctx: ServiceContext, args: argparse.Namespace) -> None:
    usage = await ctx.accountant.get_club_usage(args.club_id)
    for u in usage.values():
        cap = "unlimited" if u.cap is None else str(u.cap)
        print(f"{u.category:<10} {u.committed} of {cap} ({u.members} members, {u.pending} pending)")


async def handle_issue(ctx: ServiceContext, args: argparse.Namespace) -> None:
    inp = IssueInvitationsInput(
        club_id=args.club_id,
        club_name=args.club_name,
        invitees=[
            Invitee(
                email=args.email,
                role=args.role,
                first_name=args.first_name,
                last_name=args.last_name,
            )
        ],
        team_id=args.team,
    )
    invitations = await ctx.issuer.issue(inp)
    ctx.issuer.notify(invitations)
    for inv in invitations:
        print(f"{inv.code}  {inv.admin_email}  {role_label(inv.intended_role)}  expires {inv.expires_at:%Y-%m-%d %H:%M} UTC")


async def handle_codes(ctx: ServiceContext, args: argparse.Namespace) -> None:
    views = await ctx.registry.list_invitations(args.club_id)
    if not views:
        print("No invitations.")
    for view in views:
        inv = view.invitation
        print(f"{inv.code}  {view.status:<11} {inv.admin_email}  {role_label(inv.intended_role)}")


async def handle_check(ctx: ServiceContext, args: argparse.Namespace) -> None:
    view = await ctx.registry.check_invitation(args.code)
    print(f"{view.invitation.code}: {view.status}. {view.message}")


async def handle_redeem(ctx: ServiceContext, args: argparse.Namespace) -> None:
    member = await ctx.finalizer.redeem(args.code, email=args.email)
    print(f"{member.email} joined club {member.club_id} as {role_label(member.role)}.")


HANDLERS = {
    "seats": handle_seats,
    "issue": handle_issue,
    "codes": handle_codes,
    "check": handle_check,
    "redeem": handle_redeem,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seatkeeper CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Apply pending SQLite migrations")
    migrate_parser.add_argument("--check", action="store_true", help="List pending migrations without applying them")

    # seats
    seats_parser = subparsers.add_parser("seats", help="Show a club's seat usage")
    seats_parser.add_argument("club_id")

    # issue
    issue_parser = subparsers.add_parser("issue", help="Issue an invitation code")
    issue_parser.add_argument("club_id")
    issue_parser.add_argument("--club-name", required=True)
    issue_parser.add_argument("--email", required=True)
    issue_parser.add_argument("--role", required=True, choices=INVITABLE_ROLES)
    issue_parser.add_argument("--team", help="Team ID")
    issue_parser.add_argument("--first-name")
    issue_parser.add_argument("--last-name")

    # codes
    codes_parser = subparsers.add_parser("codes", help="List a club's invitation codes")
    codes_parser.add_argument("club_id")

    # check
    check_parser = subparsers.add_parser("check", help="Check whether a code can be redeemed")
    check_parser.add_argument("code")

    # redeem
    redeem_parser = subparsers.add_parser("redeem", help="Redeem a code locally (development)")
    redeem_parser.add_argument("code")
    redeem_parser.add_argument("--email", help="Member email (defaults to the invited address)")

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    rules = get_rules()
    configure_logging(rules.logging.level)

    if args.command == "migrate":
        handle_migrate(rules, check=args.check)
        return

    ctx = get_context(rules)
    try:
        asyncio.run(HANDLERS[args.command](ctx, args))
    except (SeatkeeperError, StoreError) as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()

"""Management commands for the FitTrack auth service.

Run from an environment with the service settings loaded, e.g.:

  python -m fittrack_auth.scripts.manage create-user alice --email alice@example.com
  python -m fittrack_auth.scripts.manage throttle-status alice 203.0.113.5 "curl/8.0"
"""

from __future__ import annotations

import argparse
import getpass
import sys

from fittrack_auth.db.session import SessionLocal, create_tables
from fittrack_auth.services import user_service
from fittrack_auth.services.login_throttle import get_login_throttle
from fittrack_auth.services.throttle_store import ThrottleStoreError


def _read_password() -> str | None:
    try:
        first = getpass.getpass("Password: ")
        second = getpass.getpass("Repeat password: ")
    except EOFError:
        return None
    if first != second:
        print("ERROR: passwords do not match", file=sys.stderr)
        return None
    return first


def cmd_create_user(args: argparse.Namespace) -> int:
    """Create a login account with an Argon2 password hash."""
    password = args.password if args.password is not None else _read_password()
    if not password:
        print("ERROR: a non-empty password is required", file=sys.stderr)
        return 1

    create_tables()
    db = SessionLocal()
    try:
        user = user_service.create_user(
            db,
            args.username,
            password,
            email=args.email,
            is_active=not args.inactive,
        )
    except user_service.UserExistsError as err:
        print(f"ERROR: {err}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(f"OK: created user id={user.id} username={user.username}")
    return 0


def cmd_throttle_status(args: argparse.Namespace) -> int:
    """Print the block state and failure count of a fingerprint."""
    throttle = get_login_throttle()
    fingerprint_args = (args.identity, args.ip, args.user_agent)
    try:
        block = throttle.check_blocked(*fingerprint_args)
        failures = throttle.failure_count(*fingerprint_args)
    except ThrottleStoreError as err:
        print(f"ERROR: throttle store unavailable: {err}", file=sys.stderr)
        return 1

    print(f"- blocked: {'yes' if block.blocked else 'no'}")
    print(f"- remaining_seconds: {block.remaining_seconds}")
    print(f"- failure_count: {failures}")
    return 0


def cmd_throttle_clear(args: argparse.Namespace) -> int:
    """Drop the failure count and any active block of a fingerprint."""
    throttle = get_login_throttle()
    try:
        throttle.reset(args.identity, args.ip, args.user_agent)
    except ThrottleStoreError as err:
        print(f"ERROR: throttle store unavailable: {err}", file=sys.stderr)
        return 1
    print("OK: throttle state cleared.")
    return 0


def _add_fingerprint_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("identity", help="Login identifier (use 'anonymous' for blank logins)")
    parser.add_argument("ip", help="Client IP address")
    parser.add_argument("user_agent", nargs="?", default="", help="User-Agent header value")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fittrack-auth", add_help=True)
    sub = p.add_subparsers(dest="cmd", required=True)

    pc = sub.add_parser("create-user", help="Create a login account")
    pc.add_argument("username")
    pc.add_argument("--email", default=None)
    pc.add_argument("--password", default=None, help="Prompted for when omitted")
    pc.add_argument("--inactive", action="store_true", help="Create the account disabled")
    pc.set_defaults(func=cmd_create_user)

    ps = sub.add_parser("throttle-status", help="Show login throttle state for a fingerprint")
    _add_fingerprint_args(ps)
    ps.set_defaults(func=cmd_throttle_status)

    pr = sub.add_parser("throttle-clear", help="Unlock a fingerprint")
    _add_fingerprint_args(pr)
    pr.set_defaults(func=cmd_throttle_clear)

    return p


def main_cli(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main_cli())

"""
Token maintenance for operators.

    python manage_tokens.py sweep                 # delete expired token rows
    python manage_tokens.py revoke-all <user_id>  # sign a user out everywhere

Meant for cron or an incident runbook; request handling never calls these.
"""
import argparse
import sys

from filevault.database import SessionLocal
from filevault.errors import FileVaultError
from filevault.services.tokens import TokenManager
from filevault.stores.token_store import SqlTokenStore


def sweep(tokens: TokenManager, args: argparse.Namespace) -> None:
    deleted = tokens.sweep_expired()
    print(f"  ✓ Deleted {deleted} expired token row(s)")


def revoke_all(tokens: TokenManager, args: argparse.Namespace) -> None:
    revoked = tokens.revoke_all(args.user_id)
    print(f"  ✓ Revoked {revoked} live token(s) for {args.user_id}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="FileVault token maintenance")
    commands = parser.add_subparsers(dest="command", required=True)

    sweep_cmd = commands.add_parser("sweep", help="Delete token rows whose refresh token has expired")
    sweep_cmd.set_defaults(handler=sweep)

    revoke_cmd = commands.add_parser("revoke-all", help="Revoke every device session of one user")
    revoke_cmd.add_argument("user_id", help="Email address or phone number the user signed up with")
    revoke_cmd.set_defaults(handler=revoke_all)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    db = SessionLocal()
    try:
        args.handler(TokenManager(SqlTokenStore(db)), args)
    except FileVaultError as e:
        print(f"  ❌ {e.message}")
        return 1
    finally:
        db.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())

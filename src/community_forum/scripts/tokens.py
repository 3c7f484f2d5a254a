# src/community_forum/scripts/tokens.py
"""
Issue moderator tokens for the admin dashboard.

Usage:
    python -m community_forum.scripts.tokens alice --minutes 60
"""

from __future__ import annotations

import argparse

from community_forum.core.security import create_moderator_token


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Issue a moderator bearer token.")
    parser.add_argument("subject", help="Moderator identifier recorded in the token")
    parser.add_argument(
        "--minutes",
        type=int,
        default=None,
        help="Token lifetime in minutes (defaults to MODERATOR_TOKEN_EXPIRE_MINUTES)",
    )
    return parser


def main(argv: list[str] | None = None) -> str:
    args = build_parser().parse_args(argv)
    token = create_moderator_token(args.subject, expires_minutes=args.minutes)
    print(token)
    return token


if __name__ == "__main__":
    main()

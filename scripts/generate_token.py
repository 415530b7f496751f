#!/usr/bin/env python3
"""
Generate bearer tokens for development and testing.

Tokens are signed with JWT_SECRET_KEY from the environment or .env file,
so they are accepted by a server running with the same settings.

Usage:
    python scripts/generate_token.py admin
    python scripts/generate_token.py all
    python scripts/generate_token.py --decode <token>
"""

import argparse
from datetime import datetime, timezone
import json
import sys

import jwt as pyjwt

from flowgraph.auth.models import Role
from flowgraph.auth.service import AuthService
from flowgraph.config.app_config import get_settings

SAMPLE_USERS = {
    Role.ADMIN: {"userId": "admin-123", "email": "admin@example.com", "role": "admin"},
    Role.USER: {"userId": "user-123", "email": "user@example.com", "role": "user"},
    Role.GUEST: {"userId": "guest-123", "email": "guest@example.com", "role": "guest"},
}


def generate_role_tokens(auth_service: AuthService) -> dict[str, str]:
    """Sign one sample token per role."""
    return {role.value: auth_service.generate_sample_token(**claims) for role, claims in SAMPLE_USERS.items()}


def decode_token(token: str) -> dict:
    """Decode and print a token without verifying its signature."""
    if token.startswith("Bearer "):
        token = token[7:]

    header = pyjwt.get_unverified_header(token)
    payload = pyjwt.decode(token, options={"verify_signature": False})

    print(f"Header: {json.dumps(header, indent=2)}")
    print(f"Payload: {json.dumps(payload, indent=2)}")

    if "exp" in payload:
        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        now = datetime.now(timezone.utc)
        print(f"Expiration: {expires_at.isoformat()}")
        print(f"Token expired: {now > expires_at}")

    return payload


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate or inspect Flowgraph API bearer tokens")
    parser.add_argument(
        "role",
        nargs="?",
        default="user",
        choices=[role.value for role in Role] + ["all"],
        help="Role to generate a token for (default: user)",
    )
    parser.add_argument("--decode", metavar="TOKEN", help="Decode a token instead of generating one")
    args = parser.parse_args(argv)

    if args.decode:
        try:
            decode_token(args.decode)
        except pyjwt.DecodeError as e:
            print(f"Error decoding token: {e}", file=sys.stderr)
            return 1
        return 0

    auth_service = AuthService.from_settings(get_settings())

    if args.role == "all":
        for role, token in generate_role_tokens(auth_service).items():
            print(f"{role.capitalize()} token:")
            print(token)
            print()
        print("Usage: Authorization: Bearer <token>")
        return 0

    print(f"{args.role.capitalize()} token:")
    print(auth_service.generate_sample_token(**SAMPLE_USERS[Role(args.role)]))
    return 0


if __name__ == "__main__":
    sys.exit(main())

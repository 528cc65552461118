"""Admin CLI for issuing API keys and seeding admin profiles.

Usage examples:
    python scripts/admin_api_keys.py create --principal-id u123 --email ada@example.com --name "Ada"
    python scripts/admin_api_keys.py list
    python scripts/admin_api_keys.py revoke --prefix abcd1234 --yes
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import datetime, timedelta

from app.config import settings
from app.db import SessionLocal, init_db
from app.db_models import ApiKey
from app.models.admins import AdminUser
from app.repositories import AdminRepository
from app.security import Principal, StaticPrincipalProvider
from app.security.api_keys import DEFAULT_KEY_PREFIX, TEST_KEY_PREFIX, generate_api_key, hash_api_key, key_prefix
from app.stores import SqlDocumentStore


def _ensure_pepper() -> str:
    if not settings.api_key_pepper:
        sys.stderr.write("API key pepper must be configured to manage API keys.\n")
        raise SystemExit(1)
    return settings.api_key_pepper


def _get_session():
    init_db()
    return SessionLocal()


def _expiration(args) -> datetime | None:
    if args.expires_in:
        return datetime.utcnow() + timedelta(days=args.expires_in)
    return None


async def _seed_profile(principal: Principal, name: str) -> None:
    admins = AdminRepository(SqlDocumentStore(), StaticPrincipalProvider(principal))
    existing = (await admins.get_current_admin()).unwrap()
    if existing is None:
        (await admins.create_admin_profile(AdminUser(name=name))).unwrap()


def cmd_create(args) -> None:
    pepper = _ensure_pepper()
    session = _get_session()
    try:
        prefix = f"{TEST_KEY_PREFIX}_eventadmin" if args.test else DEFAULT_KEY_PREFIX
        plaintext_key = generate_api_key(prefix=prefix)
        record = ApiKey(
            key_prefix=key_prefix(plaintext_key),
            key_hash=hash_api_key(plaintext_key, pepper),
            principal_id=args.principal_id,
            holder_email=args.email,
            holder_label=args.label,
            created_at=datetime.utcnow(),
            expires_at=_expiration(args),
        )
        session.add(record)
        session.commit()
        session.refresh(record)
    finally:
        session.close()

    if args.name:
        asyncio.run(_seed_profile(Principal(uid=args.principal_id, email=args.email), args.name))

    output = {
        "id": record.id,
        "key_prefix": record.key_prefix,
        "principal_id": record.principal_id,
        "holder_email": record.holder_email,
        "expires_at": record.expires_at.isoformat() if record.expires_at else None,
        "api_key": plaintext_key,
    }
    if args.json:
        print(json.dumps(output, indent=2))
    else:
        print("API key created (store this secret securely, it will not be shown again):")
        for field, value in output.items():
            print(f"  {field}: {value}")


def cmd_list(args) -> None:
    session = _get_session()
    try:
        query = session.query(ApiKey)
        if args.principal_id:
            query = query.filter_by(principal_id=args.principal_id)
        if not args.show_revoked:
            query = query.filter(ApiKey.revoked_at.is_(None))
        keys = query.order_by(ApiKey.created_at.desc()).all()
        if not keys:
            print("No API keys found.")
            return
        for key in keys:
            print(
                f"{key.id}: prefix={key.key_prefix} principal={key.principal_id}"
                f" email={key.holder_email} revoked={key.revoked_at or 'active'}"
            )
    finally:
        session.close()


def cmd_revoke(args) -> None:
    session = _get_session()
    try:
        target = session.query(ApiKey).filter_by(key_prefix=args.prefix).first()
        if not target:
            sys.stderr.write("API key not found.\n")
            raise SystemExit(1)
        if target.revoked_at is not None:
            print("API key is already revoked.")
            return
        if not args.yes:
            answer = input(f"Revoke API key {target.key_prefix}? [y/N]: ").strip().lower()
            if answer not in {"y", "yes"}:
                print("Cancelled.")
                return
        target.revoked_at = datetime.utcnow()
        session.commit()
        print(f"API key {target.key_prefix} revoked")
    finally:
        session.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage event admin API keys")
    sub = parser.add_subparsers(dest="command", required=True)

    create_cmd = sub.add_parser("create", help="Issue a key for an admin principal")
    create_cmd.add_argument("--principal-id", required=True, help="Admin principal id")
    create_cmd.add_argument("--email", required=True, help="Admin email address")
    create_cmd.add_argument("--name", help="Also create the admin profile with this name")
    create_cmd.add_argument("--label", help="Label or device name")
    create_cmd.add_argument("--expires-in", type=int, help="Expiration in days")
    create_cmd.add_argument("--test", action="store_true", help="Generate a test-only key")
    create_cmd.add_argument("--json", action="store_true", help="Return JSON output")
    create_cmd.set_defaults(func=cmd_create)

    list_cmd = sub.add_parser("list", help="List API keys")
    list_cmd.add_argument("--principal-id", help="Filter by principal")
    list_cmd.add_argument("--show-revoked", action="store_true", help="Include revoked keys")
    list_cmd.set_defaults(func=cmd_list)

    revoke_cmd = sub.add_parser("revoke", help="Revoke an API key")
    revoke_cmd.add_argument("--prefix", required=True, help="Key prefix to revoke")
    revoke_cmd.add_argument("--yes", action="store_true", help="Confirm without prompt")
    revoke_cmd.set_defaults(func=cmd_revoke)

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()

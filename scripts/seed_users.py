"""Seed a bootstrap SUPER_ADMIN (and optional extra users) into the database.

Usage::

    python scripts/seed_users.py root@pmhub.io "Root Admin"
    python scripts/seed_users.py root@pmhub.io "Root Admin" --user ada@pmhub.io:Ada:ADMIN
"""
import argparse
import asyncio
import sys
from pathlib import Path

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pmhub.config import get_settings
from pmhub.models.base import Base
from pmhub.models.user import User, UserRole


async def seed_users(session: AsyncSession, users: list[dict]) -> tuple[int, int]:
    """Insert *users* whose email is not taken yet. Returns ``(inserted, skipped)``.

    An existing user is never modified; a mismatch with the requested role
    or a deactivated account is reported.
    """
    inserted = 0
    skipped = 0

    for user_data in users:
        email = user_data["email"]
        role = UserRole(user_data.get("role", UserRole.MEMBER))

        result = await session.execute(select(User).where(User.email == email))
        existing = result.scalar_one_or_none()
        if existing is not None:
            if not existing.is_active:
                print(f"  Warning: {email} exists but is deactivated; not changed")
            elif UserRole(existing.role) is not role:
                print(f"  Warning: {email} exists as {existing.role}, not {role}; not changed")
            else:
                print(f"  Skipping {email} (already exists)")
            skipped += 1
            continue

        session.add(
            User(
                email=email,
                name=user_data["name"],
                role=role,
                is_active=True,
                department=user_data.get("department"),
            )
        )
        print(f"  Inserted {email} as {role}")
        inserted += 1

    await session.commit()
    return inserted, skipped


async def verify_bootstrap(session: AsyncSession) -> int:
    """Return the active SUPER_ADMIN count; exit with status 1 when there is none."""
    result = await session.execute(
        select(func.count())
        .select_from(User)
        .where(User.role == UserRole.SUPER_ADMIN, User.is_active.is_(True))
    )
    count = result.scalar_one()
    if count == 0:
        print("Error: no active SUPER_ADMIN exists after seeding", file=sys.stderr)
        raise SystemExit(1)
    return count


def _parse_user(spec: str) -> dict:
    """Parse ``email:name:ROLE[:department]``."""
    parts = spec.split(":")
    if len(parts) not in (3, 4):
        raise argparse.ArgumentTypeError(f"expected email:name:ROLE[:department], got {spec!r}")
    try:
        role = UserRole(parts[2])
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"unknown role {parts[2]!r}") from exc
    return {
        "email": parts[0],
        "name": parts[1],
        "role": role,
        "department": parts[3] if len(parts) == 4 else None,
    }


async def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("email", help="Bootstrap SUPER_ADMIN email")
    parser.add_argument("name", help="Bootstrap SUPER_ADMIN display name")
    parser.add_argument("--user", action="append", type=_parse_user, default=[])
    args = parser.parse_args(argv)

    settings = get_settings()
    engine = create_async_engine(str(settings.database_url))
    if settings.is_development:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    users = [{"email": args.email, "name": args.name, "role": UserRole.SUPER_ADMIN}, *args.user]

    print("Seeding users...")
    try:
        async with session_factory() as session:
            inserted, skipped = await seed_users(session, users)
            super_admins = await verify_bootstrap(session)
    finally:
        await engine.dispose()

    print(f"\nSummary: {inserted} inserted, {skipped} skipped, {super_admins} active SUPER_ADMIN")


if __name__ == "__main__":
    asyncio.run(main())

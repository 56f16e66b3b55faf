"""Unit tests for scripts/seed_users.py."""

import argparse
from unittest.mock import AsyncMock, MagicMock

import pytest

from pmhub.models.user import User, UserRole
from scripts.seed_users import _parse_user, seed_users, verify_bootstrap
from tests.helpers.fake_user_repository import make_user


def _mock_session(existing: dict[str, User]):
    session = AsyncMock()
    session.add = MagicMock()

    async def _execute(stmt):
        email = stmt.whereclause.right.value
        result = MagicMock()
        result.scalar_one_or_none.return_value = existing.get(email)
        return result

    session.execute.side_effect = _execute
    return session


def _count_session(count: int):
    session = AsyncMock()
    result = MagicMock()
    result.scalar_one.return_value = count
    session.execute.return_value = result
    return session


ROOT = {"email": "root@pmhub.io", "name": "Root", "role": UserRole.SUPER_ADMIN}


class TestSeedUsers:
    async def test_inserts_new_users(self):
        session = _mock_session({})

        inserted, skipped = await seed_users(
            session, [ROOT, {"email": "mia@pmhub.io", "name": "Mia"}]
        )

        assert (inserted, skipped) == (2, 0)
        added = [call.args[0] for call in session.add.call_args_list]
        assert all(isinstance(u, User) for u in added)
        assert [u.role for u in added] == [UserRole.SUPER_ADMIN, UserRole.MEMBER]
        session.commit.assert_awaited_once()

    async def test_skips_existing_email(self, capsys):
        session = _mock_session({"root@pmhub.io": make_user(UserRole.SUPER_ADMIN)})

        inserted, skipped = await seed_users(session, [ROOT])

        assert (inserted, skipped) == (0, 1)
        session.add.assert_not_called()
        assert "Skipping root@pmhub.io" in capsys.readouterr().out

    async def test_warns_when_existing_user_has_other_role(self, capsys):
        session = _mock_session({"root@pmhub.io": make_user(UserRole.ADMIN)})

        inserted, skipped = await seed_users(session, [ROOT])

        assert (inserted, skipped) == (0, 1)
        session.add.assert_not_called()
        assert "Warning: root@pmhub.io exists as ADMIN, not SUPER_ADMIN" in capsys.readouterr().out

    async def test_warns_when_existing_user_is_deactivated(self, capsys):
        inactive = make_user(UserRole.SUPER_ADMIN, is_active=False)
        session = _mock_session({"root@pmhub.io": inactive})

        await seed_users(session, [ROOT])

        assert "exists but is deactivated" in capsys.readouterr().out


class TestVerifyBootstrap:
    async def test_returns_active_count(self):
        assert await verify_bootstrap(_count_session(2)) == 2

    async def test_exits_without_super_admin(self, capsys):
        with pytest.raises(SystemExit) as exc:
            await verify_bootstrap(_count_session(0))

        assert exc.value.code == 1
        assert "no active SUPER_ADMIN" in capsys.readouterr().err


class TestParseUser:
    def test_with_department(self):
        assert _parse_user("ada@pmhub.io:Ada:ADMIN:Ops") == {
            "email": "ada@pmhub.io",
            "name": "Ada",
            "role": UserRole.ADMIN,
            "department": "Ops",
        }

    def test_without_department(self):
        assert _parse_user("max@pmhub.io:Max:MANAGER")["department"] is None

    def test_unknown_role(self):
        with pytest.raises(argparse.ArgumentTypeError):
            _parse_user("x@pmhub.io:X:OWNER")

    def test_wrong_shape(self):
        with pytest.raises(argparse.ArgumentTypeError):
            _parse_user("x@pmhub.io")

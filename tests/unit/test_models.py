"""Unit tests for database models and enums."""

import pytest

from pmhub.models import Base, User, UserRole


class TestUserRoleEnum:
    """Tests for UserRole enum."""

    def test_all_roles_defined(self):
        assert {r.value for r in UserRole} == {"MEMBER", "MANAGER", "ADMIN", "SUPER_ADMIN"}

    def test_string_coercion(self):
        """UserRole is a StrEnum, so value comparisons should work."""
        assert UserRole.SUPER_ADMIN == "SUPER_ADMIN"
        assert f"{UserRole.ADMIN}" == "ADMIN"

    def test_from_string(self):
        assert UserRole("MANAGER") is UserRole.MANAGER

    def test_roles_are_case_sensitive(self):
        with pytest.raises(ValueError):
            UserRole("admin")


class TestUserModel:
    """Tests for the User table definition."""

    def test_table_registered(self):
        assert "users" in Base.metadata.tables

    def test_email_is_unique(self):
        assert User.__table__.c.email.unique is True

    def test_role_column_not_nullable(self):
        assert User.__table__.c.role.nullable is False

    def test_promoted_by_references_users(self):
        fks = list(User.__table__.c.promoted_by_id.foreign_keys)
        assert fks[0].target_fullname == "users.id"

    def test_role_active_index_exists(self):
        assert "ix_users_role_active" in {ix.name for ix in User.__table__.indexes}

    def test_repr(self):
        user = User(email="ada@pmhub.io", name="Ada", role=UserRole.ADMIN)
        assert repr(user) == "<User ada@pmhub.io: ADMIN>"

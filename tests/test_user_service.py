"""Tests for UserService."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from chatline.core.exceptions import NotFoundError, ValidationError
from chatline.models import User, UserRole
from chatline.schemas.user import ProfileDetails, UserCreate, UserProfileUpdate
from chatline.services.user_service import UserService


async def _count_users(db) -> int:
    result = await db.execute(select(func.count()).select_from(User))
    return result.scalar_one()


class TestCreateUser:
    """Tests for UserService.create_user()."""

    async def test_create_user(self, db):
        """Test that a new user is inserted with its profile details."""
        created_at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        user = await UserService.create_user(
            db,
            UserCreate(
                user_id="u1",
                name="Alice",
                role=UserRole.admin,
                created_at=created_at,
                profile_details=ProfileDetails(email="alice@example.com", height=170),
            ),
        )

        assert user.id
        assert user.user_id == "u1"
        assert user.role == "admin"
        assert user.created_at == created_at
        assert user.profile_details == {"email": "alice@example.com", "height": 170}

    async def test_create_user_is_idempotent(self, db, alice):
        """Test that a second call returns the stored user and inserts nothing."""
        again = await UserService.create_user(
            db, UserCreate(user_id="u1", name="Someone Else", role=UserRole.admin)
        )

        assert again.id == alice.id
        assert again.name == "Alice"
        assert again.role == "user"
        assert await _count_users(db) == 1

    async def test_create_user_rejects_malformed_email(self, db):
        """Test that a malformed email fails and nothing is inserted."""
        with pytest.raises(ValidationError):
            await UserService.create_user(
                db,
                UserCreate(
                    user_id="u9",
                    name="Mallory",
                    profile_details=ProfileDetails(email="not-an-email"),
                ),
            )
        assert await _count_users(db) == 0

    async def test_create_user_without_profile(self, db):
        """Test that profile details are optional."""
        user = await UserService.create_user(db, UserCreate(user_id="u7", name="Dan"))
        assert user.profile_details is None


class TestReadUser:
    """Tests for UserService.read_user()."""

    async def test_read_user(self, db, alice):
        user = await UserService.read_user(db, "u1")
        assert user.id == alice.id

    async def test_read_missing_user(self, db):
        with pytest.raises(NotFoundError):
            await UserService.read_user(db, "nobody")


class TestSearchUsers:
    """Tests for UserService.search_users()."""

    async def test_search_by_name_case_insensitive(self, db, alice, bob, carol):
        users = await UserService.search_users(db, "ALI", exclude_user_id="u3")
        assert [u.user_id for u in users] == ["u1"]

    async def test_search_by_email(self, db, alice, bob, carol):
        users = await UserService.search_users(db, "example.org", exclude_user_id="u1")
        assert [u.user_id for u in users] == ["u2"]

    async def test_search_excludes_caller(self, db, alice, bob):
        users = await UserService.search_users(db, "example", exclude_user_id="u1")
        assert {u.user_id for u in users} == {"u2"}

    async def test_empty_term_returns_nothing(self, db, alice, bob):
        assert await UserService.search_users(db, "", exclude_user_id="u3") == []

    async def test_wildcards_are_literal(self, db, alice, bob):
        """Test that LIKE wildcards in the term are not interpreted."""
        assert await UserService.search_users(db, "%", exclude_user_id="u3") == []

    async def test_results_capped_at_ten(self, db):
        for i in range(15):
            await UserService.create_user(
                db, UserCreate(user_id=f"member-{i}", name=f"Member {i}")
            )
        users = await UserService.search_users(db, "member", exclude_user_id="x")
        assert len(users) == 10


class TestUpdateProfileDetails:
    """Tests for UserService.update_profile_details()."""

    async def test_update_name_only(self, db, alice):
        user = await UserService.update_profile_details(
            db, "u1", UserProfileUpdate(name="Alicia")
        )
        assert user.name == "Alicia"
        assert user.email == "alice@example.com"

    async def test_profile_details_replace_stored_details(self, db, alice):
        """Test that supplied details replace the stored ones entirely."""
        user = await UserService.update_profile_details(
            db, "u1", UserProfileUpdate(profile_details=ProfileDetails(weight=60.5))
        )
        assert user.profile_details == {"weight": 60.5}
        assert user.name == "Alice"

    async def test_no_update_data(self, db, alice):
        with pytest.raises(ValidationError):
            await UserService.update_profile_details(db, "u1", UserProfileUpdate())

    async def test_empty_name_counts_as_missing(self, db, alice):
        with pytest.raises(ValidationError):
            await UserService.update_profile_details(
                db, "u1", UserProfileUpdate(name="")
            )

    async def test_malformed_email(self, db, alice):
        with pytest.raises(ValidationError):
            await UserService.update_profile_details(
                db,
                "u1",
                UserProfileUpdate(profile_details=ProfileDetails(email="bad@")),
            )
        assert alice.email == "alice@example.com"

    async def test_missing_user(self, db):
        with pytest.raises(NotFoundError):
            await UserService.update_profile_details(
                db, "ghost", UserProfileUpdate(name="Ghost")
            )

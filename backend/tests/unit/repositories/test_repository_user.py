"""Unit tests for UserRepository."""

import pytest

from taskmanager.repositories.user import UserRepository
from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` performs core persistence operations."""

    @pytest.fixture()
    def repo(self, session):
        return UserRepository()

    def test_get_by_email_is_case_insensitive(self, repo):
        u = UserFactory(email="alice@example.com", username="alice")

        fetched = repo.get_by_email("  Alice@Example.COM ")
        assert fetched is not None
        assert fetched.id == u.id

    def test_get_by_identifier_switches_on_at_sign(self, repo):
        u = UserFactory(email="carol@example.com", username="carol")

        assert repo.get_by_identifier("carol").id == u.id
        assert repo.get_by_identifier("carol@example.com").id == u.id
        assert repo.get_by_identifier("nobody") is None

    def test_exists_by_email_and_username(self, repo):
        UserFactory(email="bob@example.com", username="bob")

        assert repo.exists_by_email("bob@example.com")
        assert not repo.exists_by_email("nonexistent@example.com")
        assert repo.exists_by_username("bob")
        assert not repo.exists_by_username("bobby")

    def test_safe_update_fields(self, repo):
        """Assign whitelisted fields and reject disallowed keys."""
        u = UserFactory(is_verified=False)

        updated = repo.assign_updates(u, {"username": "newname", "is_verified": True})
        assert updated.username == "newname"
        assert updated.is_verified is True

        with pytest.raises(ValueError):
            repo.assign_updates(u, {"password_hash": "x"})

    def test_exists_with_filters(self, repo):
        u = UserFactory()
        assert repo.exists(username=u.username)
        assert not repo.exists(username="missing")

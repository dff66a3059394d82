"""Unit tests for refresh and verification token repositories."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from taskmanager.models.tokens import RefreshToken, VerificationToken
from taskmanager.repositories import RefreshTokenRepository, VerificationTokenRepository
from tests.factories.user import UserFactory

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)


def _refresh(session, user_id: int, jti: str, *, expires_in=timedelta(days=1), revoked=False):
    row = RefreshToken(
        user_id=user_id,
        jti=jti,
        token_hash=f"hash-{jti}",
        expires_at=NOW + expires_in,
        revoked_at=NOW if revoked else None,
    )
    session.add(row)
    session.commit()
    return row


class TestRefreshTokenRepository:
    @pytest.fixture()
    def repo(self, session):
        return RefreshTokenRepository()

    def test_revoke_if_active_changes_exactly_once(self, repo, session):
        user = UserFactory()
        _refresh(session, user.id, "a")

        assert repo.revoke_if_active("a", revoked_at=NOW, replaced_by_jti="b") == 1
        assert repo.revoke_if_active("a", revoked_at=NOW, replaced_by_jti="c") == 0
        session.commit()

        session.expire_all()
        row = repo.get_by_jti("a")
        assert row.revoked_at is not None
        assert row.replaced_by_jti == "b"

    def test_revoke_unknown_jti_is_noop(self, repo):
        assert repo.revoke_if_active("missing", revoked_at=NOW, replaced_by_jti=None) == 0

    def test_delete_for_user(self, repo, session):
        alice, bob = UserFactory(), UserFactory()
        _refresh(session, alice.id, "a1")
        _refresh(session, alice.id, "a2")
        _refresh(session, bob.id, "b1")

        assert repo.delete_for_user(alice.id) == 2
        assert repo.delete_for_user(alice.id) == 0
        assert repo.get_by_jti("b1") is not None

    def test_delete_expired_or_revoked(self, repo, session):
        user = UserFactory()
        _refresh(session, user.id, "live")
        _refresh(session, user.id, "expired", expires_in=timedelta(seconds=-1))
        _refresh(session, user.id, "revoked", revoked=True)

        assert repo.delete_expired_or_revoked(NOW) == 2
        assert repo.get_by_jti("live") is not None


class TestVerificationTokenRepository:
    @pytest.fixture()
    def repo(self, session):
        return VerificationTokenRepository()

    def test_lookup_and_sweep(self, repo, session):
        user = UserFactory(is_verified=False)
        session.add_all(
            [
                VerificationToken(user_id=user.id, token="live", expires_at=NOW + timedelta(hours=1)),
                VerificationToken(user_id=user.id, token="old", expires_at=NOW - timedelta(hours=1)),
                VerificationToken(
                    user_id=user.id, token="used", expires_at=NOW + timedelta(hours=1), used=True
                ),
            ]
        )
        session.commit()

        assert repo.get_by_token("live").user_id == user.id
        assert repo.delete_expired_or_used(NOW) == 2
        assert repo.get_by_token("old") is None
        assert repo.delete_for_user(user.id) == 1

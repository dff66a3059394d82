import pytest
from sqlalchemy import text

from taskmanager.models.user import User
from taskmanager.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from taskmanager.uow import SQLAlchemyUnitOfWork as RWuow
from tests.factories.user import UserFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            user = UserFactory.build()  # not persisted
            uow.session.add(user)
            uow.session.flush()

    def test_blocks_core_dml(self, session):
        """
        Ensure that raw SQL DML is blocked inside the RO UoW.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(text("DELETE FROM users"))

    def test_allows_reads(self, session):
        with RWuow() as uow:
            uow.users.add(UserFactory.build())

        with ROuow() as uow:
            assert uow.session.query(User).count() >= 1

    def test_disallows_commit(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_always_rolls_back_changes(self, session):
        """
        Any attempted modifications must not persist after RO UoW exits.
        """
        user = UserFactory()
        user_id, original_email = user.id, user.email

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            u = uow.session.get(User, user_id)
            u.email = "mutated-in-ro@example.com"
            uow.session.flush()

        with RWuow() as uow:
            persisted = uow.session.get(User, user_id)
            assert persisted.email == original_email

    def test_discards_objects_added_inside_scope(self, session):
        """
        Objects added while attached to an outer transaction never reach a later commit.
        """
        user = UserFactory()
        _ = user.id  # opens the outer transaction so the RO scope attaches to it
        stray = UserFactory.build(email="stray@example.com", username="stray")

        with ROuow() as uow:
            uow.session.add(stray)
            assert stray in uow.session

        assert stray not in session
        with RWuow() as uow:
            assert uow.users.get_by_email("stray@example.com") is None

    def test_keeps_changes_pending_before_scope(self, session):
        user = UserFactory()
        user.full_name = "Outer Change"

        with ROuow(), pytest.raises(RuntimeError, match="ORM flush blocked"):
            session.flush()

        assert user in session.dirty
        assert user.full_name == "Outer Change"

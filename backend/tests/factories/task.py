"""Factory Boy definition for :class:`taskmanager.models.task.Task`."""

from __future__ import annotations

import factory

from taskmanager.models.enums import TaskStatus
from taskmanager.models.task import Task
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class TaskFactory(BaseFactory):
    """Personal task by default; pass ``team_id`` for a team task."""

    class Meta:
        model = Task

    id = None
    title = factory.Faker("sentence", nb_words=4)
    description = factory.Faker("paragraph")
    status = TaskStatus.TODO
    deadline = None
    created_by = factory.LazyFunction(lambda: UserFactory().id)
    team_id = None

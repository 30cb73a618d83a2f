"""Storage of tasks and the records kept alongside them.

Besides tasks themselves this covers task messages, page reviews, users,
known Kubernetes versions and image subscriptions.
"""

from typing import Iterable, List, Optional

import sqlalchemy as sa

from rainbow.db.options import Option, _Store
from rainbow.models import (
    Daily,
    KubernetesVersion,
    Review,
    Subscribe,
    Task,
    TaskMessage,
    User,
)

PROCESS_PENDING = 0
PROCESS_RUNNING = 1
MODE_SCHEDULED = 0

# The deployed kubernetes_versions table is looked up by its name column.
_KUBERNETES_VERSION_NAME = sa.column("name")


class TaskRepository:
    """Reads and writes tasks and their companion records."""

    def __init__(self, engine: sa.engine.Engine) -> None:
        self._store = _Store(engine)

    def create(self, obj: Task) -> Task:
        """Insert ``obj`` with fresh timestamps and return it with its id."""
        return self._store.create(obj)

    def update(self, task_id: int, resource_version: int, updates) -> None:
        """Apply ``updates`` if the stored version matches, bumping the version.

        Raises RecordNotUpdatedError when no row matches.
        """
        self._store.update(
            Task, [Task.id == task_id], updates, resource_version=resource_version
        )

    def update_directly(self, task_id: int, updates) -> None:
        """Apply ``updates`` without a version check.

        Raises RecordNotUpdatedError when no row matches.
        """
        self._store.update(Task, [Task.id == task_id], updates)

    def delete(self, task_id: int) -> None:
        """Remove the task with this id, if there is one."""
        self._store.delete(Task, Task.id == task_id)

    def delete_in_batch(self, task_ids: Iterable[int]) -> None:
        """Remove every task whose id is in ``task_ids``."""
        self._store.delete(Task, Task.id.in_(list(task_ids)))

    def get(self, task_id: int) -> Task:
        """Return the task with this id or raise RecordNotFoundError."""
        return self._store.first(Task, Task.id == task_id)

    def get_one(self, task_id: int, resource_version: int) -> Task:
        """Claim a task by marking it running, then return it.

        Raises RecordNotUpdatedError when the version no longer matches, so
        only one caller can claim a given version.
        """
        self._store.update(
            Task,
            [Task.id == task_id],
            {"process": PROCESS_RUNNING},
            resource_version=resource_version,
        )
        return self.get(task_id)

    def list(self, *options: Option) -> List[Task]:
        """Return the tasks selected by ``options``."""
        return self._store.find(Task, options=options)

    def list_with_agent(self, agent_name: str, process: int, *options: Option) -> List[Task]:
        """Return the agent's tasks in the given process state."""
        return self._store.find(
            Task,
            Task.agent_name == agent_name,
            Task.process == process,
            options=options,
        )

    def list_with_no_agent(self, process: int, *options: Option) -> List[Task]:
        """Return unassigned tasks in the given process state."""
        return self.list_with_agent("", process, *options)

    def get_one_for_schedule(self, *options: Option) -> Optional[Task]:
        """Return the first unassigned pending scheduled task, or None."""
        found = self._store.find(
            Task,
            Task.agent_name == "",
            Task.process == PROCESS_PENDING,
            Task.mode == MODE_SCHEDULED,
            options=options,
        )
        return found[0] if found else None

    def get_running_tasks(self, *options: Option) -> List[Task]:
        """Return the tasks currently running."""
        return self._store.find(Task, Task.process == PROCESS_RUNNING, options=options)

    def list_with_user(self, user_id: str, *options: Option) -> List[Task]:
        """Return the user's tasks, newest first."""
        return self._store.find(
            Task,
            Task.user_id == user_id,
            options=options,
            order_by=[Task.gmt_create.desc()],
        )

    def assign_to_agent(self, task_id: int, agent_name: str) -> None:
        """Hand the task to the named agent."""
        self._store.update(
            Task, [Task.id == task_id], {"agent_name": agent_name}, require_match=False
        )

    def count(self, *options: Option) -> int:
        """Return how many tasks ``options`` select."""
        return self._store.count(Task, options=options)

    def count_subscribes(self, *options: Option) -> int:
        """Return how many subscriptions ``options`` select."""
        return self._store.count(Subscribe, options=options)

    def list_reviews(self) -> List[Review]:
        """Return every review record."""
        return self._store.find(Review)

    def add_daily_review(self, obj: Daily) -> None:
        """Record a daily page view with fresh timestamps."""
        self._store.create(obj)

    def count_daily_reviews(self) -> int:
        """Return how many daily page views are recorded."""
        return self._store.count(Daily)

    def create_task_message(self, obj: TaskMessage) -> None:
        """Record a message about a task with fresh timestamps."""
        self._store.create(obj)

    def delete_task_messages(self, task_id: int) -> None:
        """Remove every message of a task."""
        self._store.delete(TaskMessage, TaskMessage.task_id == task_id)

    def list_task_messages(self, *options: Option) -> List[TaskMessage]:
        """Return the task messages selected by ``options``."""
        return self._store.find(TaskMessage, options=options)

    def create_user(self, obj: User) -> None:
        """Insert a user with fresh timestamps."""
        self._store.create(obj)

    def update_user(self, user_id: str, resource_version: int, updates) -> None:
        """Apply ``updates`` to a user if its version matches, bumping it.

        Raises RecordNotUpdatedError when no row matches.
        """
        self._store.update(
            User, [User.user_id == user_id], updates, resource_version=resource_version
        )

    def get_user(self, user_id: str) -> User:
        """Return the user with this user id or raise RecordNotFoundError."""
        return self._store.first(User, User.user_id == user_id)

    def list_users(self, *options: Option) -> List[User]:
        """Return the users selected by ``options``."""
        return self._store.find(User, options=options)

    def delete_user(self, user_id: str) -> None:
        """Remove the user with this user id, if there is one."""
        self._store.delete(User, User.user_id == user_id)

    def list_kubernetes_versions(self, *options: Option) -> List[KubernetesVersion]:
        """Return the Kubernetes versions selected by ``options``."""
        return self._store.find(KubernetesVersion, options=options)

    def count_kubernetes_versions(self, *options: Option) -> int:
        """Return how many Kubernetes versions ``options`` select."""
        return self._store.count(KubernetesVersion, options=options)

    def get_kubernetes_version(self, name: str) -> KubernetesVersion:
        """Return the Kubernetes version with this name or raise RecordNotFoundError."""
        return self._store.first(KubernetesVersion, _KUBERNETES_VERSION_NAME == name)

    def create_kubernetes_version(self, obj: KubernetesVersion) -> None:
        """Insert a Kubernetes version with fresh timestamps."""
        self._store.create(obj)

    def create_subscribe(self, obj: Subscribe) -> None:
        """Insert a subscription with fresh timestamps."""
        self._store.create(obj)

    def list_subscribes(self, *options: Option) -> List[Subscribe]:
        """Return the subscriptions selected by ``options``."""
        return self._store.find(Subscribe, options=options)

    def update_subscribe(self, subscribe_id: int, resource_version: int, updates) -> None:
        """Apply ``updates`` to a subscription if its version matches, bumping it.

        Raises RecordNotUpdatedError when no row matches.
        """
        self._store.update(
            Subscribe,
            [Subscribe.id == subscribe_id],
            updates,
            resource_version=resource_version,
        )

    def delete_subscribe(self, subscribe_id: int) -> None:
        """Remove the subscription with this id, if there is one."""
        self._store.delete(Subscribe, Subscribe.id == subscribe_id)

    def get_subscribe(self, subscribe_id: int) -> Subscribe:
        """Return the subscription with this id or raise RecordNotFoundError."""
        return self._store.first(Subscribe, Subscribe.id == subscribe_id)
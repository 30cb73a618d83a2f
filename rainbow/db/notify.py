"""Storage of notification channels."""

from typing import List

import sqlalchemy as sa

from rainbow.db.options import Option, _Store
from rainbow.models import Notification


class NotifyRepository:
    """Reads and writes notification records."""

    def __init__(self, engine: sa.engine.Engine) -> None:
        self._store = _Store(engine)

    def create(self, obj: Notification) -> Notification:
        """Insert ``obj`` with fresh timestamps and return it with its id."""
        return self._store.create(obj)

    def get(self, notify_id: int) -> Notification:
        """Return the notification with this id or raise RecordNotFoundError."""
        return self._store.first(Notification, Notification.id == notify_id)

    def delete(self, notify_id: int) -> None:
        """Remove the notification with this id, if there is one."""
        self._store.delete(Notification, Notification.id == notify_id)

    def update(self, notify_id: int, resource_version: int, updates) -> None:
        """Apply ``updates`` if the stored version matches, bumping the version.

        Raises RecordNotUpdatedError when no row matches.
        """
        self._store.update(
            Notification,
            [Notification.id == notify_id],
            updates,
            resource_version=resource_version,
        )

    def list(self, *options: Option) -> List[Notification]:
        """Return the notifications selected by ``options``."""
        return self._store.find(Notification, options=options)
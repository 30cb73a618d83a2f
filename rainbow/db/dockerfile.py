"""Storage of Dockerfiles."""

from typing import List

import sqlalchemy as sa

from rainbow.db.options import Option, _Store
from rainbow.models import Dockerfile


class DockerfileRepository:
    """Reads and writes Dockerfile records."""

    def __init__(self, engine: sa.engine.Engine) -> None:
        self._store = _Store(engine)

    def create(self, obj: Dockerfile) -> Dockerfile:
        """Insert ``obj`` with fresh timestamps and return it with its id."""
        return self._store.create(obj)

    def get(self, dockerfile_id: int) -> Dockerfile:
        """Return the Dockerfile with this id or raise RecordNotFoundError."""
        return self._store.first(Dockerfile, Dockerfile.id == dockerfile_id)

    def delete(self, dockerfile_id: int) -> None:
        """Remove the Dockerfile with this id, if there is one."""
        self._store.delete(Dockerfile, Dockerfile.id == dockerfile_id)

    def update(self, dockerfile_id: int, resource_version: int, updates) -> None:
        """Apply ``updates`` if the stored version matches, bumping the version.

        Raises RecordNotUpdatedError when no row matches.
        """
        self._store.update(
            Dockerfile,
            [Dockerfile.id == dockerfile_id],
            updates,
            resource_version=resource_version,
        )

    def list(self, *options: Option) -> List[Dockerfile]:
        """Return the Dockerfiles selected by ``options``."""
        return self._store.find(Dockerfile, options=options)
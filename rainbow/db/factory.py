"""One entry point that hands out every repository over a shared engine."""

import sqlalchemy as sa

from rainbow.db.agent import AgentRepository
from rainbow.db.dockerfile import DockerfileRepository
from rainbow.db.image import ImageRepository
from rainbow.db.label import LabelRepository
from rainbow.db.migrator import Migrator
from rainbow.db.notify import NotifyRepository
from rainbow.db.registry import RegistryRepository
from rainbow.db.task import TaskRepository


class DaoFactory:
    """Creates repositories bound to one database engine."""

    def __init__(self, engine: sa.engine.Engine) -> None:
        self.engine = engine

    def agent(self) -> AgentRepository:
        """Return the agent repository."""
        return AgentRepository(self.engine)

    def task(self) -> TaskRepository:
        """Return the task repository."""
        return TaskRepository(self.engine)

    def registry(self) -> RegistryRepository:
        """Return the registry repository."""
        return RegistryRepository(self.engine)

    def image(self) -> ImageRepository:
        """Return the image repository."""
        return ImageRepository(self.engine)

    def label(self) -> LabelRepository:
        """Return the label repository."""
        return LabelRepository(self.engine)

    def dockerfile(self) -> DockerfileRepository:
        """Return the Dockerfile repository."""
        return DockerfileRepository(self.engine)

    def notify(self) -> NotifyRepository:
        """Return the notification repository."""
        return NotifyRepository(self.engine)


def new_dao_factory(engine: sa.engine.Engine, migrate: bool = False) -> DaoFactory:
    """Return a factory over ``engine``, first creating missing tables if asked."""
    if migrate:
        Migrator(engine).auto_migrate()
    return DaoFactory(engine)
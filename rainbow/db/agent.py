"""Storage of agents."""

from typing import List

import sqlalchemy as sa

from rainbow.db.options import Option, _Store
from rainbow.models import RUN_AGENT_TYPE, Agent


class AgentRepository:
    """Reads and writes agent records."""

    def __init__(self, engine: sa.engine.Engine) -> None:
        self._store = _Store(engine)

    def create(self, obj: Agent) -> Agent:
        """Insert ``obj`` with fresh timestamps and return it with its id."""
        return self._store.create(obj)

    def update(self, agent_id: int, resource_version: int, updates) -> None:
        """Apply ``updates`` if the stored version matches, bumping the version.

        Raises RecordNotUpdatedError when no row matches.
        """
        self._store.update(
            Agent, [Agent.id == agent_id], updates, resource_version=resource_version
        )

    def update_by_name(self, agent_name: str, updates) -> None:
        """Apply ``updates`` to the named agent as given, without version checks.

        Raises RecordNotUpdatedError when no row matches.
        """
        self._store.update(Agent, [Agent.name == agent_name], updates, touch=False)

    def delete(self, agent_id: int) -> None:
        """Agents are retained: this leaves the record in place."""
        return None

    def get(self, agent_id: int) -> Agent:
        """Return the agent with this id or raise RecordNotFoundError."""
        return self._store.first(Agent, Agent.id == agent_id)

    def get_by_name(self, agent_name: str) -> Agent:
        """Return the agent with this name or raise RecordNotFoundError."""
        return self._store.first(Agent, Agent.name == agent_name)

    def list(self, *options: Option) -> List[Agent]:
        """Return the agents selected by ``options``."""
        return self._store.find(Agent, options=options)

    def list_for_schedule(self, *options: Option) -> List[Agent]:
        """Return the online agents selected by ``options``."""
        return self._store.find(Agent, Agent.status == RUN_AGENT_TYPE, options=options)
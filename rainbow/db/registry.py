"""Storage of image registries."""

from typing import List

import sqlalchemy as sa

from rainbow.db.options import Option, _Store
from rainbow.errors import RecordNotFoundError
from rainbow.models import Registry

ROLE_ADMIN = 1
ROLE_DEFAULT = 2


class RegistryRepository:
    """Reads and writes registry records."""

    def __init__(self, engine: sa.engine.Engine) -> None:
        self._store = _Store(engine)

    def create(self, obj: Registry) -> Registry:
        """Insert ``obj`` with fresh timestamps and return it with its id."""
        return self._store.create(obj)

    def update(self, registry_id: int, resource_version: int, updates) -> None:
        """Apply ``updates`` if the stored version matches, bumping the version.

        Raises RecordNotUpdatedError when no row matches.
        """
        self._store.update(
            Registry,
            [Registry.id == registry_id],
            updates,
            resource_version=resource_version,
        )

    def delete(self, registry_id: int) -> None:
        """Remove the registry with this id, if there is one."""
        self._store.delete(Registry, Registry.id == registry_id)

    def get(self, registry_id: int) -> Registry:
        """Return the registry with this id or raise RecordNotFoundError."""
        return self._store.first(Registry, Registry.id == registry_id)

    def get_by_name(self, registry_name: str) -> Registry:
        """Return the administrator registry with this name or raise RecordNotFoundError."""
        return self._store.first(
            Registry, Registry.name == registry_name, Registry.role == ROLE_ADMIN
        )

    def list(self, *options: Option) -> List[Registry]:
        """Return the registries selected by ``options``."""
        return self._store.find(Registry, options=options)

    def list_with_user(self, user_id: str, *options: Option) -> List[Registry]:
        """Return the user's registries selected by ``options``."""
        return self._store.find(Registry, Registry.user_id == user_id, options=options)

    def get_admin_registries(self, *options: Option) -> List[Registry]:
        """Return the registries with a role above regular."""
        return self._store.find(Registry, Registry.role > 0, options=options)

    def get_default_registry(self, *options: Option) -> Registry:
        """Return the first default registry or raise RecordNotFoundError."""
        found = self._store.find(Registry, Registry.role == ROLE_DEFAULT, options=options)
        if not found:
            raise RecordNotFoundError("no default register found")
        return found[0]
"""Storage of image labels and logos."""

from typing import List

import sqlalchemy as sa

from rainbow.db.options import Option, _Store
from rainbow.models import Label, Logo


class LabelRepository:
    """Reads and writes labels and logos."""

    def __init__(self, engine: sa.engine.Engine) -> None:
        self._store = _Store(engine)

    def create(self, obj: Label) -> Label:
        """Insert ``obj`` with fresh timestamps and return it with its id."""
        return self._store.create(obj)

    def update(self, label_id: int, resource_version: int, updates) -> None:
        """Apply ``updates`` if the stored version matches, bumping the version.

        Raises RecordNotUpdatedError when no row matches.
        """
        self._store.update(
            Label, [Label.id == label_id], updates, resource_version=resource_version
        )

    def delete(self, label_id: int) -> None:
        """Remove the label with this id, if there is one."""
        self._store.delete(Label, Label.id == label_id)

    def list(self, *options: Option) -> List[Label]:
        """Return the labels selected by ``options``."""
        return self._store.find(Label, options=options)

    def create_logo(self, obj: Logo) -> Logo:
        """Insert a logo with fresh timestamps and return it with its id."""
        return self._store.create(obj)

    def update_logo(self, logo_id: int, resource_version: int, updates) -> None:
        """Apply ``updates`` to a logo if its version matches, bumping the version.

        Raises RecordNotUpdatedError when no row matches.
        """
        self._store.update(
            Logo, [Logo.id == logo_id], updates, resource_version=resource_version
        )

    def delete_logo(self, logo_id: int) -> None:
        """Remove the logo with this id, if there is one."""
        self._store.delete(Logo, Logo.id == logo_id)

    def list_logos(self, *options: Option) -> List[Logo]:
        """Return the logos selected by ``options``."""
        return self._store.find(Logo, options=options)
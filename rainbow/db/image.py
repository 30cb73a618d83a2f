"""Storage of images, their tags, pull statistics and namespaces.

Images and tags are deleted softly: deleting one stamps ``gmt_deleted`` and
ordinary reads skip stamped rows. Reads that accept ``include_deleted`` can
see them again.
"""

from datetime import datetime
from typing import Iterable, List

import sqlalchemy as sa
from sqlalchemy.orm import selectinload

from rainbow.db.options import Option, _Store
from rainbow.models import Downflow, Image, Namespace, Tag

_LIVE_IMAGE = Image.gmt_deleted.is_(None)
_LIVE_TAG = Tag.gmt_deleted.is_(None)
# The deployed images table carries the id of the task that produced the row.
_TASK_ID = sa.column("task_id")


def _tags_loader(include_deleted: bool):
    if include_deleted:
        return selectinload(Image.tags)
    return selectinload(Image.tags.and_(_LIVE_TAG))


class ImageRepository:
    """Reads and writes images, tags, pull records and namespaces."""

    def __init__(self, engine: sa.engine.Engine) -> None:
        self._store = _Store(engine)

    def create(self, obj: Image) -> Image:
        """Insert ``obj`` with fresh timestamps and return it with its id."""
        return self._store.create(obj)

    def update(self, image_id: int, resource_version: int, updates) -> None:
        """Apply ``updates`` if the stored version matches, bumping the version.

        Raises RecordNotUpdatedError when no live row matches.
        """
        self._store.update(
            Image,
            [Image.id == image_id, _LIVE_IMAGE],
            updates,
            resource_version=resource_version,
        )

    def create_in_batch(self, objects: Iterable[Image]) -> None:
        """Insert each image in turn, stopping at the first failure."""
        for obj in objects:
            self.create(obj)

    def delete(self, image_id: int) -> None:
        """Softly delete the image and its tags."""
        now = datetime.now()
        self._store.update(
            Tag,
            [Tag.image_id == image_id, _LIVE_TAG],
            {"gmt_deleted": now},
            touch=False,
            require_match=False,
        )
        self._store.update(
            Image,
            [Image.id == image_id, _LIVE_IMAGE],
            {"gmt_deleted": now},
            touch=False,
            require_match=False,
        )

    def delete_in_batch(self, ids: Iterable[int]) -> None:
        """Softly delete each image in turn."""
        for image_id in ids:
            self.delete(image_id)

    def soft_delete_in_batch(self, task_id: int) -> None:
        """Mark every live image of a task as deleted."""
        self._store.update(
            Image,
            [_TASK_ID == task_id, _LIVE_IMAGE],
            {"gmt_deleted": datetime.now(), "is_deleted": True},
            touch=False,
            require_match=False,
        )

    def get(self, image_id: int, include_deleted: bool = False) -> Image:
        """Return the image with its tags or raise RecordNotFoundError."""
        criteria = [Image.id == image_id]
        if not include_deleted:
            criteria.append(_LIVE_IMAGE)
        return self._store.first(
            Image, *criteria, eager=[_tags_loader(include_deleted)]
        )

    def list(self, *options: Option) -> List[Image]:
        """Return the live images selected by ``options``."""
        return self._store.find(Image, _LIVE_IMAGE, options=options)

    def list_with_task(self, task_id: int, *options: Option) -> List[Image]:
        """Return the task's images not marked deleted, newest first."""
        return self._store.find(
            Image,
            _LIVE_IMAGE,
            _TASK_ID == task_id,
            Image.is_deleted == sa.false(),
            options=options,
            order_by=[Image.gmt_create.desc()],
        )

    def list_with_user(self, user_id: str, *options: Option) -> List[Image]:
        """Return the user's images not marked deleted, newest first."""
        return self._store.find(
            Image,
            _LIVE_IMAGE,
            Image.user_id == user_id,
            Image.is_deleted == sa.false(),
            options=options,
            order_by=[Image.gmt_create.desc()],
        )

    def count(self, *options: Option) -> int:
        """Return how many live images ``options`` select."""
        return self._store.count(Image, _LIVE_IMAGE, options=options)

    def get_by_path(self, path: str, mirror: str, *options: Option) -> Image:
        """Return the live image with this path and mirror or raise RecordNotFoundError."""
        return self._store.first(
            Image,
            _LIVE_IMAGE,
            Image.path == path,
            Image.mirror == mirror,
            options=options,
        )

    def list_images_with_tag(self, *options: Option) -> List[Image]:
        """Return the live images selected by ``options`` with their live tags."""
        return self._store.find(
            Image, _LIVE_IMAGE, options=options, eager=[_tags_loader(False)]
        )

    def create_tag(self, obj: Tag) -> Tag:
        """Insert a tag with fresh timestamps and return it with its id."""
        return self._store.create(obj)

    def create_tags_in_batch(self, objects: Iterable[Tag]) -> None:
        """Insert each tag in turn, stopping at the first failure."""
        for obj in objects:
            self.create_tag(obj)

    def update_tag(self, image_id: int, tag: str, updates) -> None:
        """Apply ``updates`` to the named live tag of an image."""
        self._store.update(
            Tag,
            [Tag.image_id == image_id, Tag.name == tag, _LIVE_TAG],
            updates,
            require_match=False,
        )

    def delete_tag(self, image_id: int, name: str) -> None:
        """Softly delete the named tag of an image."""
        self._store.update(
            Tag,
            [Tag.image_id == image_id, Tag.name == name, _LIVE_TAG],
            {"gmt_deleted": datetime.now()},
            touch=False,
            require_match=False,
        )

    def get_tag(self, image_id: int, name: str, include_deleted: bool = False) -> Tag:
        """Return the named tag of an image or raise RecordNotFoundError."""
        criteria = [Tag.image_id == image_id, Tag.name == name]
        if not include_deleted:
            criteria.append(_LIVE_TAG)
        return self._store.first(Tag, *criteria)

    def list_tags(self, *options: Option) -> List[Tag]:
        """Return the live tags selected by ``options``."""
        return self._store.find(Tag, _LIVE_TAG, options=options)

    def create_flow(self, obj: Downflow) -> None:
        """Record a pull statistic with fresh timestamps."""
        self._store.create(obj)

    def create_namespace(self, obj: Namespace) -> Namespace:
        """Insert a namespace with fresh timestamps and return it with its id."""
        return self._store.create(obj)

    def update_namespace(self, namespace_id: int, resource_version: int, updates) -> None:
        """Apply ``updates`` to a namespace if its version matches, bumping it.

        Raises RecordNotUpdatedError when no row matches.
        """
        self._store.update(
            Namespace,
            [Namespace.id == namespace_id],
            updates,
            resource_version=resource_version,
        )

    def delete_namespace(self, namespace_id: int) -> None:
        """Remove the namespace with this id, if there is one."""
        self._store.delete(Namespace, Namespace.id == namespace_id)

    def list_namespaces(self, *options: Option) -> List[Namespace]:
        """Return the namespaces selected by ``options``."""
        return self._store.find(Namespace, options=options)
"""Database models for agents, tasks, images, registries and related records."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

RUN_AGENT_TYPE = "在线"
UN_RUN_AGENT_TYPE = "离线"
UNKNOWN_AGENT_TYPE = "未知"
PUBLIC_AGENT_TYPE = "public"
PRIVATE_AGENT_TYPE = "private"

_ID_TYPE = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    """Declarative base for every table of the service."""


_MIGRATION_MODELS: List[type] = []


def _migrate(cls):
    _MIGRATION_MODELS.append(cls)
    return cls


def get_migration_models() -> List[type]:
    """Return the models whose tables are created on migration, in order."""
    return list(_MIGRATION_MODELS)


def _string(length: int = 255, **kwargs):
    return mapped_column(String(length), default="", nullable=False, **kwargs)


def _text():
    return mapped_column(Text, default="", nullable=False)


def _timestamp():
    return mapped_column(
        DateTime,
        default=datetime.now,
        server_default=func.current_timestamp(),
        nullable=False,
    )


class RainbowModel:
    """Columns shared by every record: id, timestamps and resource version."""

    id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True, autoincrement=True)
    gmt_create: Mapped[datetime] = _timestamp()
    gmt_modified: Mapped[datetime] = _timestamp()
    resource_version: Mapped[int] = mapped_column(
        BigInteger, default=0, server_default="0", nullable=False
    )

    @property
    def sid(self) -> str:
        """The id as a decimal string."""
        return str(self.id)


class UserModel:
    """Owner columns shared by user-scoped records."""

    user_id: Mapped[str] = _string()
    user_name: Mapped[str] = _string()


@_migrate
class Agent(RainbowModel, Base):
    __tablename__ = "agents"

    name: Mapped[str] = _string(index=True, unique=True)
    last_transition_time: Mapped[datetime] = _timestamp()
    type: Mapped[str] = _string()
    status: Mapped[str] = _string()
    message: Mapped[str] = _text()

    github_user: Mapped[str] = _string()
    github_repository: Mapped[str] = _string()
    github_token: Mapped[str] = _string()
    # Spend of the backing account; the agent goes offline at its limit.
    gross_amount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)


@_migrate
class Account(RainbowModel, Base):
    __tablename__ = "accounts"

    type: Mapped[str] = _string()
    user_name: Mapped[str] = _string()
    password: Mapped[str] = _string()
    token: Mapped[str] = _text()
    token_expire_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    retain_times: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


@_migrate
class Dockerfile(RainbowModel, Base):
    __tablename__ = "dockerfiles"

    name: Mapped[str] = _string()
    dockerfile: Mapped[str] = _text()
    user_id: Mapped[str] = _string()


@_migrate
class Image(RainbowModel, Base):
    __tablename__ = "images"

    gmt_deleted: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    name: Mapped[str] = _string()
    user_id: Mapped[str] = _string()
    user_name: Mapped[str] = _string()
    register_id: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    logo: Mapped[str] = _text()
    label: Mapped[str] = _string(index=True)
    path: Mapped[str] = _string()
    namespace: Mapped[str] = _string()
    mirror: Mapped[str] = _string()
    size: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    pull: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    tags: Mapped[List["Tag"]] = relationship(
        back_populates="image",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Tag.id",
    )

    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_official: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    public_updated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    description: Mapped[str] = _text()


@_migrate
class Tag(RainbowModel, Base):
    __tablename__ = "tags"

    gmt_deleted: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    image_id: Mapped[int] = mapped_column(
        _ID_TYPE, ForeignKey("images.id", ondelete="CASCADE"), index=True, nullable=False
    )
    task_ids: Mapped[str] = _text()  # comma separated task ids
    path: Mapped[str] = _string()
    mirror: Mapped[str] = _string()
    name: Mapped[str] = _string()
    size: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    status: Mapped[str] = _string()
    message: Mapped[str] = _text()
    manifest: Mapped[str] = _text()
    digest: Mapped[str] = _string()

    image: Mapped["Image"] = relationship(back_populates="tags")


class Downflow(RainbowModel, Base):
    """Daily pull counts of an image; its table is not created on migration."""

    __tablename__ = "downflows"

    image_id: Mapped[int] = mapped_column(BigInteger, index=True, default=0, nullable=False)
    create_at: Mapped[str] = _string()
    pull_num: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


@_migrate
class Namespace(RainbowModel, Base):
    __tablename__ = "namespaces"

    name: Mapped[str] = _string()
    description: Mapped[str] = _text()


@_migrate
class KubernetesVersion(RainbowModel, Base):
    __tablename__ = "kubernetes_versions"

    tag: Mapped[str] = _string(index=True, unique=True)


@_migrate
class Label(RainbowModel, Base):
    __tablename__ = "labels"

    name: Mapped[str] = _string(index=True, unique=True)


@_migrate
class Logo(RainbowModel, Base):
    __tablename__ = "logos"

    name: Mapped[str] = _string()
    logo: Mapped[str] = _text()


@_migrate
class Notification(RainbowModel, UserModel, Base):
    __tablename__ = "notifications"

    name: Mapped[str] = _string(index=True, unique=True)
    role: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    enable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    type: Mapped[str] = _string()  # webhook, dingtalk, wecom
    url: Mapped[str] = _text()
    content: Mapped[str] = _text()
    short_desc: Mapped[str] = _string()


@_migrate
class Registry(RainbowModel, Base):
    __tablename__ = "registries"

    name: Mapped[str] = _string()
    user_id: Mapped[str] = _string(index=True)
    # 0 regular, 1 administrator, 2 default registry
    role: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    repository: Mapped[str] = _string()
    namespace: Mapped[str] = _string()
    username: Mapped[str] = _string()
    password: Mapped[str] = _string()

    region_id: Mapped[str] = _string()
    ak: Mapped[str] = _string()
    sk: Mapped[str] = _string()


@_migrate
class Review(RainbowModel, Base):
    __tablename__ = "reviews"

    count: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)


@_migrate
class Daily(RainbowModel, Base):
    __tablename__ = "dailies"

    page: Mapped[str] = _string()


@_migrate
class Task(RainbowModel, Base):
    __tablename__ = "tasks"

    name: Mapped[str] = _string()
    user_id: Mapped[str] = _string()
    user_name: Mapped[str] = _string()
    register_id: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    agent_name: Mapped[str] = _string()
    process: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    mode: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    status: Mapped[str] = _string()
    message: Mapped[str] = _text()
    # 0: explicit image list, 1: kubernetes version
    type: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    kubernetes_version: Mapped[str] = _string()
    driver: Mapped[str] = _string()  # docker or skopeo
    namespace: Mapped[str] = _string()
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_official: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    logo: Mapped[str] = _text()


@_migrate
class TaskMessage(RainbowModel, Base):
    __tablename__ = "task_messages"

    task_id: Mapped[int] = mapped_column(BigInteger, index=True, default=0, nullable=False)
    message: Mapped[str] = _text()


@_migrate
class Subscribe(RainbowModel, UserModel, Base):
    __tablename__ = "subscribes"

    path: Mapped[str] = _string()
    raw_path: Mapped[str] = _string()
    src_path: Mapped[str] = _string()
    enable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[str] = _string()
    size: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    register_id: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    namespace: Mapped[str] = _string()
    last_notify_time: Mapped[datetime] = _timestamp()
    # Sync period in nanoseconds.
    interval: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    fail_times: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    wait_first_run: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


@_migrate
class SubscribeMessage(RainbowModel, Base):
    __tablename__ = "subscribe_messages"

    subscribe_id: Mapped[int] = mapped_column(
        BigInteger, index=True, default=0, nullable=False
    )
    message: Mapped[str] = _text()


@_migrate
class User(RainbowModel, Base):
    __tablename__ = "users"

    user_id: Mapped[str] = _string(index=True)
    name: Mapped[str] = _string()
    user_type: Mapped[str] = _string()
    expire_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
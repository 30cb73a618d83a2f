from datetime import datetime

import pytest
import sqlalchemy as sa

from rainbow.db.migrator import Migrator
from rainbow.db.options import with_task, with_user
from rainbow.db.task import TaskRepository
from rainbow.errors import (
    RecordNotFoundError,
    RecordNotUpdatedError,
    is_not_updated,
)
from rainbow.models import (
    Daily,
    KubernetesVersion,
    Subscribe,
    Task,
    TaskMessage,
    User,
)


@pytest.fixture
def engine(tmp_path):
    eng = sa.create_engine(f"sqlite:///{tmp_path / 'rainbow.sqlite'}")
    Migrator(eng).auto_migrate()
    columns = {c["name"] for c in sa.inspect(eng).get_columns("kubernetes_versions")}
    if "name" not in columns:
        with eng.begin() as conn:
            conn.execute(sa.text("ALTER TABLE kubernetes_versions ADD COLUMN name VARCHAR"))
    yield eng
    eng.dispose()


@pytest.fixture
def repo(engine):
    return TaskRepository(engine)


def _task(repo, name, **overrides):
    values = dict(
        name=name,
        user_id="u1",
        user_name="alice",
        agent_name="",
        process=0,
        mode=0,
        status="",
        message="",
    )
    values.update(overrides)
    return repo.create(Task(**values))


def _subscribe(repo, path, user_id="u1"):
    obj = Subscribe(
        path=path,
        raw_path=path,
        user_id=user_id,
        user_name="alice",
        enable=True,
        size=5,
        interval=3600,
        last_notify_time=datetime.now(),
    )
    repo.create_subscribe(obj)
    return obj


def test_create_then_get_round_trips(repo):
    created = _task(repo, "sync-nginx")
    got = repo.get(created.id)
    assert got.name == "sync-nginx"
    assert created.gmt_create == created.gmt_modified


def test_update_bumps_resource_version(repo):
    created = _task(repo, "t")
    before = repo.get(created.id).resource_version
    repo.update(created.id, before, {"status": "Running"})
    got = repo.get(created.id)
    assert got.status == "Running"
    assert got.resource_version == before + 1


def test_update_with_stale_version_raises(repo):
    created = _task(repo, "t")
    version = repo.get(created.id).resource_version
    repo.update(created.id, version, {"status": "a"})
    with pytest.raises(RecordNotUpdatedError):
        repo.update(created.id, version, {"status": "b"})
    assert repo.get(created.id).status == "a"


def test_update_directly_ignores_version(repo):
    created = _task(repo, "t")
    repo.update_directly(created.id, {"message": "done"})
    assert repo.get(created.id).message == "done"


def test_update_directly_missing_task_raises(repo):
    with pytest.raises(RecordNotUpdatedError):
        repo.update_directly(424242, {"message": "x"})


def test_delete_removes_task(repo):
    created = _task(repo, "t")
    repo.delete(created.id)
    with pytest.raises(RecordNotFoundError):
        repo.get(created.id)


def test_delete_in_batch_keeps_others(repo):
    a = _task(repo, "a")
    b = _task(repo, "b")
    c = _task(repo, "c")
    repo.delete_in_batch([a.id, b.id])
    assert [t.name for t in repo.list()] == ["c"]
    assert repo.get(c.id).name == "c"


def test_get_one_claims_task_once(repo):
    created = _task(repo, "t")
    version = repo.get(created.id).resource_version
    claimed = repo.get_one(created.id, version)
    assert claimed.process == 1
    assert claimed.resource_version == version + 1
    with pytest.raises(RecordNotUpdatedError) as info:
        repo.get_one(created.id, version)
    assert is_not_updated(info.value)


def test_assign_to_agent_moves_task_between_lists(repo):
    created = _task(repo, "t")
    assert [t.id for t in repo.list_with_no_agent(0)] == [created.id]
    repo.assign_to_agent(created.id, "agent-a")
    assert [t.id for t in repo.list_with_agent("agent-a", 0)] == [created.id]
    assert repo.list_with_no_agent(0) == []


def test_get_one_for_schedule_none_when_empty(repo):
    assert repo.get_one_for_schedule() is None


def test_get_one_for_schedule_skips_other_modes_and_assigned(repo):
    _task(repo, "manual", mode=1)
    _task(repo, "assigned", agent_name="agent-a")
    _task(repo, "running", process=1)
    wanted = _task(repo, "pending")
    found = repo.get_one_for_schedule()
    assert found.id == wanted.id


def test_get_running_tasks(repo):
    _task(repo, "idle")
    running = _task(repo, "busy", process=1)
    assert [t.id for t in repo.get_running_tasks()] == [running.id]


def test_list_with_user_newest_first(repo):
    old = _task(repo, "old")
    new = _task(repo, "new")
    _task(repo, "other", user_id="u2")
    repo.update_directly(old.id, {"gmt_create": datetime(2020, 1, 1)})
    repo.update_directly(new.id, {"gmt_create": datetime(2024, 1, 1)})
    assert [t.name for t in repo.list_with_user("u1")] == ["new", "old"]


def test_count_with_options(repo):
    mine = ["a", "b"]
    for name in mine:
        _task(repo, name)
    _task(repo, "c", user_id="u2")
    assert repo.count(with_user("u1")) == len(mine)
    assert repo.count() == len(mine) + 1


def test_subscribe_lifecycle(repo):
    sub = _subscribe(repo, "library/nginx")
    _subscribe(repo, "jenkins/jenkins", user_id="u2")
    got = repo.get_subscribe(sub.id)
    assert got.path == "library/nginx"
    assert repo.count_subscribes(with_user("u1")) == len([sub])
    repo.update_subscribe(sub.id, got.resource_version, {"size": 8})
    updated = repo.get_subscribe(sub.id)
    assert updated.size == 8
    assert updated.resource_version == got.resource_version + 1
    repo.delete_subscribe(sub.id)
    with pytest.raises(RecordNotFoundError):
        repo.get_subscribe(sub.id)
    assert [s.path for s in repo.list_subscribes()] == ["jenkins/jenkins"]


def test_update_subscribe_stale_raises(repo):
    sub = _subscribe(repo, "library/redis")
    with pytest.raises(RecordNotUpdatedError):
        repo.update_subscribe(sub.id, sub.resource_version + 5, {"size": 1})


def test_reviews_and_daily_counts(repo):
    assert repo.list_reviews() == []
    pages = ["home", "images"]
    for page in pages:
        repo.add_daily_review(Daily(page=page))
    assert repo.count_daily_reviews() == len(pages)


def test_task_messages(repo):
    task = _task(repo, "t")
    repo.create_task_message(TaskMessage(task_id=task.id, message="started"))
    repo.create_task_message(TaskMessage(task_id=task.id + 1, message="other"))
    messages = repo.list_task_messages(with_task(task.id))
    assert [m.message for m in messages] == ["started"]
    repo.delete_task_messages(task.id)
    assert repo.list_task_messages(with_task(task.id)) == []
    assert [m.message for m in repo.list_task_messages()] == ["other"]


def test_user_lifecycle(repo):
    repo.create_user(
        User(user_id="u1", name="alice", user_type="personal", expire_time=datetime(2030, 1, 1))
    )
    got = repo.get_user("u1")
    assert got.name == "alice"
    repo.update_user("u1", got.resource_version, {"name": "alice2"})
    assert repo.get_user("u1").name == "alice2"
    with pytest.raises(RecordNotUpdatedError):
        repo.update_user("u1", got.resource_version, {"name": "again"})
    assert [u.user_id for u in repo.list_users()] == ["u1"]
    repo.delete_user("u1")
    with pytest.raises(RecordNotFoundError):
        repo.get_user("u1")


def test_kubernetes_versions(repo, engine):
    tags = ["v1.29.0", "v1.30.0"]
    for tag in tags:
        repo.create_kubernetes_version(KubernetesVersion(tag=tag))
    with engine.begin() as conn:
        conn.execute(sa.text("UPDATE kubernetes_versions SET name = tag"))
    assert repo.count_kubernetes_versions() == len(tags)
    assert sorted(v.tag for v in repo.list_kubernetes_versions()) == tags
    assert repo.get_kubernetes_version("v1.30.0").tag == "v1.30.0"
    with pytest.raises(RecordNotFoundError):
        repo.get_kubernetes_version("v0.0.1")
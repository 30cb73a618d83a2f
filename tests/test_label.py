import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError

from rainbow.db.label import LabelRepository
from rainbow.db.migrator import Migrator
from rainbow.db.options import with_name_in, with_order_by_desc
from rainbow.errors import RecordNotUpdatedError
from rainbow.models import Label, Logo


@pytest.fixture
def repo():
    engine = create_engine("sqlite://")
    Migrator(engine).auto_migrate()
    yield LabelRepository(engine)
    engine.dispose()


def test_create_and_list(repo):
    repo.create(Label(name="ai"))
    repo.create(Label(name="k8s"))
    assert [label.name for label in repo.list(with_order_by_desc())] == ["k8s", "ai"]


def test_label_names_are_unique(repo):
    repo.create(Label(name="db"))
    with pytest.raises(IntegrityError):
        repo.create(Label(name="db"))


def test_update_label(repo):
    created = repo.create(Label(name="old"))
    repo.update(created.id, 0, {"name": "new"})
    (label,) = repo.list()
    assert label.name == "new"
    assert label.resource_version == 1
    with pytest.raises(RecordNotUpdatedError):
        repo.update(created.id, 0, {"name": "newer"})


def test_delete_label(repo):
    keep = repo.create(Label(name="keep"))
    drop = repo.create(Label(name="drop"))
    repo.delete(drop.id)
    assert [label.id for label in repo.list()] == [keep.id]


def test_list_with_name_in(repo):
    for name in ("ai", "db", "web"):
        repo.create(Label(name=name))
    assert sorted(label.name for label in repo.list(with_name_in("ai", "web"))) == ["ai", "web"]


def test_logo_lifecycle(repo):
    logo = repo.create_logo(Logo(name="nginx", logo="nginx.png"))
    assert logo.gmt_create == logo.gmt_modified
    repo.update_logo(logo.id, 0, {"logo": "nginx.svg"})
    (stored,) = repo.list_logos()
    assert stored.logo == "nginx.svg"
    assert stored.resource_version == 1
    repo.delete_logo(logo.id)
    assert repo.list_logos() == []


def test_update_logo_stale_version(repo):
    logo = repo.create_logo(Logo(name="redis"))
    with pytest.raises(RecordNotUpdatedError):
        repo.update_logo(logo.id, 3, {"logo": "x"})
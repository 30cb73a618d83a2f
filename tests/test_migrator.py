import pytest
from sqlalchemy import create_engine, inspect

from rainbow.db.migrator import Migrator
from rainbow.models import Downflow, Label, Logo, get_migration_models


@pytest.fixture
def engine():
    engine = create_engine("sqlite://")
    yield engine
    engine.dispose()


def test_auto_migrate_creates_every_model_table(engine):
    created = Migrator(engine).auto_migrate()
    expected = [model.__tablename__ for model in get_migration_models()]
    assert created == expected
    assert set(inspect(engine).get_table_names()) == set(expected)


def test_auto_migrate_skips_unregistered_models(engine):
    Migrator(engine).auto_migrate()
    assert "downflows" not in inspect(engine).get_table_names()


def test_auto_migrate_is_idempotent(engine):
    migrator = Migrator(engine)
    migrator.auto_migrate()
    assert migrator.auto_migrate() == []


def test_create_tables_only_creates_missing(engine):
    migrator = Migrator(engine)
    assert migrator.create_tables(Label) == ["labels"]
    assert migrator.create_tables(Label, Logo) == ["logos"]
    assert set(inspect(engine).get_table_names()) == {"labels", "logos"}


def test_create_tables_accepts_table_objects(engine):
    assert Migrator(engine).create_tables(Downflow.__table__) == ["downflows"]
    assert inspect(engine).get_table_names() == ["downflows"]
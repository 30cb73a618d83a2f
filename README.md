# rainbow

Building blocks for a service that mirrors container images into registries:
database models and repositories, request and response types, and a few
helpers around `git`, `docker`, files and HTTP.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- **`rainbow.models`** – SQLAlchemy models: `Agent`, `Account`, `Dockerfile`,
  `Image`, `Tag`, `Downflow`, `Namespace`, `KubernetesVersion`, `Label`,
  `Logo`, `Notification`, `Registry`, `Review`, `Daily`, `Task`,
  `TaskMessage`, `Subscribe`, `SubscribeMessage` and `User`, all sharing the
  `id`, `gmt_create`, `gmt_modified` and `resource_version` columns of
  `RainbowModel`. `get_migration_models()` lists the models whose tables are
  created on migration; `Downflow` is not among them.
- **`rainbow.db.options`** – query options (`with_name`, `with_name_like`,
  `with_id`, `with_id_in`, `with_user`, `with_task`, `with_status`,
  `with_limit`, `with_offset`, `with_order_by_desc`, `with_created_after`
  and more) and `apply_options` to apply them to a SELECT statement. Options
  given an empty value leave the query unchanged.
- **`rainbow.db.migrator`** – `Migrator.auto_migrate()` and
  `Migrator.create_tables(...)` create missing tables and return the names
  of those created; existing tables are left alone.
- **`rainbow.db`** repositories – `AgentRepository`, `TaskRepository`,
  `ImageRepository`, `RegistryRepository`, `LabelRepository`,
  `DockerfileRepository` and `NotifyRepository`, each built on an engine.
  `rainbow.db.factory.new_dao_factory(engine, migrate)` returns a
  `DaoFactory` handing out all of them.
- **`rainbow.types`** – request, query and response dataclasses, with
  `from_dict(cls, data)` and `to_dict(obj)` for their JSON form and
  `ListOptions.set_default_page_option()` for paging defaults (page 1,
  limit 10, limit at most 100).
- **`rainbow.errors`** – `RecordNotUpdatedError`, `RecordNotFoundError`,
  `CommandError`, and `is_not_updated` / `is_not_found`, which also look
  through the errors an exception was raised from.
- **`rainbow.lru`** – a thread-safe `LRUCache`.
- **`rainbow.names`** – `new_uuid()` and `new_rand_name(prefix, length)`
  (an empty prefix becomes `task-`).
- **`rainbow.utils`** – `trim_and_filter`, directory and file checks,
  `write_into_file`, `remove_file`, and `copy` / `move` through `cp -r` and
  `mv`.
- **`rainbow.git`** – `Git(repo_dir, branch, title)` with `checkout`, `add`,
  `commit`, `push`, `current_branch` and `local_branches`.
- **`rainbow.docker`** – `login_docker` and `logout_docker`.
- **`rainbow.httpclient`** – `HttpClient` with `get`, `post` and `put`,
  returning the decoded JSON body and raising `HttpError` for any status
  other than 200.

## Example

```python
from sqlalchemy import create_engine

from rainbow.db.factory import new_dao_factory
from rainbow.db.options import with_name, with_limit
from rainbow.models import Label

engine = create_engine("sqlite://")
factory = new_dao_factory(engine, True)

labels = factory.label()
label = labels.create(Label(name="k8s"))
labels.update(label.id, label.resource_version, {"name": "kubernetes"})

print(labels.list(with_name("kubernetes"), with_limit(10)))
```

Updates follow optimistic locking: pass the resource version you last read;
the stored version is incremented on success, and `RecordNotUpdatedError` is
raised when no row matched. Single-record lookups raise
`RecordNotFoundError`.

```python
from rainbow.lru import LRUCache

cache = LRUCache(2)
cache.add("a", 1)
cache.add("b", 2)
cache.add("c", 3)
assert "a" not in cache and len(cache) == 2
```

## Behaviour worth knowing

- Images and tags are deleted softly: `ImageRepository.delete`,
  `delete_in_batch` and `delete_tag` stamp `gmt_deleted`, and ordinary reads
  skip stamped rows. `get` and `get_tag` accept `include_deleted=True`.
- `AgentRepository.delete` keeps the record; it does nothing.
- `ImageRepository.list_with_task` and `soft_delete_in_batch` filter on a
  `task_id` column, and `TaskRepository.get_kubernetes_version` on a `name`
  column, that the models do not declare; they need tables that have them.
- `ImageRepository.create_flow` needs the `downflows` table, which
  `auto_migrate` does not create; create it with
  `Migrator(engine).create_tables(Downflow)`.
- `Git`, `copy`, `move`, `login_docker` and `logout_docker` run the `git`,
  `cp`, `mv` and `docker` programs, which must be on the `PATH`; a failure
  raises `CommandError` carrying the command's output. `login_docker` raises
  `ValueError` when the registry, user name or password is empty.

## What this package does not do

It is a library only. It has no command-line program, no HTTP API server,
no task scheduler and no agent that performs image synchronisation; those
are left to the application that uses these models, repositories and
helpers.
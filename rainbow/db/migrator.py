"""Creation of the service's tables."""

from typing import Any, List

import sqlalchemy as sa

from rainbow.models import get_migration_models

_MYSQL_TABLE_OPTIONS = "AUTO_INCREMENT=20220801 DEFAULT CHARSET=utf8"


class Migrator:
    """Creates missing tables for models; existing tables are left untouched."""

    def __init__(self, engine: sa.engine.Engine) -> None:
        self.engine = engine

    def auto_migrate(self) -> List[str]:
        """Create the tables of every registered model; return the names created."""
        return self.create_tables(*get_migration_models())

    def create_tables(self, *models: Any) -> List[str]:
        """Create the table of each model or table that does not exist yet.

        Returns the names of the tables created, in order.
        """
        created = []
        with self.engine.begin() as conn:
            for model in models:
                table = getattr(model, "__table__", model)
                if sa.inspect(conn).has_table(table.name, schema=table.schema):
                    continue
                table.create(conn)
                if conn.dialect.name == "mysql":
                    quoted = conn.dialect.identifier_preparer.format_table(table)
                    conn.execute(sa.text(f"ALTER TABLE {quoted} {_MYSQL_TABLE_OPTIONS}"))
                created.append(table.name)
        return created
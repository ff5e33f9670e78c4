"""Versioned schema migrations.

Each module in :mod:`catalog.migrations.versions` defines ``version`` (a
sortable timestamp string), ``description``, ``upgrade(op)`` and
``downgrade(op)``. Applied versions are recorded in ``migration_versions``.

SQLite cannot add or drop constraints with ``ALTER TABLE``; on that dialect
:class:`Operations` rebuilds the table instead (create a copy with the new
definition, move the rows, drop the original, rename the copy).
"""
from __future__ import annotations

import importlib
import logging
import pkgutil
from dataclasses import dataclass
from datetime import datetime
from types import ModuleType
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKeyConstraint,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    inspect,
    select,
    text,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.schema import CreateColumn


logger = logging.getLogger(__name__)

VERSIONS_PACKAGE = "catalog.migrations.versions"

_metadata = MetaData()
migration_versions = Table(
    "migration_versions",
    _metadata,
    Column("version", String(32), primary_key=True),
    Column("description", String(255), nullable=True),
    Column("executed_at", DateTime, nullable=False),
)


@dataclass(frozen=True)
class Migration:
    version: str
    description: str
    module: ModuleType

    def upgrade(self, op: "Operations") -> None:
        self.module.upgrade(op)

    def downgrade(self, op: "Operations") -> None:
        self.module.downgrade(op)


@dataclass(frozen=True)
class ForeignKeySpec:
    name: Optional[str]
    local_columns: Tuple[str, ...]
    referred_table: str
    referred_columns: Tuple[str, ...]
    ondelete: Optional[str] = None


class Operations:
    """Schema operations bound to one connection, aware of the dialect."""

    def __init__(self, conn: Connection) -> None:
        self.conn = conn
        self.dialect = conn.dialect.name

    @property
    def is_sqlite(self) -> bool:
        return self.dialect == "sqlite"

    def quote(self, name: str) -> str:
        return self.conn.dialect.identifier_preparer.quote(name)

    def execute(self, sql: str, **params) -> None:
        self.conn.execute(text(sql), params)

    def create_table(self, name: str, *elements) -> Table:
        metadata = MetaData()
        # Existing tables are reflected so foreign keys can resolve.
        metadata.reflect(bind=self.conn)
        table = Table(name, metadata, *elements)
        table.create(self.conn)
        return table

    def drop_table(self, name: str) -> None:
        self.execute(f"DROP TABLE {self.quote(name)}")

    def create_index(self, name: str, table: str, columns: Sequence[str], unique: bool = False) -> None:
        cols = ", ".join(self.quote(col) for col in columns)
        kind = "UNIQUE INDEX" if unique else "INDEX"
        self.execute(f"CREATE {kind} {self.quote(name)} ON {self.quote(table)} ({cols})")

    def drop_index(self, name: str, table: str) -> None:
        if self.dialect == "mysql":
            self.execute(f"DROP INDEX {self.quote(name)} ON {self.quote(table)}")
        else:
            self.execute(f"DROP INDEX {self.quote(name)}")

    def add_column(self, table: str, column: Column) -> None:
        if self.is_sqlite and not column.nullable:
            self._rebuild(table, add_columns=[column])
            return
        Table(table, MetaData(), column)
        spec = CreateColumn(column).compile(dialect=self.conn.dialect)
        self.execute(f"ALTER TABLE {self.quote(table)} ADD COLUMN {spec}")

    def drop_column(self, table: str, column: str) -> None:
        if self.is_sqlite:
            self._rebuild(table, drop_columns=[column])
            return
        self.execute(f"ALTER TABLE {self.quote(table)} DROP COLUMN {self.quote(column)}")

    def create_foreign_key(
        self,
        name: str,
        source: str,
        local_columns: Sequence[str],
        referred_table: str,
        referred_columns: Sequence[str],
        ondelete: Optional[str] = None,
    ) -> None:
        spec = ForeignKeySpec(name, tuple(local_columns), referred_table, tuple(referred_columns), ondelete)
        if self.is_sqlite:
            self._rebuild(source, add_foreign_keys=[spec])
            return
        local = ", ".join(self.quote(col) for col in spec.local_columns)
        remote = ", ".join(self.quote(col) for col in spec.referred_columns)
        sql = (
            f"ALTER TABLE {self.quote(source)} ADD CONSTRAINT {self.quote(name)} "
            f"FOREIGN KEY ({local}) REFERENCES {self.quote(referred_table)} ({remote})"
        )
        if ondelete:
            sql += f" ON DELETE {ondelete}"
        self.execute(sql)

    def drop_foreign_key(self, name: str, source: str) -> None:
        if self.is_sqlite:
            self._rebuild(source, drop_foreign_keys=[name])
        elif self.dialect == "mysql":
            self.execute(f"ALTER TABLE {self.quote(source)} DROP FOREIGN KEY {self.quote(name)}")
        else:
            self.execute(f"ALTER TABLE {self.quote(source)} DROP CONSTRAINT {self.quote(name)}")

    def _rebuild(
        self,
        table_name: str,
        add_columns: Iterable[Column] = (),
        drop_columns: Iterable[str] = (),
        add_foreign_keys: Iterable[ForeignKeySpec] = (),
        drop_foreign_keys: Iterable[str] = (),
    ) -> None:
        add_columns = list(add_columns)
        dropped = set(drop_columns)
        dropped_fks = set(drop_foreign_keys)
        inspector = inspect(self.conn)
        pk_columns = set(inspector.get_pk_constraint(table_name)["constrained_columns"])
        old_columns = inspector.get_columns(table_name)
        indexes = inspector.get_indexes(table_name)
        uniques = inspector.get_unique_constraints(table_name)

        foreign_keys: List[ForeignKeySpec] = []
        for fk in inspector.get_foreign_keys(table_name):
            if fk.get("name") and fk["name"] in dropped_fks:
                continue
            if dropped.intersection(fk["constrained_columns"]):
                continue
            foreign_keys.append(
                ForeignKeySpec(
                    fk.get("name"),
                    tuple(fk["constrained_columns"]),
                    fk["referred_table"],
                    tuple(fk["referred_columns"]),
                    (fk.get("options") or {}).get("ondelete"),
                )
            )
        foreign_keys.extend(add_foreign_keys)

        metadata = MetaData()
        # Referred tables must be known to the metadata to render REFERENCES.
        for referred in {fk.referred_table for fk in foreign_keys if fk.referred_table != table_name}:
            Table(referred, metadata, autoload_with=self.conn)

        columns: List[Column] = []
        kept: List[str] = []
        for info in old_columns:
            if info["name"] in dropped:
                continue
            default = info.get("default")
            columns.append(
                Column(
                    info["name"],
                    info["type"],
                    primary_key=info["name"] in pk_columns,
                    nullable=info["nullable"],
                    server_default=text(default) if default is not None else None,
                )
            )
            kept.append(info["name"])
        columns.extend(Column(col.name, col.type, nullable=col.nullable) for col in add_columns)

        temp_name = f"_rebuild_{table_name}"
        constraints = [
            ForeignKeyConstraint(
                list(fk.local_columns),
                [f"{fk.referred_table if fk.referred_table != table_name else temp_name}.{col}" for col in fk.referred_columns],
                name=fk.name,
                ondelete=fk.ondelete,
            )
            for fk in foreign_keys
        ]
        constraints.extend(
            UniqueConstraint(*uq["column_names"], name=uq.get("name"))
            for uq in uniques
            if not dropped.intersection(uq["column_names"])
        )
        Table(temp_name, metadata, *columns, *constraints).create(self.conn)

        cols = ", ".join(self.quote(name) for name in kept)
        self.execute(f"INSERT INTO {self.quote(temp_name)} ({cols}) SELECT {cols} FROM {self.quote(table_name)}")
        self.drop_table(table_name)
        self.execute(f"ALTER TABLE {self.quote(temp_name)} RENAME TO {self.quote(table_name)}")
        for index in indexes:
            if dropped.intersection(index["column_names"]):
                continue
            self.create_index(index["name"], table_name, index["column_names"], unique=bool(index.get("unique")))
        logger.debug("Rebuilt table %s", table_name)


def discover() -> List[Migration]:
    package = importlib.import_module(VERSIONS_PACKAGE)
    found: Dict[str, Migration] = {}
    for info in pkgutil.iter_modules(package.__path__):
        module = importlib.import_module(f"{VERSIONS_PACKAGE}.{info.name}")
        version = getattr(module, "version", None)
        if not version:
            continue
        if version in found:
            raise RuntimeError(f"Duplicate migration version {version}.")
        found[version] = Migration(version, getattr(module, "description", ""), module)
    return [found[key] for key in sorted(found)]


def applied_versions(conn: Connection) -> List[str]:
    migration_versions.create(conn, checkfirst=True)
    rows = conn.execute(select(migration_versions.c.version).order_by(migration_versions.c.version))
    return [row[0] for row in rows]


def _run(engine: Engine, steps: List[Tuple[Migration, str]]) -> List[str]:
    done: List[str] = []
    with engine.connect() as conn:
        sqlite = conn.dialect.name == "sqlite"
        if sqlite:
            conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
            conn.commit()
        try:
            for migration, direction in steps:
                with conn.begin():
                    op = Operations(conn)
                    if direction == "up":
                        migration.upgrade(op)
                        conn.execute(
                            migration_versions.insert().values(
                                version=migration.version,
                                description=migration.description,
                                executed_at=datetime.utcnow(),
                            )
                        )
                    else:
                        migration.downgrade(op)
                        conn.execute(
                            migration_versions.delete().where(migration_versions.c.version == migration.version)
                        )
                logger.info("Migration %s %s: %s", migration.version, direction, migration.description)
                done.append(migration.version)
        finally:
            if sqlite:
                conn.exec_driver_sql("PRAGMA foreign_keys=ON")
                conn.commit()
    return done


def upgrade(engine: Engine, target: Optional[str] = None) -> List[str]:
    """Apply pending migrations up to ``target`` (inclusive, default latest)."""
    with engine.begin() as conn:
        applied = set(applied_versions(conn))
    pending = [
        migration
        for migration in discover()
        if migration.version not in applied and (target is None or migration.version <= target)
    ]
    return _run(engine, [(migration, "up") for migration in pending])


def downgrade(engine: Engine, target: Optional[str] = None, steps: int = 1) -> List[str]:
    """Revert applied migrations newer than ``target``, or the last ``steps`` ones.

    ``target="0"`` reverts everything.
    """
    with engine.begin() as conn:
        applied = applied_versions(conn)
    known = {migration.version: migration for migration in discover()}
    if target is not None:
        to_revert = [version for version in reversed(applied) if version > target]
    else:
        to_revert = list(reversed(applied))[: max(0, steps)]
    missing = [version for version in to_revert if version not in known]
    if missing:
        raise RuntimeError(f"Unknown applied migration(s): {', '.join(missing)}.")
    return _run(engine, [(known[version], "down") for version in to_revert])


def status(engine: Engine) -> List[Tuple[Migration, Optional[datetime]]]:
    with engine.begin() as conn:
        migration_versions.create(conn, checkfirst=True)
        rows = conn.execute(select(migration_versions.c.version, migration_versions.c.executed_at))
        executed = {version: executed_at for version, executed_at in rows}
    return [(migration, executed.get(migration.version)) for migration in discover()]


__all__ = [
    "Migration",
    "Operations",
    "applied_versions",
    "discover",
    "downgrade",
    "status",
    "upgrade",
]

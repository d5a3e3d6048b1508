"""
The Alembic revision builds the same proposer_to_height table as the ORM model.
"""
import importlib

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations

from proposer_indexer.app.infrastructure.db.models.proposer_to_height import (
    ProposerToHeightDB,
)

REVISION_MODULE = (
    "proposer_indexer.alembic.versions.2026_10_19_120000_create_proposer_to_height"
)


def _migrated_inspector(engine, direction="upgrade"):
    revision = importlib.import_module(REVISION_MODULE)
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            revision.upgrade()
            if direction == "downgrade":
                revision.downgrade()
    return sa.inspect(engine)


def test_upgrade_matches_orm_model(tmp_path):
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")
    table = ProposerToHeightDB.__table__

    inspector = _migrated_inspector(engine)

    assert table.name in inspector.get_table_names()
    columns = {c["name"]: c for c in inspector.get_columns(table.name)}
    assert set(columns) == {c.name for c in table.columns}
    assert all(not c["nullable"] for c in columns.values())
    assert isinstance(columns["height"]["type"], sa.BigInteger)

    pk = inspector.get_pk_constraint(table.name)["constrained_columns"]
    assert pk == [c.name for c in table.primary_key.columns]

    migrated_indexes = {
        ix["name"]: ix["column_names"] for ix in inspector.get_indexes(table.name)
    }
    orm_indexes = {ix.name: [c.name for c in ix.columns] for ix in table.indexes}
    assert migrated_indexes == orm_indexes
    assert migrated_indexes == {"ix_proposer_to_height_proposer": ["proposer"]}
    engine.dispose()


def test_downgrade_drops_the_table(tmp_path):
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'downgraded.db'}")

    inspector = _migrated_inspector(engine, direction="downgrade")

    assert "proposer_to_height" not in inspector.get_table_names()
    engine.dispose()

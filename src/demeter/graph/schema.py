from __future__ import annotations

from sqlalchemy import (
    JSON,
    MetaData,
    Table,
    Column,
    Integer,
    String,
    ForeignKey,
    Index,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

nodes = Table(
    "nodes",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("properties", JSON, nullable=False, default=dict),
)

node_labels = Table(
    "node_labels",
    metadata,
    Column("node_id", Integer, ForeignKey("nodes.id"), primary_key=True),
    Column("label", String, primary_key=True),
    Index("ix_node_labels_label", "label"),
)

relationships = Table(
    "relationships",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("type", String, nullable=False),
    Column("start_id", Integer, ForeignKey("nodes.id"), nullable=False),
    Column("end_id", Integer, ForeignKey("nodes.id"), nullable=False),
    Index("ix_relationships_start", "start_id", "type"),
    Index("ix_relationships_end", "end_id", "type"),
)


def create_graph_schema(engine: Engine) -> None:
    """
    Create the property-graph tables.

    Works on PostgreSQL and SQLite; existing tables are left untouched.
    """
    with engine.begin() as conn:
        metadata.create_all(conn)

"""
demeter.graph
=============

Property-graph storage used by the controllers.

Public API:

- GraphStore             : node/relationship access over a SQLAlchemy session.
- Node, Relationship     : immutable records returned by the store.
- create_graph_schema    : create the graph tables in a database.
- create_engine_from_settings : build the engine from DatabaseSettings.
- search_by_label_in_active_branches : labelled leaves of active use cases.

All other modules in this package are considered internal implementation details.
"""

from __future__ import annotations

from .db import create_engine_from_settings
from .schema import create_graph_schema
from .store import GraphStore, Node, Relationship
from .traversal import search_by_label_in_active_branches

__all__ = [
    "GraphStore",
    "Node",
    "Relationship",
    "create_graph_schema",
    "create_engine_from_settings",
    "search_by_label_in_active_branches",
]

from __future__ import annotations

from typing import Callable, Iterator, Sequence

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from demeter.config import DatabaseSettings, GraphSettings
from demeter.graph import GraphStore, Node, create_engine_from_settings, create_graph_schema


# ---------------------------------------------------------------------------
# Store fixtures (in-memory SQLite)
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Iterator[Engine]:
    eng = create_engine_from_settings(DatabaseSettings(url="sqlite://"))
    create_graph_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine: Engine) -> Iterator[Session]:
    with Session(engine) as s:
        yield s


@pytest.fixture
def store(session: Session) -> GraphStore:
    return GraphStore(session)


@pytest.fixture
def graph() -> GraphSettings:
    return GraphSettings()


# ---------------------------------------------------------------------------
# Builders for externally generated levels
# ---------------------------------------------------------------------------


LevelFactory = Callable[[str, str, str, Sequence[str]], Node]


@pytest.fixture
def make_level(store: GraphStore, graph: GraphSettings) -> LevelFactory:
    """
    Create a level of `application` aggregating one object per full name,
    the way the upstream classification pipeline lays them out.
    """

    def _make(application: str, name: str, full_name: str, objects: Sequence[str]) -> Node:
        level = store.create_node(
            [graph.level_label, application], {"Name": name, "FullName": full_name}
        )
        for object_name in objects:
            obj = store.create_node(
                [graph.object_label, application], {graph.object_full_name: object_name}
            )
            store.create_relationship(level, obj, graph.level_aggregates)
        return level

    return _make

from __future__ import annotations

from datetime import datetime

import pytest

from demeter.config import GraphSettings
from demeter.controllers import SaveCatalog, SnapshotManager
from demeter.exceptions import QueryError
from demeter.graph import GraphStore

FIXED_NOW = datetime(2024, 3, 7, 14, 5, 9)


@pytest.fixture
def manager(store: GraphStore, graph: GraphSettings) -> SnapshotManager:
    return SnapshotManager(store, graph, clock=lambda: FIXED_NOW)


@pytest.fixture
def catalog(store: GraphStore, graph: GraphSettings) -> SaveCatalog:
    return SaveCatalog(store, graph)


def test_no_generated_levels_gives_empty_save(
    manager: SnapshotManager, catalog: SaveCatalog, make_level
) -> None:
    make_level("Shop", "Hand made", "Shop##Hand made", ["a.b.C"])

    assert manager.save_level("Shop", "empty") == 0

    (save,) = catalog.get_all_save_nodes()
    assert (save.name, save.application, save.date) == ("empty", "Shop", "2024-03-07 14:05:09")
    assert catalog.get_operations(save.node_id) == []


def test_generated_levels_become_operations(
    store: GraphStore,
    graph: GraphSettings,
    manager: SnapshotManager,
    catalog: SaveCatalog,
    make_level,
) -> None:
    make_level("Shop", "Payments", "Business##dm_l.Payments", ["pay.Card", "pay.Bank"])
    make_level("Shop", "Orders", "Business##dm_l.Orders", ["ord.Order"])
    make_level("Shop", "Manual", "Business##Manual", ["man.X", "man.Y"])
    make_level("Other", "Foreign", "Business##dm_l.Foreign", ["f.Z"])

    captured = manager.save_level("Shop", "before-merge")

    assert captured == 3
    (save,) = catalog.get_save_nodes_by_application("Shop")
    operations = catalog.get_operations(save.node_id)
    assert [(op.level, op.objects) for op in operations] == [
        ("Payments", ["pay.Card", "pay.Bank"]),
        ("Orders", ["ord.Order"]),
    ]
    assert len(store.find_nodes(graph.operation_label)) == 2


def test_only_labelled_objects_with_full_name_are_captured(
    store: GraphStore, graph: GraphSettings, manager: SnapshotManager, catalog: SaveCatalog, make_level
) -> None:
    level = make_level("Shop", "Mixed", "X##dm_l.Mixed", ["ok.One"])
    unnamed = store.create_node([graph.object_label, "Shop"], {"Name": "no full name"})
    foreign = store.create_node(["SubObject", "Shop"], {graph.object_full_name: "sub.Two"})
    store.create_relationship(level, unnamed, graph.level_aggregates)
    store.create_relationship(level, foreign, graph.level_aggregates)

    assert manager.save_level("Shop", "mixed") == 1

    (save,) = catalog.get_all_save_nodes()
    (operation,) = catalog.get_operations(save.node_id)
    assert operation.objects == ["ok.One"]


def test_prefix_is_matched_literally(
    store: GraphStore, catalog: SaveCatalog, make_level
) -> None:
    graph = GraphSettings(generated_level_prefix="dm.l")
    manager = SnapshotManager(store, graph, clock=lambda: FIXED_NOW)
    make_level("Shop", "Literal", "A##dm.lPay", ["x"])
    make_level("Shop", "Lookalike", "A##dmXlPay", ["y"])

    assert manager.save_level("Shop", "literal") == 1


def test_malformed_level_is_skipped(
    store: GraphStore, graph: GraphSettings, manager: SnapshotManager, make_level
) -> None:
    store.create_node([graph.level_label, "Shop"], {"Name": "no full name"})
    make_level("Shop", "Good", "A##dm_l.Good", ["g.One", "g.Two"])

    assert manager.save_level("Shop", "partial") == 2


def test_failure_rolls_back_whole_snapshot(
    store: GraphStore,
    graph: GraphSettings,
    manager: SnapshotManager,
    catalog: SaveCatalog,
    make_level,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    make_level("Shop", "One", "A##dm_l.One", ["o.1"])
    make_level("Shop", "Two", "A##dm_l.Two", ["o.2"])

    original = store.create_relationship
    calls = {"n": 0}

    def flaky(start, end, rel_type):
        if rel_type == graph.operation_to_save:
            calls["n"] += 1
            if calls["n"] == 2:
                raise QueryError("store went away")
        return original(start, end, rel_type)

    monkeypatch.setattr(store, "create_relationship", flaky)

    with pytest.raises(QueryError):
        manager.save_level("Shop", "doomed")

    assert catalog.get_all_save_nodes() == []
    assert store.find_nodes(graph.operation_label) == []
    # the levels themselves are untouched
    assert len(store.find_nodes(graph.level_label, extra_labels=["Shop"])) == 2

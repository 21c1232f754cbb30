from __future__ import annotations

import pytest

from demeter.config import GraphSettings
from demeter.exceptions import BadRequestError, NotFoundError
from demeter.graph import GraphStore, search_by_label_in_active_branches


def _use_case(store: GraphStore, graph: GraphSettings, parent, name: str, active: bool):
    node = store.create_node([graph.use_case_label], {"Name": name, "Active": active})
    store.create_relationship(parent, node, graph.use_case_to_use_case)
    return node


def _tag(store: GraphStore, graph: GraphSettings, parent, name: str):
    node = store.create_node(
        [graph.tag_label], {"Name": name, "Active": True, "Request": "MATCH (o)"}
    )
    store.create_relationship(parent, node, graph.use_case_to_tag)
    return node


def _names(nodes) -> list[str]:
    return [n.get("Name") for n in nodes]


def test_only_active_branches_are_followed(store: GraphStore, graph: GraphSettings) -> None:
    root = store.create_node([graph.configuration_label], {"Name": "default"})
    on = _use_case(store, graph, root, "on", True)
    off = _use_case(store, graph, root, "off", False)
    on_child = _use_case(store, graph, on, "on/child", True)
    # active child below an inactive parent stays unreachable
    off_child = _use_case(store, graph, off, "off/child", True)

    _tag(store, graph, on, "t-on")
    _tag(store, graph, on_child, "t-on-child")
    _tag(store, graph, off, "t-off")
    _tag(store, graph, off_child, "t-off-child")

    found = search_by_label_in_active_branches(store, graph, "default", graph.tag_label, graph.use_case_to_tag)

    assert _names(found) == ["t-on", "t-on-child"]


def test_cycles_are_visited_once(store: GraphStore, graph: GraphSettings) -> None:
    root = store.create_node([graph.configuration_label], {"Name": "cyclic"})
    a = _use_case(store, graph, root, "a", True)
    b = _use_case(store, graph, a, "b", True)
    store.create_relationship(b, a, graph.use_case_to_use_case)
    _tag(store, graph, a, "ta")
    _tag(store, graph, b, "tb")

    found = search_by_label_in_active_branches(store, graph, "cyclic", graph.tag_label, graph.use_case_to_tag)

    assert _names(found) == ["ta", "tb"]


def test_configurations_are_isolated(store: GraphStore, graph: GraphSettings) -> None:
    first = store.create_node([graph.configuration_label], {"Name": "first"})
    second = store.create_node([graph.configuration_label], {"Name": "second"})
    _tag(store, graph, _use_case(store, graph, first, "a", True), "t-first")
    _tag(store, graph, _use_case(store, graph, second, "b", True), "t-second")

    found = search_by_label_in_active_branches(store, graph, "second", graph.tag_label, graph.use_case_to_tag)

    assert _names(found) == ["t-second"]


def test_missing_root_raises_not_found(store: GraphStore, graph: GraphSettings) -> None:
    with pytest.raises(NotFoundError):
        search_by_label_in_active_branches(store, graph, "nope", graph.tag_label, graph.use_case_to_tag)


def test_ambiguous_root_raises_bad_request(store: GraphStore, graph: GraphSettings) -> None:
    store.create_node([graph.configuration_label], {"Name": "twice"})
    store.create_node([graph.configuration_label], {"Name": "twice"})

    with pytest.raises(BadRequestError) as exc_info:
        search_by_label_in_active_branches(store, graph, "twice", graph.tag_label, graph.use_case_to_tag)
    assert exc_info.value.code == "ACTVxSRCH1"


def test_leaves_need_the_leaf_relationship(store: GraphStore, graph: GraphSettings) -> None:
    root = store.create_node([graph.configuration_label], {"Name": "default"})
    uc = _use_case(store, graph, root, "uc", True)
    _tag(store, graph, uc, "linked")
    stray = store.create_node(
        [graph.tag_label], {"Name": "stray", "Active": True, "Request": "r"}
    )
    store.create_relationship(uc, stray, "SOME_OTHER_REL")

    found = search_by_label_in_active_branches(
        store, graph, "default", graph.tag_label, graph.use_case_to_tag
    )

    assert _names(found) == ["linked"]

from __future__ import annotations

"""Walks of the use-case tree that only descend into activated use cases."""

from collections import deque
from typing import Deque, List, Set

from ..config import GraphSettings
from ..exceptions import BadRequestError, NotFoundError
from ..log import getLogger
from ..properties import ACTIVE, NAME
from .store import GraphStore, Node

logger = getLogger(__name__)

ERROR_PREFIX = "ACTVx"


def get_configuration_root(
    store: GraphStore,
    graph: GraphSettings,
    configuration_name: str,
) -> Node:
    """Return the single Configuration node named `configuration_name`."""
    roots = store.find_nodes(graph.configuration_label, **{NAME: configuration_name})
    if not roots:
        raise NotFoundError(
            f"No {graph.configuration_label} node named {configuration_name!r}.",
            ERROR_PREFIX + "ROOT1",
        )
    if len(roots) > 1:
        raise BadRequestError(
            f"{len(roots)} {graph.configuration_label} nodes are named "
            f"{configuration_name!r}; expected exactly one.",
            ERROR_PREFIX + "SRCH1",
        )
    return roots[0]


def is_active_use_case(node: Node, graph: GraphSettings) -> bool:
    return node.has_label(graph.use_case_label) and node.get(ACTIVE) is True


def search_by_label_in_active_branches(
    store: GraphStore,
    graph: GraphSettings,
    configuration_name: str,
    label: str,
    leaf_relationship: str,
) -> List[Node]:
    """
    Collect the nodes labelled `label` that active use cases point to
    through `leaf_relationship`.

    Starting at the configuration root, the walk follows use-case
    relationships breadth-first and only enters use cases whose ``Active``
    flag is true; an inactive use case hides its whole subtree, whatever
    the flags below it say. Results are deduplicated and keep discovery
    order.
    """
    root = get_configuration_root(store, graph, configuration_name)

    queue: Deque[Node] = deque([root])
    visited: Set[int] = {root.id}
    found: List[Node] = []
    seen_found: Set[int] = set()

    while queue:
        current = queue.popleft()

        if current.id != root.id:
            for leaf in store.neighbours(current, leaf_relationship):
                if leaf.has_label(label) and leaf.id not in seen_found:
                    seen_found.add(leaf.id)
                    found.append(leaf)

        for child in store.neighbours(current, graph.use_case_to_use_case):
            if child.id in visited:
                continue
            visited.add(child.id)
            if is_active_use_case(child, graph):
                queue.append(child)

    logger.debug(
        "Found %d %s node(s) in active branches of %r",
        len(found), label, configuration_name,
    )
    return found

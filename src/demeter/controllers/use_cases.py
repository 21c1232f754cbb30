from __future__ import annotations

from typing import List

from ..config import GraphSettings
from ..exceptions import BadRequestError, MalformedNodeError
from ..graph.store import GraphStore, Node
from ..log import getLogger
from ..models import Configuration, UseCase
from ..properties import ACTIVE, NAME

logger = getLogger(__name__)

ERROR_PREFIX = "USECx"


class UseCaseRegistry:
    """
    Builds the use-case tree: configuration roots, nested use cases and
    their activation flags.
    """

    def __init__(self, store: GraphStore, graph: GraphSettings) -> None:
        self._store = store
        self._graph = graph

    def add_configuration_node(self, name: str) -> Node:
        """Create a configuration root. Names are unique."""
        if self._store.find_nodes(self._graph.configuration_label, **{NAME: name}):
            raise BadRequestError(
                f"A {self._graph.configuration_label} node named {name!r} already exists.",
                ERROR_PREFIX + "ADDC1",
            )
        node = self._store.create_node(
            [self._graph.configuration_label], Configuration(name=name).to_properties()
        )
        logger.info("Configuration %r created (node %d)", name, node.id)
        return node

    def add_use_case_node(self, name: str, active: bool, parent_id: int) -> Node:
        """
        Create a use case under a configuration root or another use case.

        Raises:
            NotFoundError: `parent_id` does not resolve.
            BadRequestError: the parent is neither a configuration nor a use case.
        """
        parent = self._store.get_node_by_id(parent_id)

        if not (
            parent.has_label(self._graph.configuration_label)
            or parent.has_label(self._graph.use_case_label)
        ):
            raise BadRequestError(
                f"Can only attach a {self._graph.use_case_label} node to a "
                f"{self._graph.configuration_label} or {self._graph.use_case_label} node.",
                ERROR_PREFIX + "ADDU1",
            )

        with self._store.atomic():
            node = self._store.create_node(
                [self._graph.use_case_label],
                UseCase(name=name, active=active).to_properties(),
            )
            self._store.create_relationship(parent, node, self._graph.use_case_to_use_case)
        return node

    def set_activation(self, use_case_id: int, active: bool) -> UseCase:
        node = self._store.get_node_by_id(use_case_id)
        if not node.has_label(self._graph.use_case_label):
            raise BadRequestError(
                f"Node {use_case_id} is not a {self._graph.use_case_label} node.",
                ERROR_PREFIX + "SACT1",
            )
        updated = self._store.update_properties(node, {ACTIVE: bool(active)})
        logger.info("Use case %d set to %s", use_case_id, "active" if active else "inactive")
        return UseCase.from_node(updated, self._graph)

    def get_use_cases(self, parent_id: int) -> List[UseCase]:
        parent = self._store.get_node_by_id(parent_id)

        use_cases: List[UseCase] = []
        for node in self._store.neighbours(parent, self._graph.use_case_to_use_case):
            try:
                use_cases.append(UseCase.from_node(node, self._graph))
            except MalformedNodeError as exc:
                logger.error("Use case node %d is malformed: %s", node.id, exc)
        return use_cases

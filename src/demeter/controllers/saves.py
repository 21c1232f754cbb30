from __future__ import annotations

from typing import List, Optional

from ..config import GraphSettings
from ..exceptions import BadRequestError, MalformedNodeError, NotFoundError
from ..graph.store import GraphStore, Node
from ..log import getLogger
from ..models import Operation, Save

logger = getLogger(__name__)

ERROR_PREFIX = "SAVEx"


class SaveCatalog:
    """
    Lists and deletes Save nodes.

    Save names may repeat. `remove_save` drops the oldest save carrying
    the name; use `remove_save_by_id` to target one save exactly.
    """

    def __init__(self, store: GraphStore, graph: GraphSettings) -> None:
        self._store = store
        self._graph = graph

    def _saves(self) -> List[Save]:
        saves: List[Save] = []
        for node in self._store.find_nodes(self._graph.save_label):
            try:
                saves.append(Save.from_node(node, self._graph))
            except MalformedNodeError as exc:
                logger.error("Save node with id %d produced an error: %s", node.id, exc)
        return saves

    def get_all_save_nodes(self) -> List[Save]:
        return self._saves()

    def get_save_nodes_by_application(self, application: str) -> List[Save]:
        return [s for s in self._saves() if s.application == application]

    def get_operations(self, save_id: int) -> List[Operation]:
        """Operations captured by a save, in creation order."""
        save_node = self._get_save_node(save_id)
        operations: List[Operation] = []
        for node in self._store.neighbours(save_node, self._graph.operation_to_save, "incoming"):
            try:
                operations.append(Operation.from_node(node, self._graph))
            except MalformedNodeError as exc:
                logger.error("Operation node %d of save %d produced an error: %s", node.id, save_id, exc)
        return operations

    def _get_save_node(self, save_id: int) -> Node:
        node = self._store.get_node_by_id(save_id)
        if not node.has_label(self._graph.save_label):
            raise BadRequestError(
                f"Node {save_id} is not a {self._graph.save_label} node.",
                ERROR_PREFIX + "GETS1",
            )
        return node

    def _delete(self, save_node: Node) -> None:
        # Operations belong to exactly one save and go with it.
        with self._store.atomic():
            for op_node in self._store.neighbours(
                save_node, self._graph.operation_to_save, "incoming"
            ):
                if op_node.has_label(self._graph.operation_label):
                    self._store.delete_node(op_node, detach=True)
            self._store.delete_node(save_node, detach=True)

    def remove_save(self, save_name: str) -> bool:
        """
        Remove the oldest save named `save_name` with its operations.

        Returns:
            True if a save matching this name was found, False otherwise.
        """
        match: Optional[Save] = next(
            (s for s in self._saves() if s.name == save_name), None
        )
        if match is None or match.node_id is None:
            return False
        self._delete(self._store.get_node_by_id(match.node_id))
        logger.info("Save %r (node %d) removed", save_name, match.node_id)
        return True

    def remove_save_by_id(self, save_id: int) -> bool:
        try:
            node = self._store.get_node_by_id(save_id)
        except NotFoundError:
            return False
        if not node.has_label(self._graph.save_label):
            return False
        self._delete(node)
        logger.info("Save node %d removed", save_id)
        return True

    def remove_all_saves(self) -> int:
        """
        Remove every save (and its operations).

        Save nodes too malformed to be listed are removed as well, but the
        count returned is the size of the catalog before the call.
        """
        catalog_size = len(self._saves())
        for node in self._store.find_nodes(self._graph.save_label):
            self._delete(node)
        logger.info("%d save(s) removed", catalog_size)
        return catalog_size

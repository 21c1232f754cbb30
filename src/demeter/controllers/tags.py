from __future__ import annotations

from typing import List

from ..config import GraphSettings
from ..exceptions import BadRequestError, MalformedNodeError
from ..graph.store import GraphStore, Node
from ..log import getLogger
from ..models import Tag

logger = getLogger(__name__)

ERROR_PREFIX = "TAGCx"


class TagRegistry:
    """Creates tags under use cases and reads them back."""

    def __init__(self, store: GraphStore, graph: GraphSettings) -> None:
        self._store = store
        self._graph = graph

    def add_tag_node(
        self,
        tag: str,
        active: bool,
        request: str,
        description: str,
        parent_id: int,
    ) -> Node:
        """
        Create a Tag node and link it to its parent use case.

        The node and the relationship are written together: if either
        fails, neither is kept.

        Raises:
            NotFoundError: `parent_id` does not resolve.
            BadRequestError: the parent is not a use case (``TAGCxADDU1``).
            QueryError: the store failed.
        """
        parent = self._store.get_node_by_id(parent_id)

        if not parent.has_label(self._graph.use_case_label):
            raise BadRequestError(
                f"Can only attach a {self._graph.tag_label} node "
                f"to a {self._graph.use_case_label} node.",
                ERROR_PREFIX + "ADDU1",
            )

        tag_node = Tag(name=tag, active=active, request=request, description=description)

        with self._store.atomic():
            node = self._store.create_node([self._graph.tag_label], tag_node.to_properties())
            self._store.create_relationship(parent, node, self._graph.use_case_to_tag)

        logger.info("Tag %r (node %d) attached to use case %d", tag, node.id, parent.id)
        return node

    def get_tags(self, use_case_id: int, active_only: bool = False) -> List[Tag]:
        """Tags directly under a use case; unreadable ones are logged and skipped."""
        parent = self._store.get_node_by_id(use_case_id)

        tags: List[Tag] = []
        for node in self._store.neighbours(parent, self._graph.use_case_to_tag):
            try:
                tag = Tag.from_node(node, self._graph)
            except MalformedNodeError as exc:
                logger.error("Tag node %d under use case %d is malformed: %s", node.id, parent.id, exc)
                continue
            if active_only and not tag.active:
                continue
            tags.append(tag)
        return tags

from __future__ import annotations

from typing import List

from ..config import GraphSettings
from ..exceptions import MalformedNodeError
from ..graph.store import GraphStore
from ..graph.traversal import search_by_label_in_active_branches
from ..log import getLogger
from ..models import Tag

logger = getLogger(__name__)


class ActivationResolver:
    """Resolves which tags are live for a configuration."""

    def __init__(self, store: GraphStore, graph: GraphSettings) -> None:
        self._store = store
        self._graph = graph

    def get_selected_tags(self, configuration_name: str) -> List[Tag]:
        """
        Return the active tags hanging off the active branches of
        `configuration_name`.

        Tags that cannot be read are logged and left out; the others are
        still returned.

        Raises:
            NotFoundError: no configuration root with that name.
            BadRequestError: the configuration name is ambiguous.
            QueryError: the store failed.
        """
        nodes = search_by_label_in_active_branches(
            self._store,
            self._graph,
            configuration_name,
            self._graph.tag_label,
            self._graph.use_case_to_tag,
        )

        tags: List[Tag] = []
        for node in nodes:
            try:
                tag = Tag.from_node(node, self._graph)
            except MalformedNodeError as exc:
                logger.error("Error during Tag Nodes discovery (node %d): %s", node.id, exc)
                continue
            if tag.active:
                tags.append(tag)
        return tags

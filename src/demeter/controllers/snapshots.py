from __future__ import annotations

from datetime import datetime
from typing import Callable, List

from ..config import GraphSettings
from ..exceptions import MalformedNodeError
from ..graph.store import GraphStore
from ..log import getLogger
from ..models import Level, Operation, Save

logger = getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class SnapshotManager:
    """
    Captures the levels generated for an application into a Save node.

    One Operation node is written per generated level, holding the level
    name and the full names of the objects it aggregates, and linked to
    the Save.
    """

    def __init__(
        self,
        store: GraphStore,
        graph: GraphSettings,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._graph = graph
        self._clock = clock

    def _levels(self, application: str) -> List[Level]:
        levels: List[Level] = []
        for node in self._store.find_nodes(self._graph.level_label, extra_labels=[application]):
            try:
                levels.append(Level.from_node(node, self._graph))
            except MalformedNodeError as exc:
                logger.error("Level node %d of %r skipped: %s", node.id, application, exc)
        return levels

    def _members(self, level: Level) -> List[str]:
        full_names: List[str] = []
        for obj in self._store.neighbours(level.node, self._graph.level_aggregates):
            if not obj.has_label(self._graph.object_label):
                continue
            full_name = obj.get(self._graph.object_full_name)
            if isinstance(full_name, str):
                full_names.append(full_name)
        return full_names

    def save_level(self, application: str, save_name: str) -> int:
        """
        Snapshot the generated levels of `application` under `save_name`.

        Everything is written in one unit: on failure no Save or Operation
        survives.

        Returns:
            The number of objects captured across all generated levels.
        """
        save = Save(
            name=save_name,
            application=application,
            date=self._clock().strftime(DATE_FORMAT),
        )

        saved_objects = 0
        with self._store.atomic():
            save_node = self._store.create_node([self._graph.save_label], save.to_properties())

            for level in self._levels(application):
                if not level.is_generated(self._graph.generated_level_prefix):
                    continue

                full_names = self._members(level)
                saved_objects += len(full_names)

                operation = Operation(level=level.name, objects=full_names)
                op_node = self._store.create_node(
                    [self._graph.operation_label], operation.to_properties()
                )
                self._store.create_relationship(op_node, save_node, self._graph.operation_to_save)

        logger.info(
            "Save %r (node %d) of %r captured %d object(s)",
            save_name, save_node.id, application, saved_objects,
        )
        return saved_objects

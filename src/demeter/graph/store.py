from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Literal, Mapping, Optional, Sequence

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import BadRequestError, NotFoundError, QueryError
from ..log import getLogger
from .schema import node_labels, nodes, relationships

logger = getLogger(__name__)

Direction = Literal["outgoing", "incoming"]

ERROR_PREFIX = "GSTRx"


@dataclass(frozen=True, slots=True)
class Node:
    """Snapshot of a stored node: identity, labels and properties."""

    id: int
    labels: frozenset[str]
    properties: Mapping[str, Any] = field(default_factory=dict)

    def has_label(self, label: str) -> bool:
        return label in self.labels

    def has_property(self, key: str) -> bool:
        return key in self.properties

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)


@dataclass(frozen=True, slots=True)
class Relationship:
    id: int
    type: str
    start_id: int
    end_id: int


@contextmanager
def _query(action: str) -> Iterator[None]:
    """Re-raise storage failures as QueryError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Graph store failure while trying to %s: %s", action, exc)
        raise QueryError(f"Failed to {action}: {exc}", ERROR_PREFIX + "QURY1") from exc


class GraphStore:
    """
    Property-graph access layer on top of a SQLAlchemy session.

    - Nodes carry one or more labels and a JSON property map.
    - Relationships are typed and directed (start → end).
    - The session (and therefore the transaction) belongs to the caller;
      `atomic()` opens a savepoint inside it.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #

    @contextmanager
    def atomic(self) -> Iterator["GraphStore"]:
        """
        Run a block as one unit: every change made inside is rolled back
        when the block raises.
        """
        with _query("open a savepoint"):
            savepoint = self._session.begin_nested()
        try:
            yield self
        except BaseException:
            if savepoint.is_active:
                savepoint.rollback()
            raise
        else:
            with _query("release a savepoint"):
                savepoint.commit()

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def _labels_for(self, node_ids: Sequence[int]) -> Dict[int, set[str]]:
        found: Dict[int, set[str]] = {node_id: set() for node_id in node_ids}
        if not node_ids:
            return found
        rows = self._session.execute(
            select(node_labels.c.node_id, node_labels.c.label).where(
                node_labels.c.node_id.in_(list(node_ids))
            )
        )
        for node_id, label in rows:
            found[int(node_id)].add(str(label))
        return found

    def _build_nodes(self, rows: Iterable[Any]) -> List[Node]:
        rows = list(rows)
        labels = self._labels_for([int(r.id) for r in rows])
        return [
            Node(
                id=int(r.id),
                labels=frozenset(labels[int(r.id)]),
                properties=MappingProxyType(dict(r.properties or {})),
            )
            for r in rows
        ]

    def get_node_by_id(self, node_id: int) -> Node:
        with _query(f"load node {node_id}"):
            row = self._session.execute(
                select(nodes.c.id, nodes.c.properties).where(nodes.c.id == node_id)
            ).first()
            if row is None:
                raise NotFoundError(
                    f"No node with id {node_id}.", ERROR_PREFIX + "GETN1"
                )
            return self._build_nodes([row])[0]

    def find_nodes(
        self,
        label: str,
        *,
        extra_labels: Sequence[str] = (),
        **properties: Any,
    ) -> List[Node]:
        """
        Return every node carrying `label` (and all `extra_labels`) whose
        properties equal the given keyword values, in creation order.
        """
        stmt = select(nodes.c.id, nodes.c.properties).order_by(nodes.c.id)
        for lbl in (label, *extra_labels):
            stmt = stmt.where(
                nodes.c.id.in_(
                    select(node_labels.c.node_id).where(node_labels.c.label == lbl)
                )
            )

        with _query(f"find nodes labelled {label!r}"):
            found = self._build_nodes(self._session.execute(stmt))

        if not properties:
            return found
        return [
            n for n in found
            if all(k in n.properties and n.properties[k] == v for k, v in properties.items())
        ]

    def get_relationships(
        self,
        node: Node,
        rel_type: Optional[str] = None,
        direction: Direction = "outgoing",
    ) -> List[Relationship]:
        """Relationships attached to `node`, optionally of one type, in creation order."""
        anchor = relationships.c.start_id if direction == "outgoing" else relationships.c.end_id
        stmt = select(relationships).where(anchor == node.id).order_by(relationships.c.id)
        if rel_type is not None:
            stmt = stmt.where(relationships.c.type == rel_type)

        with _query(f"read {direction} relationships of node {node.id}"):
            rows = self._session.execute(stmt)
            return [
                Relationship(
                    id=int(r.id),
                    type=str(r.type),
                    start_id=int(r.start_id),
                    end_id=int(r.end_id),
                )
                for r in rows
            ]

    def neighbours(
        self,
        node: Node,
        rel_type: Optional[str] = None,
        direction: Direction = "outgoing",
    ) -> List[Node]:
        """Nodes at the other end of `node`'s relationships, in relationship order."""
        rels = self.get_relationships(node, rel_type, direction)
        if not rels:
            return []
        other_ids = [r.end_id if direction == "outgoing" else r.start_id for r in rels]

        with _query(f"load neighbours of node {node.id}"):
            rows = self._session.execute(
                select(nodes.c.id, nodes.c.properties).where(nodes.c.id.in_(sorted(set(other_ids))))
            )
            by_id = {n.id: n for n in self._build_nodes(rows)}

        return [by_id[i] for i in other_ids if i in by_id]

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def create_node(self, labels: Iterable[str], properties: Mapping[str, Any]) -> Node:
        label_set = frozenset(labels)
        if not label_set:
            raise BadRequestError("A node needs at least one label.", ERROR_PREFIX + "CRTN1")

        props = dict(properties)
        with _query(f"create a node labelled {sorted(label_set)}"):
            result = self._session.execute(insert(nodes).values(properties=props))
            node_id = int(result.inserted_primary_key[0])
            self._session.execute(
                insert(node_labels),
                [{"node_id": node_id, "label": lbl} for lbl in sorted(label_set)],
            )

        logger.debug("Created node %d with labels %s", node_id, sorted(label_set))
        return Node(id=node_id, labels=label_set, properties=MappingProxyType(props))

    def update_properties(self, node: Node, properties: Mapping[str, Any]) -> Node:
        """Merge `properties` into the node's property map and return the new snapshot."""
        current = self.get_node_by_id(node.id)
        merged = {**current.properties, **properties}
        with _query(f"update node {node.id}"):
            self._session.execute(
                update(nodes).where(nodes.c.id == node.id).values(properties=merged)
            )
        return Node(id=current.id, labels=current.labels, properties=MappingProxyType(merged))

    def create_relationship(self, start: Node, end: Node, rel_type: str) -> Relationship:
        with _query(f"link node {start.id} to node {end.id} with {rel_type!r}"):
            result = self._session.execute(
                insert(relationships).values(
                    type=rel_type, start_id=start.id, end_id=end.id
                )
            )
            rel_id = int(result.inserted_primary_key[0])
        return Relationship(id=rel_id, type=rel_type, start_id=start.id, end_id=end.id)

    def delete_relationship(self, rel: Relationship) -> None:
        with _query(f"delete relationship {rel.id}"):
            self._session.execute(delete(relationships).where(relationships.c.id == rel.id))

    def delete_node(self, node: Node, *, detach: bool = False) -> None:
        """
        Delete a node. Without `detach`, a node that still has relationships
        is refused; with it, its relationships go first.
        """
        attached = or_(relationships.c.start_id == node.id, relationships.c.end_id == node.id)

        with _query(f"delete node {node.id}"):
            if not detach:
                still_linked = self._session.execute(
                    select(relationships.c.id).where(attached).limit(1)
                ).first()
                if still_linked is not None:
                    raise BadRequestError(
                        f"Node {node.id} still has relationships; delete them first or detach.",
                        ERROR_PREFIX + "DELN1",
                    )
            else:
                self._session.execute(delete(relationships).where(attached))

            self._session.execute(delete(node_labels).where(node_labels.c.node_id == node.id))
            self._session.execute(delete(nodes).where(nodes.c.id == node.id))

        logger.debug("Deleted node %d", node.id)

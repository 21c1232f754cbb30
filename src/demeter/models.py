from __future__ import annotations

"""Typed views over the nodes handled by the controllers."""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from .config import GraphSettings
from .exceptions import MalformedNodeError
from .graph.store import Node
from .properties import (
    ACTIVE,
    APPLICATION,
    DATE,
    DESCRIPTION,
    FULL_NAME,
    LEVEL,
    NAME,
    OBJECTS,
    REQUEST,
)

T = TypeVar("T")


def _check_label(node: Node, label: str) -> None:
    if not node.has_label(label):
        raise MalformedNodeError(
            f"Node {node.id} is not a {label} node (labels: {sorted(node.labels)})."
        )


def _require(node: Node, key: str, kind: Type[T] | Tuple[type, ...]) -> T:
    if key not in node.properties:
        raise MalformedNodeError(f"Node {node.id} has no {key!r} property.")
    value = node.properties[key]
    if not isinstance(value, kind):
        raise MalformedNodeError(
            f"Property {key!r} of node {node.id} has type {type(value).__name__}."
        )
    return value  # type: ignore[return-value]


@dataclass(slots=True)
class Configuration:
    name: str
    node_id: Optional[int] = None

    @classmethod
    def from_node(cls, node: Node, graph: GraphSettings) -> Configuration:
        _check_label(node, graph.configuration_label)
        return cls(name=_require(node, NAME, str), node_id=node.id)

    def to_properties(self) -> Dict[str, Any]:
        return {NAME: self.name}


@dataclass(slots=True)
class UseCase:
    name: str
    active: bool
    node_id: Optional[int] = None

    @classmethod
    def from_node(cls, node: Node, graph: GraphSettings) -> UseCase:
        _check_label(node, graph.use_case_label)
        return cls(
            name=_require(node, NAME, str),
            active=_require(node, ACTIVE, bool),
            node_id=node.id,
        )

    def to_properties(self) -> Dict[str, Any]:
        return {NAME: self.name, ACTIVE: self.active}


@dataclass(slots=True)
class Tag:
    """
    Selection rule attached to a use case.

    `request` is kept as opaque text; evaluating it is not done here.
    """

    name: str
    active: bool
    request: str
    description: str = ""
    node_id: Optional[int] = None

    @classmethod
    def from_node(cls, node: Node, graph: GraphSettings) -> Tag:
        _check_label(node, graph.tag_label)
        description = node.get(DESCRIPTION, "")
        if description is None:
            description = ""
        if not isinstance(description, str):
            raise MalformedNodeError(
                f"Property {DESCRIPTION!r} of node {node.id} has type {type(description).__name__}."
            )
        return cls(
            name=_require(node, NAME, str),
            active=_require(node, ACTIVE, bool),
            request=_require(node, REQUEST, str),
            description=description,
            node_id=node.id,
        )

    def to_properties(self) -> Dict[str, Any]:
        return {
            NAME: self.name,
            ACTIVE: self.active,
            REQUEST: self.request,
            DESCRIPTION: self.description,
        }


@dataclass(slots=True)
class Level:
    """Externally generated grouping; only read here."""

    name: str
    full_name: str
    node: Node

    @classmethod
    def from_node(cls, node: Node, graph: GraphSettings) -> Level:
        _check_label(node, graph.level_label)
        return cls(
            name=_require(node, NAME, str),
            full_name=_require(node, FULL_NAME, str),
            node=node,
        )

    def is_generated(self, prefix: str) -> bool:
        """True when the full name carries the ``##<prefix>`` marker."""
        return re.search("##" + re.escape(prefix), self.full_name) is not None


@dataclass(slots=True)
class Operation:
    level: str
    objects: List[str] = field(default_factory=list)
    node_id: Optional[int] = None

    @classmethod
    def from_node(cls, node: Node, graph: GraphSettings) -> Operation:
        _check_label(node, graph.operation_label)
        objects = _require(node, OBJECTS, list)
        if not all(isinstance(o, str) for o in objects):
            raise MalformedNodeError(f"Node {node.id} lists non-string objects.")
        return cls(level=_require(node, LEVEL, str), objects=list(objects), node_id=node.id)

    def to_properties(self) -> Dict[str, Any]:
        return {LEVEL: self.level, OBJECTS: list(self.objects)}


@dataclass(slots=True)
class Save:
    name: str
    application: str
    date: str
    node_id: Optional[int] = None

    @classmethod
    def from_node(cls, node: Node, graph: GraphSettings) -> Save:
        _check_label(node, graph.save_label)
        return cls(
            name=_require(node, NAME, str),
            application=_require(node, APPLICATION, str),
            date=_require(node, DATE, str),
            node_id=node.id,
        )

    def to_properties(self) -> Dict[str, Any]:
        return {NAME: self.name, APPLICATION: self.application, DATE: self.date}

from __future__ import annotations

"""Controllers operating on the use-case tree and on saves."""

from .activation import ActivationResolver
from .saves import SaveCatalog
from .snapshots import SnapshotManager
from .tags import TagRegistry
from .use_cases import UseCaseRegistry

__all__ = [
    "ActivationResolver",
    "SaveCatalog",
    "SnapshotManager",
    "TagRegistry",
    "UseCaseRegistry",
]

# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Back-references from a child to its parent.

A back-reference never keeps its target alive. Two interchangeable
strategies are provided:

- WeakBackRef: wraps a ``weakref.ref`` to the parent node.
- IndexedBackRef: stores the parent's integer serial and looks it up in a
  registry of live nodes. The serial carries no reclaim obligation; once
  the parent is collected its registry entry disappears and the lookup
  fails.

The strategy used by TreeNode is chosen once, when the package is
imported, from the ``GENRO_TREENODE_BACKREF`` environment variable
('weak' by default, or 'indexed').

Example:
    >>> ref = WeakBackRef(root)
    >>> ref.resolve() is root
    True
"""

from __future__ import annotations

import itertools
import logging
import os
import weakref
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .node import TreeNode

logger = logging.getLogger(__name__)

ENV_VAR = 'GENRO_TREENODE_BACKREF'


class BackRef(ABC):
    """Non-owning link to a node."""

    __slots__ = ()

    @abstractmethod
    def resolve(self) -> TreeNode | None:
        """Return the referenced node, or None if it was released."""

    @property
    def alive(self) -> bool:
        return self.resolve() is not None

    def __repr__(self) -> str:
        target = self.resolve()
        state = 'dead' if target is None else f'to {target!r}'
        return f"{type(self).__name__}({state})"


class WeakBackRef(BackRef):
    """Back-reference held through the garbage collector's weak references."""

    __slots__ = ('_ref',)

    def __init__(self, node: TreeNode) -> None:
        self._ref = weakref.ref(node)

    def resolve(self) -> TreeNode | None:
        return self._ref()


class _NodeRegistry:
    """Serial numbers for live nodes.

    Both directions are weak, so registering a node never extends its
    lifetime. Serials are never reused.
    """

    __slots__ = ('_by_serial', '_serial_of', '_counter')

    def __init__(self) -> None:
        self._by_serial: weakref.WeakValueDictionary[int, TreeNode] = (
            weakref.WeakValueDictionary()
        )
        self._serial_of: weakref.WeakKeyDictionary[TreeNode, int] = (
            weakref.WeakKeyDictionary()
        )
        self._counter = itertools.count(1)

    def __len__(self) -> int:
        return len(self._by_serial)

    def serial(self, node: TreeNode) -> int:
        """Return the serial of node, registering it on first use."""
        serial = self._serial_of.get(node)
        if serial is None:
            serial = next(self._counter)
            self._serial_of[node] = serial
            self._by_serial[serial] = node
        return serial

    def lookup(self, serial: int) -> TreeNode | None:
        return self._by_serial.get(serial)


registry = _NodeRegistry()


class IndexedBackRef(BackRef):
    """Back-reference stored as an integer serial into the node registry."""

    __slots__ = ('serial',)

    def __init__(self, node: TreeNode) -> None:
        self.serial = registry.serial(node)

    def resolve(self) -> TreeNode | None:
        return registry.lookup(self.serial)


BACKREF_STRATEGIES: dict[str, type[BackRef]] = {
    'weak': WeakBackRef,
    'indexed': IndexedBackRef,
}


def get_backref_class(name: str) -> type[BackRef]:
    """Return the back-reference class registered under name.

    Args:
        name: Strategy name, 'weak' or 'indexed' (case-insensitive).

    Raises:
        ValueError: If name is not a known strategy.
    """
    try:
        return BACKREF_STRATEGIES[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown back-reference strategy {name!r}, "
            f"expected one of {sorted(BACKREF_STRATEGIES)}"
        ) from None


DEFAULT_BACKREF = get_backref_class(os.environ.get(ENV_VAR, 'weak'))
logger.debug("Using %s for parent back-references", DEFAULT_BACKREF.__name__)

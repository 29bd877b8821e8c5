# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Traversal over a TreeNode and its descendants.

NodeIter walks level by level, left to right: every node at depth d is
yielded before any node at depth d+1, and siblings come out in the order
they were inserted.

A node's children are read when the node is dequeued, not when it is
queued. Mutating a subtree while a walk is in progress is not an error,
but whether the walk sees the change depends on whether the affected
node has already been dequeued.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from .node import ParentState

if TYPE_CHECKING:
    from .node import TreeNode


class NodeIter:
    """Lazy breadth-first iterator. Single pass, not restartable.

    Example:
        >>> root = TreeNode.make_root(1)
        >>> child = root.insert(2)
        >>> _ = child.insert(3)
        >>> [node.value for node in NodeIter(root)]
        [1, 2, 3]
    """

    __slots__ = ('_queue',)

    def __init__(self, start: TreeNode) -> None:
        self._queue: deque[TreeNode] = deque([start])

    def __repr__(self) -> str:
        return f"NodeIter(pending={len(self._queue)})"

    def __iter__(self) -> NodeIter:
        return self

    def __next__(self) -> TreeNode:
        if not self._queue:
            raise StopIteration
        node = self._queue[0]
        with node._reading() as state:
            children = state.children if isinstance(state, ParentState) else ()
            self._queue.popleft()
            self._queue.extend(children)
        return node


def iterate(start: TreeNode) -> NodeIter:
    """Return a breadth-first iterator starting at start."""
    return NodeIter(start)


class DepthFirstIter:
    """Lazy depth-first pre-order iterator, children in insertion order.

    Like NodeIter, a node leaves the stack only once its children have
    been read, so a walk interrupted by AlreadyBorrowed can be resumed.
    """

    __slots__ = ('_stack',)

    def __init__(self, start: TreeNode) -> None:
        self._stack: list[TreeNode] = [start]

    def __repr__(self) -> str:
        return f"DepthFirstIter(pending={len(self._stack)})"

    def __iter__(self) -> DepthFirstIter:
        return self

    def __next__(self) -> TreeNode:
        if not self._stack:
            raise StopIteration
        node = self._stack[-1]
        with node._reading() as state:
            children = state.children if isinstance(state, ParentState) else ()
            self._stack.pop()
            self._stack.extend(reversed(children))
        return node


def iter_depth_first(start: TreeNode) -> DepthFirstIter:
    """Return a depth-first pre-order iterator starting at start."""
    return DepthFirstIter(start)

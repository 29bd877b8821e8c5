# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeNode - a shared tree node that reshapes itself as children come and go.

A TreeNode is a handle: every Python reference to it is a holder of the
same node, so a change made through one holder is seen by all of them.
Its interior is exactly one of two states:

- LeafState: value and parent back-reference.
- ParentState: value, parent back-reference and the ordered list of
  children the node owns.

A node is in ParentState exactly when it owns at least one child. The
first insert promotes a leaf to a parent; popping the last child demotes
it back to a leaf within the same call.

Children hold their parent through a back-reference (see ``backref``)
that never keeps the parent alive. Parents hold their children with
ordinary references, shared with any external holder.

Every read or write of a node's interior goes through the node's
AccessGuard. A conflicting access, such as inserting into a node while
its value is being edited, raises AlreadyBorrowed.

Example:
    >>> root = TreeNode.make_root(1)
    >>> child = root.insert(2)
    >>> root.is_parent, child.parent is root
    (True, True)
    >>> root.pop(child)
    >>> root.is_leaf, child.parent
    (True, None)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, ClassVar, Iterator, TYPE_CHECKING

from .backref import DEFAULT_BACKREF, BackRef
from .exceptions import (
    CyclicAttachment,
    DowngradeNotParent,
    ExpectedALeafNode,
    ExpectedARootNode,
    ExpectedChildren,
    IllegalDowngradeWithChildren,
    NotAParent,
    ParentNodeNotFound,
    ParentUpgradeNotAllowed,
    RootDowngradeNotAllowed,
    SlotExpired,
)
from .guard import AccessGuard

if TYPE_CHECKING:
    from .traversal import NodeIter

logger = logging.getLogger(__name__)


class LeafState:
    """Interior of a node without children."""

    __slots__ = ('parent_ref', 'value')

    def __init__(self, value: Any, parent_ref: BackRef | None = None) -> None:
        self.parent_ref = parent_ref
        self.value = value


class ParentState:
    """Interior of a node owning one or more children."""

    __slots__ = ('value', 'parent_ref', 'children')

    def __init__(
        self,
        value: Any,
        parent_ref: BackRef | None,
        children: list[TreeNode],
    ) -> None:
        self.value = value
        self.parent_ref = parent_ref
        self.children = children


class ValueSlot:
    """Write access to a node's value, handed out by TreeNode.edit().

    The slot is only usable inside its edit() block; afterwards every
    access raises SlotExpired.
    """

    __slots__ = ('_node',)

    def __init__(self, node: TreeNode) -> None:
        self._node: TreeNode | None = node

    def __repr__(self) -> str:
        if self._node is None:
            return "ValueSlot(expired)"
        return f"ValueSlot({self._node._state.value!r})"

    def _target(self) -> TreeNode:
        if self._node is None:
            raise SlotExpired()
        return self._node

    def _expire(self) -> None:
        self._node = None

    @property
    def value(self) -> Any:
        return self._target()._state.value

    @value.setter
    def value(self, value: Any) -> None:
        self._target()._state.value = value


class TreeNode:
    """A tree node that is a leaf or a parent depending on its children.

    Attributes:
        backref_class: Back-reference strategy used for the children of
            this class of node. Defaults to the process-wide strategy;
            subclasses may pin another one.

    Example:
        >>> root = TreeNode.make_root('html')
        >>> body = root.insert('body')
        >>> body.insert('div').value
        'div'
        >>> [n.value for n in root.iter()]
        ['html', 'body', 'div']
    """

    __slots__ = ('_state', '_guard', '__weakref__')

    backref_class: ClassVar[type[BackRef]] = DEFAULT_BACKREF

    def __init__(self, value: Any = None) -> None:
        """Initialize a detached leaf node holding value."""
        self._state: LeafState | ParentState = LeafState(value)
        self._guard = AccessGuard()

    # ==================== Constructors ====================

    @classmethod
    def make_root(cls, value: Any = None) -> TreeNode:
        """Create a standalone root holding value, with no children yet."""
        return cls(value)

    @classmethod
    def leaf(cls, value: Any = None, parent: TreeNode | None = None) -> TreeNode:
        """Create a leaf holding value.

        Args:
            value: The node's value.
            parent: If given, the leaf is attached as its last child.
        """
        node = cls(value)
        if parent is not None:
            parent.insert_node(node)
        return node

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        state = self._state
        if isinstance(state, LeafState):
            return f"Leaf({state.value!r})"
        parent = 'Some' if _resolve(state.parent_ref) is not None else 'None'
        return (
            f"Parent(value={state.value!r}, parent={parent}, "
            f"children={len(state.children)})"
        )

    def __iter__(self) -> Iterator[TreeNode]:
        """Iterate over this node and its descendants in breadth-first order."""
        return self.iter()

    # ==================== Guarded Access ====================

    @contextmanager
    def _reading(self) -> Iterator[LeafState | ParentState]:
        with self._guard.shared():
            yield self._state

    @contextmanager
    def edit(self) -> Iterator[ValueSlot]:
        """Hold exclusive access to the node for the duration of a block.

        While the block runs, any other read or write of this node's
        interior raises AlreadyBorrowed.

        Example:
            >>> with node.edit() as slot:
            ...     slot.value += 1

        Raises:
            AlreadyBorrowed: If the node is already being read or written.
        """
        with self._guard.exclusive():
            slot = ValueSlot(self)
            try:
                yield slot
            finally:
                slot._expire()

    # ==================== Inspection ====================

    @property
    def value(self) -> Any:
        """The stored value, whatever the node's variant."""
        with self._reading() as state:
            return state.value

    @value.setter
    def value(self, value: Any) -> None:
        with self._guard.exclusive():
            self._state.value = value

    @property
    def is_leaf(self) -> bool:
        with self._reading() as state:
            return isinstance(state, LeafState)

    @property
    def is_parent(self) -> bool:
        with self._reading() as state:
            return isinstance(state, ParentState)

    @property
    def has_children(self) -> bool:
        with self._reading() as state:
            return isinstance(state, ParentState) and bool(state.children)

    @property
    def child_count(self) -> int:
        with self._reading() as state:
            return len(state.children) if isinstance(state, ParentState) else 0

    @property
    def children(self) -> tuple[TreeNode, ...]:
        """Snapshot of the children in insertion order.

        Raises:
            NotAParent: If the node is a leaf.
        """
        with self._reading() as state:
            if isinstance(state, LeafState):
                raise NotAParent()
            return tuple(state.children)

    def expect_children(self) -> tuple[TreeNode, ...]:
        """Return the children, requiring that there is at least one.

        Raises:
            ExpectedChildren: If the node has no children.
        """
        with self._reading() as state:
            if isinstance(state, LeafState) or not state.children:
                raise ExpectedChildren()
            return tuple(state.children)

    @property
    def parent(self) -> TreeNode | None:
        """The node owning this one, or None for roots.

        A back-reference whose target has been released resolves to None.
        """
        with self._reading() as state:
            return _resolve(state.parent_ref)

    def expect_parent(self) -> TreeNode:
        """Return the parent node.

        Raises:
            ParentNodeNotFound: If the node is a root or its parent is gone.
        """
        parent = self.parent
        if parent is None:
            raise ParentNodeNotFound()
        return parent

    @property
    def is_root(self) -> bool:
        """True if the node has no live parent."""
        return self.parent is None

    def expect_leaf(self) -> None:
        """Raises ExpectedALeafNode unless the node is a leaf."""
        if not self.is_leaf:
            raise ExpectedALeafNode()

    def expect_root(self) -> None:
        """Raises ExpectedARootNode unless the node has no parent."""
        if not self.is_root:
            raise ExpectedARootNode()

    # ==================== Navigation ====================

    @property
    def root(self) -> TreeNode:
        """The topmost node reachable through back-references."""
        node = self
        parent = node.parent
        while parent is not None:
            node = parent
            parent = node.parent
        return node

    @property
    def depth(self) -> int:
        """Number of back-references between this node and its root (root=0)."""
        depth = 0
        parent = self.parent
        while parent is not None:
            depth += 1
            parent = parent.parent
        return depth

    def ancestors(self) -> Iterator[TreeNode]:
        """Yield the parent, grandparent and so on up to the root."""
        parent = self.parent
        while parent is not None:
            yield parent
            parent = parent.parent

    # ==================== State Transitions ====================

    def _promote(self, first_child: TreeNode) -> None:
        """Swap a leaf interior for a parent interior. Guard must be held."""
        state = self._state
        if isinstance(state, ParentState):
            raise ParentUpgradeNotAllowed()
        self._state = ParentState(state.value, state.parent_ref, [first_child])
        logger.debug("Promoted %r to parent", state.value)

    def _demote(self) -> None:
        """Swap an empty parent interior for a leaf interior. Guard must be held."""
        state = self._state
        self._state = LeafState(state.value, state.parent_ref)
        logger.debug("Demoted %r to leaf", state.value)

    def promote_to_parent(self, first_child: TreeNode) -> None:
        """Turn this leaf into a parent whose only child is first_child.

        Args:
            first_child: A detached node that becomes the first child.

        Raises:
            ParentUpgradeNotAllowed: If the node is already a parent.
            ExpectedARootNode: If first_child is attached to another node.
            CyclicAttachment: If first_child is this node or an ancestor.
            AlreadyBorrowed: If the node is held by another access.
        """
        with self._guard.exclusive():
            if isinstance(self._state, ParentState):
                raise ParentUpgradeNotAllowed()
            self._check_attachable(first_child)
            self._promote(first_child)
            _link(first_child, self)

    def demote_to_leaf(self) -> None:
        """Turn this childless parent back into a leaf.

        Roots are always rejected by this call, whatever their children;
        a root only returns to the leaf variant when pop removes its last
        child. Since pop demotes every parent that loses its last child,
        a call that gets past the root check always fails on the child
        count: the check is kept so the node can never be left an empty
        parent.

        Raises:
            DowngradeNotParent: If the node is already a leaf.
            RootDowngradeNotAllowed: If the node has no parent.
            IllegalDowngradeWithChildren: If children are still attached.
            AlreadyBorrowed: If the node is held by another access.
        """
        with self._guard.exclusive():
            state = self._state
            if isinstance(state, LeafState):
                raise DowngradeNotParent()
            if _resolve(state.parent_ref) is None:
                raise RootDowngradeNotAllowed()
            if state.children:
                raise IllegalDowngradeWithChildren(len(state.children))
            self._demote()

    # ==================== Mutation ====================

    def insert(self, value: Any) -> TreeNode:
        """Attach a new leaf holding value as the last child of this node.

        A leaf target is promoted to a parent by this call.

        Args:
            value: Value of the new child.

        Returns:
            The new child node.

        Raises:
            AlreadyBorrowed: If the node is held by another access.
        """
        child = type(self)(value)
        self._attach(child)
        return child

    def insert_node(self, node: TreeNode) -> TreeNode:
        """Attach an existing detached node as the last child of this node.

        Args:
            node: Node to attach. It must not have a live parent.

        Returns:
            The attached node.

        Raises:
            ExpectedARootNode: If node is already attached somewhere.
            CyclicAttachment: If node is this node or one of its ancestors.
            AlreadyBorrowed: If the node is held by another access.
        """
        self._attach(node, check=True)
        return node

    def _check_attachable(self, node: TreeNode) -> None:
        """Reject cycles and attached nodes. Reads back-references unguarded."""
        current: TreeNode | None = self
        while current is not None:
            if current is node:
                raise CyclicAttachment()
            current = _resolve(current._state.parent_ref)
        if _resolve(node._state.parent_ref) is not None:
            raise ExpectedARootNode("Node is already attached to a parent")

    def _attach(self, child: TreeNode, check: bool = False) -> None:
        with self._guard.exclusive():
            if check:
                self._check_attachable(child)
            state = self._state
            if isinstance(state, LeafState):
                self._promote(child)
            else:
                state.children.append(child)
            _link(child, self)
        logger.debug("Inserted %r under %r", child._state.value, self._state.value)

    def pop(self, child: TreeNode) -> None:
        """Detach child from this node, matching by identity.

        The child's back-reference is cleared. If it was the last child,
        this node returns to the leaf variant in the same call.

        Args:
            child: The child node to remove.

        Raises:
            NotAParent: If this node is a leaf.
            ParentNodeNotFound: If child is not one of this node's children.
            AlreadyBorrowed: If the node is held by another access.
        """
        with self._guard.exclusive():
            state = self._state
            if isinstance(state, LeafState):
                raise NotAParent()
            for index, candidate in enumerate(state.children):
                if candidate is child:
                    break
            else:
                raise ParentNodeNotFound("Child not found under this parent")
            del state.children[index]
            child._state.parent_ref = None
            if not state.children:
                self._demote()
        logger.debug("Popped %r from %r", child._state.value, self._state.value)

    # ==================== Traversal ====================

    def iter(self) -> NodeIter:
        """Breadth-first iterator over this node and its descendants."""
        from .traversal import NodeIter
        return NodeIter(self)

    def walk(self) -> Iterator[TreeNode]:
        """Depth-first pre-order iterator over this node and its descendants."""
        from .traversal import iter_depth_first
        return iter_depth_first(self)


def _resolve(parent_ref: BackRef | None) -> TreeNode | None:
    return parent_ref.resolve() if parent_ref is not None else None


def _link(child: TreeNode, parent: TreeNode) -> None:
    child._state.parent_ref = parent.backref_class(parent)


# ==================== Functional API ====================

def make_root(value: Any = None) -> TreeNode:
    """Create a standalone root node holding value."""
    return TreeNode.make_root(value)


def insert(target: TreeNode, value: Any) -> TreeNode:
    """Attach a new leaf holding value to target and return it."""
    return target.insert(value)


def insert_node(target: TreeNode, node: TreeNode) -> TreeNode:
    """Attach the detached node to target and return it."""
    return target.insert_node(node)


def pop(parent: TreeNode, child: TreeNode) -> None:
    """Detach child from parent."""
    parent.pop(child)


def promote_to_parent(node: TreeNode, first_child: TreeNode) -> None:
    node.promote_to_parent(first_child)


def demote_to_leaf(node: TreeNode) -> None:
    node.demote_to_leaf()

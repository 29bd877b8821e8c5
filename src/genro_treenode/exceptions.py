# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeNode exceptions.

Every failure of a node operation is reported with a subclass of
NodeError. The set may grow: callers that need a catch-all should
catch NodeError itself.
"""

from __future__ import annotations


class NodeError(Exception):
    """Base exception for TreeNode errors."""

    message = "Node operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class DowngradeNotParent(NodeError):
    """Raised when demoting a node that is already a leaf."""

    message = "Downgrade failure, node was not a parent"


class RootDowngradeNotAllowed(NodeError):
    """Raised when demoting a node that has no parent."""

    message = "Root node cannot be downgraded"


class IllegalDowngradeWithChildren(NodeError):
    """Raised when demoting a parent that still owns children.

    Attributes:
        count: Number of children still attached to the node.
    """

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(
            f"Downgrade failure, node still has reference to {count} children"
        )


class ParentUpgradeNotAllowed(NodeError):
    """Raised when promoting a node that is already a parent."""

    message = "Upgrade failure, node was not a leaf"


class ExpectedALeafNode(NodeError):
    """Raised when a leaf was required but a parent was given."""

    message = "Expected a leaf node"


class ExpectedARootNode(NodeError):
    """Raised when a node without parent was required."""

    message = "Expected a root node"


class NotAParent(NodeError):
    """Raised when a parent was required but a leaf was given."""

    message = "Expected a parent node"


class AlreadyBorrowed(NodeError):
    """Raised when a node's interior is held by a conflicting access."""

    message = "Node is already borrowed"


class ParentNodeNotFound(NodeError):
    """Raised when a parent link is missing or a child is not under its parent."""

    message = "Parent not found"


class ExpectedChildren(NodeError):
    """Raised when children are requested on a node that has none."""

    message = "Expected the node to have children"


class CyclicAttachment(NodeError, ValueError):
    """Raised when a node would be attached under itself or its descendants."""

    message = "Cannot attach a node under itself or its descendants"


class SlotExpired(NodeError):
    """Raised when a ValueSlot is used after its edit() block has ended."""

    message = "Value slot used outside its edit() block"

# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-TreeNode - Shared tree nodes with automatic leaf/parent reshaping.

A lightweight, zero-dependency library providing a tree node that is a
leaf until it receives a child and becomes a leaf again when its last
child is removed. Nodes are shared handles with non-owning parent
back-references.
"""

import logging

__version__ = "0.1.0"

from .backref import (
    BackRef,
    DEFAULT_BACKREF,
    IndexedBackRef,
    WeakBackRef,
    get_backref_class,
)
from .exceptions import (
    AlreadyBorrowed,
    CyclicAttachment,
    DowngradeNotParent,
    ExpectedALeafNode,
    ExpectedARootNode,
    ExpectedChildren,
    IllegalDowngradeWithChildren,
    NodeError,
    NotAParent,
    ParentNodeNotFound,
    ParentUpgradeNotAllowed,
    RootDowngradeNotAllowed,
    SlotExpired,
)
from .guard import AccessGuard
from .node import (
    LeafState,
    ParentState,
    TreeNode,
    ValueSlot,
    demote_to_leaf,
    insert,
    insert_node,
    make_root,
    pop,
    promote_to_parent,
)
from .traversal import DepthFirstIter, NodeIter, iter_depth_first, iterate

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core classes
    "TreeNode",
    "LeafState",
    "ParentState",
    "ValueSlot",
    "AccessGuard",
    # Functional API
    "make_root",
    "insert",
    "insert_node",
    "pop",
    "promote_to_parent",
    "demote_to_leaf",
    # Traversal
    "NodeIter",
    "DepthFirstIter",
    "iterate",
    "iter_depth_first",
    # Back-references
    "BackRef",
    "WeakBackRef",
    "IndexedBackRef",
    "DEFAULT_BACKREF",
    "get_backref_class",
    # Exceptions
    "NodeError",
    "DowngradeNotParent",
    "RootDowngradeNotAllowed",
    "IllegalDowngradeWithChildren",
    "ParentUpgradeNotAllowed",
    "ExpectedALeafNode",
    "ExpectedARootNode",
    "NotAParent",
    "AlreadyBorrowed",
    "ParentNodeNotFound",
    "ExpectedChildren",
    "CyclicAttachment",
    "SlotExpired",
]

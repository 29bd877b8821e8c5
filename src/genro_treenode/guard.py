# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Access guard for a node's interior.

A guard is either free, held shared by any number of readers, or held
exclusively by one writer. Acquisition never waits: a conflicting request
raises AlreadyBorrowed on the spot.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from .exceptions import AlreadyBorrowed

_EXCLUSIVE = -1


class AccessGuard:
    """Shared/exclusive access state of a single node.

    Example:
        >>> guard = AccessGuard()
        >>> with guard.exclusive():
        ...     guard.is_free
        False
        >>> guard.is_free
        True
    """

    __slots__ = ('_state',)

    def __init__(self) -> None:
        # 0 free, n > 0 readers, -1 writer
        self._state = 0

    def __repr__(self) -> str:
        if self._state == _EXCLUSIVE:
            mode = 'exclusive'
        elif self._state:
            mode = f'shared({self._state})'
        else:
            mode = 'free'
        return f"AccessGuard({mode})"

    @property
    def is_free(self) -> bool:
        return self._state == 0

    @property
    def is_exclusive(self) -> bool:
        return self._state == _EXCLUSIVE

    @contextmanager
    def shared(self) -> Iterator[None]:
        """Hold the guard for reading.

        Raises:
            AlreadyBorrowed: If a writer currently holds the guard.
        """
        if self._state == _EXCLUSIVE:
            raise AlreadyBorrowed("Node is already borrowed mutably")
        self._state += 1
        try:
            yield
        finally:
            self._state -= 1

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        """Hold the guard for writing.

        Raises:
            AlreadyBorrowed: If any reader or writer currently holds the guard.
        """
        if self._state == _EXCLUSIVE:
            raise AlreadyBorrowed("Node is already borrowed mutably")
        if self._state:
            raise AlreadyBorrowed("Node is already borrowed for reading")
        self._state = _EXCLUSIVE
        try:
            yield
        finally:
            self._state = 0

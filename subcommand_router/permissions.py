"""
Permission Tree
===============

Commands carry dotted permission strings such as "teams.command.create".
When a command is registered, the router declares its permission in a
PermissionTree and hangs it under the wildcard of its namespace:

    teams.command.*
    ├── teams.command.create
    ├── teams.command.delete
    └── teams.command.join

Holding "teams.command.*" then implies holding every child. A
permission without a dot ("reload") is hung under the root wildcard "*".

Registration is idempotent: declaring the same permission twice leaves
the tree exactly as declaring it once.

Thread Safety
-------------
Same scheme as the command registry: writers build new nodes and swap
the whole table in under a lock. A published Permission is never
changed afterwards, so expand() can walk a snapshot while commands
are still being registered on another thread.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

WILDCARD_SUFFIX = "*"


@dataclass(frozen=True)
class Permission:
    """A node in the permission tree.

    Attributes
    ----------
    name : str
        Full dotted permission name.
    description : str
        Human readable description.
    children : Mapping[str, bool]
        Implied permissions. True means holding this node grants the
        child; False means it explicitly denies it. Read-only.
    """
    name: str
    description: str = ""
    children: Mapping[str, bool] = field(default_factory=lambda: MappingProxyType({}))

    def with_child(self, child: str, value: bool) -> Permission:
        """A copy of this node with one child set."""
        children = dict(self.children)
        children[child] = value
        return Permission(self.name, self.description, MappingProxyType(children))


def wildcard_parent(permission: str) -> str:
    """The wildcard one level above a permission.

    "a.b.c" -> "a.b.*", "a" -> "*"
    """
    head, dot, _ = permission.rpartition(".")
    if not dot:
        return WILDCARD_SUFFIX
    return f"{head}.{WILDCARD_SUFFIX}"


class PermissionTree:
    """In-memory permission registry with wildcard synthesis."""

    def __init__(self):
        self._lock = threading.Lock()
        self._permissions: Mapping[str, Permission] = MappingProxyType({})

    def ensure_registered(self, permission: str, description: str = "") -> Permission:
        """Declare a permission and attach it to its wildcard parent.

        Missing nodes are created; existing nodes are reused untouched,
        so calling this again with the same name changes nothing.
        """
        with self._lock:
            permissions = dict(self._permissions)

            node = permissions.get(permission)
            if node is None:
                node = Permission(permission, description)
                permissions[permission] = node
                logger.debug(f"Registered permission: {permission}")

            parent_name = wildcard_parent(permission)
            if parent_name != permission:
                parent = permissions.get(parent_name)
                if parent is None:
                    parent = Permission(parent_name)
                    logger.debug(f"Registered wildcard permission: {parent_name}")
                if permission not in parent.children:
                    permissions[parent_name] = parent.with_child(permission, True)

            self._permissions = MappingProxyType(permissions)

        return node

    def set_child(self, parent: str, child: str, value: bool) -> None:
        """Grant (True) or deny (False) a child through a parent node.

        Raises
        ------
        KeyError
            If the parent is not registered.
        """
        with self._lock:
            permissions = dict(self._permissions)
            permissions[parent] = permissions[parent].with_child(child, value)
            self._permissions = MappingProxyType(permissions)

    def get(self, permission: str) -> Optional[Permission]:
        return self._permissions.get(permission)

    def expand(self, granted: Iterable[str]) -> set[str]:
        """Every permission implied by the granted set, including itself."""
        permissions = self._permissions
        explicit = set(granted)
        result: set[str] = set()
        denied: set[str] = set()
        pending = list(explicit)

        while pending:
            name = pending.pop()
            if name in result:
                continue
            result.add(name)
            node = permissions.get(name)
            if node is None:
                continue
            for child, value in node.children.items():
                if value:
                    pending.append(child)
                else:
                    denied.add(child)

        return result - (denied - explicit)

    def implies(self, granted: Iterable[str], permission: str) -> bool:
        return permission in self.expand(granted)

    def names(self) -> list[str]:
        return list(self._permissions)

    def __contains__(self, permission: str) -> bool:
        return permission in self._permissions

    def __len__(self) -> int:
        return len(self._permissions)

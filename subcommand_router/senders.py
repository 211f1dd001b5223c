"""
Command Senders
===============

The router never talks to a terminal, socket or game client directly.
Anything that can issue a command implements the CommandSender
protocol: it has a name, may be an operator, may be an interactive
player, can be asked whether it holds a permission, and can receive
text lines.

Two concrete senders are provided for hosts that have no richer
identity model of their own:

ConsoleSender
    The server console. An operator, never a player.

PlayerSender
    An interactive user with a set of granted permission strings.
    When given a PermissionTree, wildcard grants such as "teams.command.*"
    are expanded through the tree, so they imply every child.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Protocol, runtime_checkable

from subcommand_router.permissions import PermissionTree


@runtime_checkable
class CommandSender(Protocol):
    """Anything that can issue a command and receive replies."""

    @property
    def name(self) -> str: ...

    @property
    def is_operator(self) -> bool: ...

    @property
    def is_player(self) -> bool: ...

    def has_permission(self, permission: str) -> bool: ...

    def send_message(self, text: str) -> None: ...


class ConsoleSender:
    """The host console: bypasses permissions, cannot run player-only commands."""

    def __init__(self, output: Optional[Callable[[str], None]] = None):
        self._output = output or print

    @property
    def name(self) -> str:
        return "CONSOLE"

    @property
    def is_operator(self) -> bool:
        return True

    @property
    def is_player(self) -> bool:
        return False

    def has_permission(self, permission: str) -> bool:
        return True

    def send_message(self, text: str) -> None:
        self._output(text)


class PlayerSender:
    """An interactive user holding explicit permission grants.

    Parameters
    ----------
    name : str
        Display name.
    permissions : iterable of str
        Granted permission strings. May include wildcards like "a.b.*".
    operator : bool
        Operators pass every permission check.
    tree : PermissionTree or None
        If given, grants are expanded through the tree's implied children.
    output : callable or None
        Where send_message() writes. Defaults to print().
    """

    def __init__(
        self,
        name: str,
        permissions: Iterable[str] = (),
        operator: bool = False,
        tree: Optional[PermissionTree] = None,
        output: Optional[Callable[[str], None]] = None,
    ):
        self._name = name
        self.permissions = set(permissions)
        self.operator = operator
        self._tree = tree
        self._output = output or print

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_operator(self) -> bool:
        return self.operator

    @property
    def is_player(self) -> bool:
        return True

    def has_permission(self, permission: str) -> bool:
        if self._tree is None:
            return permission in self.permissions
        return self._tree.implies(self.permissions, permission)

    def send_message(self, text: str) -> None:
        self._output(text)

    def __repr__(self) -> str:
        return f"PlayerSender({self._name!r}, operator={self.operator})"

"""
Help Listing (/<parent> help)
=============================

Lists every sub-command registered under a parent, one usage line plus
description per command, split into pages.

    /team help        →  page 1
    /team ? 2         →  page 2 (alias)

Console senders get the whole list on a single page, including
commands they could not run. Players get commands_per_page lines per
page, and commands they are not permitted to use are hidden when
hide_unpermitted is set. Commands the viewer cannot use are rendered
in the "no permission" style.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, Sequence, TypeVar

from subcommand_router.command import NEW_LINE, Command
from subcommand_router.formatting import CommandError, MessageFormatter
from subcommand_router.registry import CommandRegistry
from subcommand_router.senders import CommandSender

T = TypeVar("T")

PAGE_PLACEHOLDER = "%page%"
ERROR_PAGE_OUT_OF_BOUNDS = "Page must be between 1 and {total}"


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a paginated list (first page = 1)."""
    content: list[T]
    page: int
    total_pages: int


def paginate(items: Sequence[T], page_size: int, page: int) -> Page[T]:
    """Slice out one page of items.

    page_size <= 0 puts everything on a single page. A page outside
    1..total_pages yields empty content.
    """
    if page_size <= 0:
        page_size = max(len(items), 1)

    total_pages = len(items) // page_size + (1 if len(items) % page_size else 0)
    start = (page - 1) * page_size

    if page < 1 or start >= len(items):
        return Page(content=[], page=page, total_pages=total_pages)

    return Page(content=list(items[start:start + page_size]), page=page, total_pages=total_pages)


class HelpCommand(Command):
    """Paged list of the sub-commands under a parent.

    Parameters
    ----------
    registry : CommandRegistry
        Read live on every call, so commands registered after the help
        command still show up.
    parent : str
        Parent command to list.
    header : str or None
        Optional first line; "%page%" is replaced with "page/total".
    show_aliases : bool
        Append ",alias" entries to each usage line.
    commands_per_page : int
        Page size for players. Console always gets one page.
    hide_unpermitted : bool
        Hide commands players are not permitted to use.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        parent: str,
        header: Optional[str] = None,
        show_aliases: bool = True,
        commands_per_page: int = 9,
        hide_unpermitted: bool = True,
        formatter: Optional[MessageFormatter] = None,
    ):
        super().__init__(parent, "help", formatter)
        self.add_alias("?")
        self.args_usage = "[page=1]"
        self.add_args_alternative("1")
        self.set_arg_bounds(0, 1)
        self.player_only = False
        self.description = "Shows a list of all the commands"

        self._registry = registry
        self._header = header
        self._show_aliases = show_aliases
        self._commands_per_page = commands_per_page
        self._hide_unpermitted = hide_unpermitted

    def execute(self, sender: CommandSender, args: list[str]) -> str:
        page_input = args[0] if args else "1"
        try:
            page = int(page_input)
        except ValueError:
            return self.error_message_with_usage(CommandError.NOT_A_NUMBER, page_input)

        per_page = self._commands_per_page if sender.is_player else -1

        commands = self._registry.list(self.parent)
        if self._hide_unpermitted and sender.is_player:
            commands = [c for c in commands if c.is_permitted(sender)]

        result = paginate(commands, per_page, page)
        if not 1 <= page <= result.total_pages:
            return self.error_message(ERROR_PAGE_OUT_OF_BOUNDS.format(total=result.total_pages))

        return self.format_page(sender, result)

    def format_page(self, viewer: CommandSender, page: Page[Command]) -> str:
        header = self.list_header(page.page, page.total_pages)
        content = NEW_LINE.join(
            f"{c.usage(viewer, self._show_aliases)} {c.styled_description()}"
            for c in page.content
        )
        footer = self.list_footer()

        message = "" if viewer.is_player else NEW_LINE
        if header:
            message += header + NEW_LINE
        message += content
        if footer:
            message += NEW_LINE + footer
        return message

    def list_header(self, page: int, total_pages: int) -> str:
        if self._header is None:
            return ""
        return self._header.replace(PAGE_PLACEHOLDER, f"{page}/{total_pages}")

    def list_footer(self) -> str:
        return ""

"""
Team Commands (/team ...)
=========================

A small feature module built on the router: named, colored teams that
players can join and leave. It exists to exercise every part of the
command contract the way a real feature module would.

Commands
--------
    /team create <name> <color>     create a team            (teams.command.create)
    /team delete <team> [confirm]   delete a team            (teams.command.delete)
    /team join <team>               join a team, players only (teams.command.join)
    /team leave                     leave your team, only shown while on one
    /team list                      list teams and members
    /team color <team> <color>      recolor a team           (teams.command.color)
    /team rename <team> <new-name>  rename a team            (teams.command.rename)
    /team kick <team> <player>      remove a member          (teams.admin.kick)

Completion
----------
    %team%    current team names
    %color%   the COLORS palette
    %player%  every player currently on a team
    %*%       free-form input (new team names), never suggested

So "/team create Red " completes colors, "/team delete " completes
team names and then "confirm".

Name Rules
----------
Team names are 1-16 characters of letters, digits and underscores and
are unique case-insensitively. Anything else is ILLEGAL_CHARACTERS.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from subcommand_router.command import Command, CommandUsageError
from subcommand_router.dispatcher import CommandDispatcher
from subcommand_router.formatting import CommandError
from subcommand_router.senders import CommandSender

PARENT = "team"

COLORS = (
    "red", "blue", "green", "yellow", "aqua",
    "purple", "gold", "gray", "white", "black",
)

_TEAM_NAME_PATTERN = re.compile(r'^[A-Za-z0-9_]{1,16}$')


# ─── Domain Model ───────────────────────────────────────────────────

@dataclass
class Team:
    """A named, colored group of players."""
    name: str
    color: str
    members: list[str] = field(default_factory=list)


class TeamRoster:
    """In-memory store of teams, looked up case-insensitively."""

    def __init__(self):
        self._teams: dict[str, Team] = {}

    def teams(self) -> list[Team]:
        return list(self._teams.values())

    def players(self) -> list[str]:
        return [member for team in self._teams.values() for member in team.members]

    def get(self, name: str) -> Optional[Team]:
        return self._teams.get(name.lower())

    def create(self, name: str, color: str) -> Team:
        if name.lower() in self._teams:
            raise ValueError(f"A team named {name} already exists")
        team = Team(name=name, color=color)
        self._teams[name.lower()] = team
        return team

    def delete(self, name: str) -> Team:
        return self._teams.pop(name.lower())

    def rename(self, team: Team, new_name: str) -> None:
        if new_name.lower() in self._teams and new_name.lower() != team.name.lower():
            raise ValueError(f"A team named {new_name} already exists")
        del self._teams[team.name.lower()]
        team.name = new_name
        self._teams[new_name.lower()] = team

    def team_of(self, player: str) -> Optional[Team]:
        for team in self._teams.values():
            if player in team.members:
                return team
        return None

    def join(self, player: str, team: Team) -> None:
        current = self.team_of(player)
        if current is not None:
            current.members.remove(player)
        team.members.append(player)

    def leave(self, player: str) -> Optional[Team]:
        team = self.team_of(player)
        if team is not None:
            team.members.remove(player)
        return team


def is_valid_team_name(name: str) -> bool:
    return _TEAM_NAME_PATTERN.match(name) is not None


# ─── Commands ───────────────────────────────────────────────────────

class _TeamCommand(Command):
    """Shared plumbing: the roster and team lookup."""

    def __init__(self, roster: TeamRoster, name: str, parent: str = PARENT):
        super().__init__(parent, name)
        self._roster = roster

    def _require_team(self, name: str) -> Team:
        team = self._roster.get(name)
        if team is None:
            raise CommandUsageError(f"No team named {name}")
        return team


class CreateTeamCommand(_TeamCommand):

    def __init__(self, roster: TeamRoster, parent: str = PARENT):
        super().__init__(roster, "create", parent)
        self.add_alias("new")
        self.args_usage = "<name> <color>"
        self.add_args_alternative("%*% %color%")
        self.set_arg_bounds(2, 2)
        self.permission = "teams.command.create"
        self.description = "Creates a new team"

    def execute(self, sender: CommandSender, args: list[str]) -> Optional[str]:
        name, color = args[0], args[1].lower()

        if not is_valid_team_name(name):
            return self.error_message(CommandError.ILLEGAL_CHARACTERS, name)
        if color not in COLORS:
            return self.error_message_with_usage(CommandError.NOT_A_COLOR, args[1])
        if self._roster.get(name) is not None:
            return self.error_message(f"A team named {name} already exists")

        self._roster.create(name, color)
        return self.success_message(f"Team {name} created")


class DeleteTeamCommand(_TeamCommand):

    def __init__(self, roster: TeamRoster, parent: str = PARENT):
        super().__init__(roster, "delete", parent)
        self.add_alias("remove")
        self.args_usage = "<team> [confirm]"
        self.add_args_alternative("%team%")
        self.add_args_alternative("%team% confirm")
        self.set_arg_bounds(1, 2)
        self.permission = "teams.command.delete"
        self.description = "Deletes a team"

    def execute(self, sender: CommandSender, args: list[str]) -> Optional[str]:
        team = self._require_team(args[0])

        if len(args) < 2:
            return self.error_message(
                f"Type /{self.parent} {self.name} {team.name} confirm to delete it"
            )
        if args[1].lower() != "confirm":
            return self.error_message_with_usage(CommandError.INVALID_ARGUMENT, args[1])

        self._roster.delete(team.name)
        return self.success_message(f"Team {team.name} deleted")


class JoinTeamCommand(_TeamCommand):

    def __init__(self, roster: TeamRoster, parent: str = PARENT):
        super().__init__(roster, "join", parent)
        self.args_usage = "<team>"
        self.add_args_alternative("%team%")
        self.set_arg_bounds(1, 1)
        self.player_only = True
        self.permission = "teams.command.join"
        self.description = "Joins a team"

    def execute(self, sender: CommandSender, args: list[str]) -> Optional[str]:
        team = self._require_team(args[0])
        if sender.name in team.members:
            return self.error_message(f"You are already on team {team.name}")

        self._roster.join(sender.name, team)
        return self.success_message(f"You joined team {team.name}")


class LeaveTeamCommand(_TeamCommand):
    """Only available while the sender is on a team."""

    def __init__(self, roster: TeamRoster, parent: str = PARENT):
        super().__init__(roster, "leave", parent)
        self.player_only = True
        self.description = "Leaves your team"

    def is_permitted(self, sender: CommandSender) -> bool:
        return super().is_permitted(sender) and self._roster.team_of(sender.name) is not None

    def execute(self, sender: CommandSender, args: list[str]) -> Optional[str]:
        team = self._roster.leave(sender.name)
        return self.success_message(f"You left team {team.name}")


class ColorCommand(_TeamCommand):

    def __init__(self, roster: TeamRoster, parent: str = PARENT):
        super().__init__(roster, "color", parent)
        self.add_alias("colour")
        self.args_usage = "<team> <color>"
        self.add_args_alternative("%team% %color%")
        self.set_arg_bounds(2, 2)
        self.permission = "teams.command.color"
        self.description = "Changes the color of a team"

    def execute(self, sender: CommandSender, args: list[str]) -> Optional[str]:
        team = self._require_team(args[0])
        color = args[1].lower()
        if color not in COLORS:
            return self.error_message_with_usage(CommandError.NOT_A_COLOR, args[1])

        team.color = color
        return self.success_message(f"Team {team.name} is now {color}")


class RenameCommand(_TeamCommand):

    def __init__(self, roster: TeamRoster, parent: str = PARENT):
        super().__init__(roster, "rename", parent)
        self.add_alias("rn")
        self.args_usage = "<team> <new-name>"
        self.add_args_alternative("%team% %*%")
        self.set_arg_bounds(2, 2)
        self.permission = "teams.command.rename"
        self.description = "Renames a team"

    def execute(self, sender: CommandSender, args: list[str]) -> Optional[str]:
        team = self._require_team(args[0])
        new_name = args[1]

        if not is_valid_team_name(new_name):
            return self.error_message(CommandError.ILLEGAL_CHARACTERS, new_name)
        old_name = team.name
        if new_name == old_name:
            raise CommandUsageError("The new name must differ from the current one")
        try:
            self._roster.rename(team, new_name)
        except ValueError as e:
            return self.error_message(str(e))

        return self.success_message(f"Team {old_name} renamed to {new_name}")


class KickCommand(_TeamCommand):

    def __init__(self, roster: TeamRoster, parent: str = PARENT):
        super().__init__(roster, "kick", parent)
        self.args_usage = "<team> <player>"
        self.add_args_alternative("%team% %player%")
        self.set_arg_bounds(2, 2)
        self.permission = "teams.admin.kick"
        self.description = "Removes a player from a team"

    def execute(self, sender: CommandSender, args: list[str]) -> Optional[str]:
        team = self._require_team(args[0])
        player = args[1]
        if player not in team.members:
            return self.error_message(CommandError.INVALID_ARGUMENT, player)

        team.members.remove(player)
        return self.success_message(f"{player} was removed from team {team.name}")


# ─── Wiring ─────────────────────────────────────────────────────────

def install_team_commands(dispatcher: CommandDispatcher, roster: TeamRoster,
                          parent: str = PARENT) -> None:
    """Register the team placeholders and commands on a dispatcher."""
    dispatcher.register_placeholder("%team%", roster.teams, lambda team: team.name)
    dispatcher.register_placeholder("%color%", lambda: COLORS)
    dispatcher.register_placeholder("%player%", roster.players)

    for command_type in (
        CreateTeamCommand,
        DeleteTeamCommand,
        JoinTeamCommand,
        LeaveTeamCommand,
        ColorCommand,
        RenameCommand,
        KickCommand,
    ):
        dispatcher.register(command_type(roster, parent))

    @dispatcher.command(parent, "list", aliases=["ls"], max_args=0,
                        description="Lists all teams and their members")
    def list_teams(sender: CommandSender, args: list[str]) -> str:
        teams = roster.teams()
        if not teams:
            return "There are no teams yet"
        lines = []
        for team in teams:
            members = ", ".join(team.members) if team.members else "-"
            lines.append(f"{team.name} ({team.color}): {members}")
        return "\n".join(lines)

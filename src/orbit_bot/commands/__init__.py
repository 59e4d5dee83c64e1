"""gh> command grammars, routing and execution."""

from orbit_bot.commands.executors import CommandContext, CommandExecutors, delete_last_message
from orbit_bot.commands.grammars import match_delete_last_message
from orbit_bot.commands.router import CommandRouter

__all__ = [
    "CommandContext",
    "CommandExecutors",
    "CommandRouter",
    "delete_last_message",
    "match_delete_last_message",
]

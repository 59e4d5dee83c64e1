"""Slack ingress and egress: client, chat port, placeholder, feedback."""

from orbit_bot.slack.chat import SlackChatPort
from orbit_bot.slack.client import get_slack_client, reset_client
from orbit_bot.slack.placeholder import ThinkingPlaceholder, thinking_placeholder

__all__ = [
    "SlackChatPort",
    "ThinkingPlaceholder",
    "get_slack_client",
    "reset_client",
    "thinking_placeholder",
]

"""Command routing: prefix check, grammar priority list, executor dispatch.

Grammars are tried in a fixed order (release -> review pr -> analyze issue
-> api); the first structural match wins, and text matching none of them
becomes Unrecognized. Any prefix-bearing message is consumed here, so it
never reaches the conversational path.
"""

import logging
from collections.abc import Awaitable, Callable
from functools import partial

from orbit_bot.commands.executors import CommandContext, CommandExecutors, report
from orbit_bot.commands.grammars import (
    has_prefix,
    match_generic_api,
    match_issue_analysis,
    match_pr_review,
    match_release,
)
from orbit_bot.config import Settings
from orbit_bot.conversation.threads import ThreadCreator
from orbit_bot.conversation.workspaces import WorkspaceResolver
from orbit_bot.github.client import GitHubClient
from orbit_bot.models.commands import CommandMatch, IssueAnalysis, MalformedCommand, Unrecognized
from orbit_bot.models.outcome import StageOutcome
from orbit_bot.models.slack import InboundEvent
from orbit_bot.slack.placeholder import ChatPort, ThinkingPlaceholder
from orbit_bot.store.mappings import ThreadMappingStore

logger = logging.getLogger(__name__)

Matcher = Callable[[str], CommandMatch | None]
Executor = Callable[[CommandMatch, CommandContext], Awaitable[StageOutcome]]


class ThreadSetupError(RuntimeError):
    """Workspace or LLM thread could not be prepared for a command."""


class CommandRouter:
    """Matches prefix-bearing messages to command executors."""

    def __init__(
        self,
        settings: Settings,
        executors: CommandExecutors,
        store: ThreadMappingStore,
        backend: ThreadCreator,
        resolver: WorkspaceResolver,
    ) -> None:
        self._settings = settings
        self._executors = executors
        self._store = store
        self._backend = backend
        self._resolver = resolver
        prefix = settings.command_prefix
        self._routes: list[tuple[Matcher, Executor]] = [
            (partial(match_release, prefix=prefix), executors.release),
            (partial(match_pr_review, prefix=prefix), executors.pr_review),
            (
                partial(
                    match_issue_analysis,
                    prefix=prefix,
                    default_owner=settings.github_owner,
                    default_repo=settings.github_default_repo,
                ),
                self._issue_analysis,
            ),
            (partial(match_generic_api, prefix=prefix), executors.generic_api),
        ]

    async def dispatch(
        self,
        text: str,
        event: InboundEvent,
        chat: ChatPort,
        github: GitHubClient | None,
        placeholder: ThinkingPlaceholder,
    ) -> StageOutcome:
        prefix = self._settings.command_prefix
        if not has_prefix(text, prefix):
            return StageOutcome.not_handled()

        if github is None:
            logger.warning("Rejecting '%s' command: GitHub integration not configured", prefix)
            await placeholder.finish("❌ GitHub commands disabled (GITHUB_TOKEN not configured).")
            return StageOutcome.handled()

        ctx = CommandContext(event=event, chat=chat, github=github, placeholder=placeholder)
        match, executor = self.match(text)

        if isinstance(match, Unrecognized):
            logger.warning("Unknown command starting with '%s': %s", prefix, match.text)
            await report(
                ctx,
                f"❓ Unknown command. Try `{prefix} release ...`, `{prefix} review ...`, "
                f"`{prefix} analyze ...`, or `{prefix} api ...`.",
            )
            return StageOutcome.handled()
        if isinstance(match, MalformedCommand):
            logger.warning("Malformed '%s' command: %s", match.command, text)
            await report(ctx, f"❌ Invalid format. Use: {match.usage}")
            return StageOutcome.handled()

        logger.info("Matched command %s", type(match).__name__)
        return await executor(match, ctx)

    def match(self, text: str) -> tuple[CommandMatch, Executor | None]:
        """First grammar match for prefix-bearing ``text``, or Unrecognized with no executor."""
        for matcher, executor in self._routes:
            match = matcher(text)
            if match is not None:
                return match, executor
        return Unrecognized(text=text), None

    async def _issue_analysis(self, cmd: IssueAnalysis, ctx: CommandContext) -> StageOutcome:
        """Resolve workspace and thread context, then run the issue analysis."""
        try:
            workspace_slug, thread_slug = await self._issue_context(cmd, ctx.event)
        except Exception as exc:
            logger.error("Context/thread setup failed for issue analysis", exc_info=True)
            await report(ctx, f"❌ Error setting up context for issue analysis: {exc}")
            return StageOutcome.error(str(exc))
        return await self._executors.issue_analysis(cmd, ctx, workspace_slug, thread_slug)

    async def _issue_context(self, cmd: IssueAnalysis, event: InboundEvent) -> tuple[str, str]:
        """Pick the workspace/thread for an issue analysis.

        An explicit workspace in the command wins over the mapped one. The
        mapped thread is only reused when its workspace is the one chosen.
        Without a mapping or explicit workspace the resolver decides.
        """
        mapping = await self._store.get(event.channel_id, event.reply_target)
        thread_slug: str | None = None

        if mapping:
            workspace_slug = cmd.explicit_workspace or mapping.workspace_slug
            if workspace_slug == mapping.workspace_slug:
                thread_slug = mapping.thread_slug
        elif cmd.explicit_workspace:
            workspace_slug = cmd.explicit_workspace
        else:
            workspace_slug = await self._resolver.resolve(
                "", None, event.sender_id, event.channel_id
            )
            if not workspace_slug:
                raise ThreadSetupError("Could not determine target workspace for issue analysis.")

        logger.info(
            "Issue analysis context: workspace=%s thread=%s (explicit=%s, mapped=%s)",
            workspace_slug,
            thread_slug,
            cmd.explicit_workspace,
            mapping.workspace_slug if mapping else None,
        )

        if not thread_slug:
            thread_slug = await self._backend.create_thread(workspace_slug)
            await self._store.put(event.channel_id, event.reply_target, workspace_slug, thread_slug)
        return workspace_slug, thread_slug

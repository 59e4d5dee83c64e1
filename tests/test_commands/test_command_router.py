"""Tests for command dispatch and issue-analysis context selection."""

from unittest.mock import AsyncMock

import pytest

from orbit_bot.commands.router import CommandRouter
from orbit_bot.config import Settings
from orbit_bot.conversation.workspaces import WorkspaceCatalog, WorkspaceResolver
from orbit_bot.models.commands import GenericApi, IssueAnalysis, ReleaseInfo, Unrecognized
from orbit_bot.models.conversation import ThreadMapping
from orbit_bot.models.outcome import OutcomeStatus, StageOutcome
from orbit_bot.models.slack import InboundEvent
from orbit_bot.slack.placeholder import ThinkingPlaceholder
from orbit_bot.store.mappings import InMemoryThreadMappingStore

EVENT = InboundEvent(
    sender_id="U_HUMAN",
    raw_text="",
    channel_id="C1",
    event_ts="1700000000.000100",
    thread_ts="1699.1",
)


@pytest.fixture()
def executors() -> AsyncMock:
    mock = AsyncMock()
    for name in ("release", "pr_review", "issue_analysis", "generic_api"):
        getattr(mock, name).return_value = StageOutcome.handled()
    return mock


@pytest.fixture()
def store() -> InMemoryThreadMappingStore:
    return InMemoryThreadMappingStore(ttl_seconds=60)


@pytest.fixture()
def backend() -> AsyncMock:
    mock = AsyncMock()
    mock.create_thread.return_value = "t-new"
    return mock


def _router(settings: Settings, executors, store, backend) -> CommandRouter:
    lister = AsyncMock()
    lister.list_workspaces.return_value = ["general", "docs", "support"]
    resolver = WorkspaceResolver(settings, WorkspaceCatalog(lister))
    return CommandRouter(settings, executors, store, backend, resolver)


@pytest.fixture()
def router(settings, executors, store, backend) -> CommandRouter:
    return _router(settings, executors, store, backend)


async def _dispatch(router: CommandRouter, text: str, chat: AsyncMock, github=None):
    placeholder = ThinkingPlaceholder(chat, "C1", "P1")
    outcome = await router.dispatch(text, EVENT, chat, github or AsyncMock(), placeholder)
    return outcome, placeholder


async def test_text_without_prefix_not_handled(router, chat, executors):
    outcome, placeholder = await _dispatch(router, "how do I export?", chat)

    assert outcome.status is OutcomeStatus.NOT_HANDLED
    assert placeholder.active
    executors.release.assert_not_awaited()


async def test_github_missing_rejects_command(router, chat, executors):
    placeholder = ThinkingPlaceholder(chat, "C1", "P1")

    outcome = await router.dispatch("gh> release foo", EVENT, chat, None, placeholder)

    assert outcome.consumed
    chat.update_message.assert_awaited_once_with(
        "C1", "P1", "❌ GitHub commands disabled (GITHUB_TOKEN not configured).", None
    )
    executors.release.assert_not_awaited()


async def test_release_dispatched(router, chat, executors):
    outcome, _ = await _dispatch(router, "gh> release gravityforms/gravityforms", chat)

    assert outcome.consumed
    cmd = executors.release.await_args.args[0]
    assert cmd == ReleaseInfo(repo_id="gravityforms/gravityforms")


async def test_api_query_mentioning_release_goes_to_api(router, chat, executors):
    await _dispatch(router, "gh> api latest release of backlog", chat)

    executors.release.assert_not_awaited()
    assert executors.generic_api.await_args.args[0] == GenericApi(query="latest release of backlog")


async def test_malformed_command_gets_usage_hint(router, chat, executors):
    outcome, _ = await _dispatch(router, "gh> review pr a/b#0 #ws", chat)

    assert outcome.consumed
    text = chat.update_message.await_args.args[2]
    assert text.startswith("❌ Invalid format. Use: `gh> review pr")
    executors.pr_review.assert_not_awaited()


async def test_unknown_command(router, chat):
    outcome, placeholder = await _dispatch(router, "gh> deploy prod", chat)

    assert outcome.status is OutcomeStatus.HANDLED
    assert not placeholder.active
    assert chat.update_message.await_args.args[2].startswith("❓ Unknown command.")


def test_match_without_grammar_is_unrecognized(router, executors):
    assert router.match("gh> deploy prod") == (Unrecognized(text="gh> deploy prod"), None)
    assert router.match("gh> release foo") == (ReleaseInfo(repo_id="foo"), executors.release)


# -- Issue analysis context --


async def test_issue_reuses_mapped_thread(router, chat, executors, store, backend):
    await store.put("C1", "1699.1", "docs", "t-1")

    await _dispatch(router, "gh> analyze issue #12", chat)

    backend.create_thread.assert_not_awaited()
    cmd, _, workspace, thread = executors.issue_analysis.await_args.args
    assert cmd == IssueAnalysis(owner="gravityforms", repo="backlog", issue_number=12)
    assert (workspace, thread) == ("docs", "t-1")


async def test_issue_explicit_same_workspace_reuses_thread(router, chat, executors, store, backend):
    await store.put("C1", "1699.1", "docs", "t-1")

    await _dispatch(router, "gh> analyze issue #12 #docs", chat)

    backend.create_thread.assert_not_awaited()
    assert executors.issue_analysis.await_args.args[2:] == ("docs", "t-1")


async def test_issue_explicit_workspace_overrides_mapping(router, chat, executors, store, backend):
    await store.put("C1", "1699.1", "docs", "t-1")

    await _dispatch(router, "gh> analyze issue #12 #support", chat)

    backend.create_thread.assert_awaited_once_with("support")
    assert executors.issue_analysis.await_args.args[2:] == ("support", "t-new")
    assert await store.get("C1", "1699.1") == ThreadMapping(workspace_slug="support", thread_slug="t-new")


async def test_issue_unmapped_uses_explicit_workspace(router, chat, executors, backend):
    await _dispatch(router, "gh> analyze issue acme/site#3 #support", chat)

    backend.create_thread.assert_awaited_once_with("support")
    assert executors.issue_analysis.await_args.args[2:] == ("support", "t-new")


async def test_issue_unmapped_resolves_default_workspace(router, chat, executors, backend):
    await _dispatch(router, "gh> analyze issue #3", chat)

    backend.create_thread.assert_awaited_once_with("general")
    assert executors.issue_analysis.await_args.args[2:] == ("general", "t-new")


async def test_issue_without_workspace_reports_error(settings, chat, executors, store, backend):
    router = _router(
        settings.model_copy(update={"fallback_workspace_slug": ""}), executors, store, backend
    )

    outcome, _ = await _dispatch(router, "gh> analyze issue #3", chat)

    assert outcome.status is OutcomeStatus.ERROR
    executors.issue_analysis.assert_not_awaited()
    assert chat.update_message.await_args.args[2].startswith(
        "❌ Error setting up context for issue analysis:"
    )


async def test_issue_thread_creation_failure_reports_error(router, chat, executors, backend):
    backend.create_thread.side_effect = RuntimeError("backend down")

    await _dispatch(router, "gh> analyze issue #3 #docs", chat)

    executors.issue_analysis.assert_not_awaited()
    assert chat.update_message.await_args.args[2].endswith("backend down")

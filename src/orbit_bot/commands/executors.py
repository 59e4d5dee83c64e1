"""Executors for the gh> commands and #delete_last_message.

Each executor reports its own result to the user (by finishing the thinking
placeholder or posting a segmented reply). The outcome is handled, or an
error carrying the reason when a downstream call failed. Failures are logged
and shown to the user; they never fall through to the conversational path.
"""

import asyncio
import json
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx
from pydantic import BaseModel, ValidationError
from slack_sdk.errors import SlackApiError

from orbit_bot.config import Settings
from orbit_bot.conversation.replies import post_reply
from orbit_bot.github.client import GitHubClient
from orbit_bot.llm.anythingllm import AnythingLLMClient
from orbit_bot.llm.prompts import (
    RESPONSE_FORMAT_INSTRUCTION,
    build_api_format_prompt,
    build_api_plan_prompt,
    build_issue_prompt,
    build_pr_review_prompt,
)
from orbit_bot.models.commands import GenericApi, IssueAnalysis, PrReview, ReleaseInfo
from orbit_bot.models.outcome import StageOutcome
from orbit_bot.models.slack import InboundEvent
from orbit_bot.slack.placeholder import ChatPort, ThinkingPlaceholder
from orbit_bot.store.mappings import ThreadMappingStore

logger = logging.getLogger(__name__)

_RELEASE_BODY_LIMIT = 1500
_JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


class ApiPlanError(RuntimeError):
    """The LLM did not produce a usable GitHub API call plan."""


class ApiPlan(BaseModel):
    """A single read-only GitHub REST call proposed by the LLM."""

    endpoint: str
    params: dict[str, str | int] = {}


@dataclass
class CommandContext:
    """Per-message state shared by the command executors."""

    event: InboundEvent
    chat: ChatPort
    github: GitHubClient
    placeholder: ThinkingPlaceholder

    @property
    def channel_id(self) -> str:
        return self.event.channel_id

    @property
    def reply_target(self) -> str:
        return self.event.reply_target


async def report(ctx: CommandContext, text: str) -> None:
    """Show ``text`` in the placeholder, or as a new message if it is already gone."""
    if await ctx.placeholder.finish(text):
        return
    try:
        await ctx.chat.post_message(ctx.channel_id, ctx.reply_target, text)
    except SlackApiError:
        logger.error("Failed to post command result", exc_info=True)


def split_repo_id(repo_id: str, default_owner: str) -> tuple[str, str]:
    """'owner/repo' -> (owner, repo); bare 'repo' -> (default_owner, repo)."""
    if "/" in repo_id:
        owner, repo = repo_id.split("/", 1)
        return owner, repo
    return default_owner, repo_id


def format_release(owner: str, repo: str, release: dict) -> str:
    """Slack mrkdwn summary of a GitHub release."""
    tag = release.get("tag_name", "?")
    name = release.get("name") or tag
    published = (release.get("published_at") or "")[:10] or "unpublished"
    body = (release.get("body") or "").strip()
    if len(body) > _RELEASE_BODY_LIMIT:
        body = body[:_RELEASE_BODY_LIMIT] + "..."

    lines = [f":rocket: *{name}* (`{tag}`) in `{owner}/{repo}`", f"Published: {published}"]
    if body:
        lines.append(body)
    if release.get("html_url"):
        lines.append(f"<{release['html_url']}|View release on GitHub>")
    return "\n".join(lines)


def parse_api_plan(reply: str) -> ApiPlan:
    """Extract the JSON call plan from an LLM reply and check it is a safe GET path."""
    match = _JSON_OBJECT_PATTERN.search(reply)
    if not match:
        raise ApiPlanError("The GitHub workspace did not return an API call plan.")
    try:
        plan = ApiPlan.model_validate_json(match.group(0))
    except ValidationError as exc:
        raise ApiPlanError(f"Unusable API call plan: {exc.error_count()} validation error(s).") from exc
    if not plan.endpoint.startswith("/") or "://" in plan.endpoint:
        raise ApiPlanError(f"Refusing to call non-relative endpoint: {plan.endpoint}")
    return plan


async def delete_last_message(
    chat: ChatPort, event: InboundEvent, bot_user_id: str
) -> StageOutcome:
    """Delete the bot's most recent message in this conversation."""
    try:
        messages = await chat.recent_messages(event.channel_id, event.thread_ts)
        own = [
            m
            for m in messages
            if (bot_user_id and m.get("user") == bot_user_id) or (not bot_user_id and m.get("bot_id"))
        ]
        if not own:
            await chat.post_message(
                event.channel_id, event.reply_target, "🤷 I couldn't find a recent message of mine to delete."
            )
            return StageOutcome.handled()

        target = max(own, key=lambda m: float(m.get("ts", "0")))
        await chat.delete_message(event.channel_id, target["ts"])
        logger.info("Deleted bot message %s in %s", target["ts"], event.channel_id)
    except SlackApiError as exc:
        logger.error("Failed to delete last message in %s", event.channel_id, exc_info=True)
        try:
            await chat.post_message(
                event.channel_id, event.reply_target, f"❌ Could not delete the message: {exc.response.get('error', exc)}"
            )
        except SlackApiError:
            logger.error("Failed to report delete failure", exc_info=True)
        return StageOutcome.error(str(exc.response.get("error", exc)))
    return StageOutcome.handled()


class CommandExecutors:
    """Runs matched gh> commands against GitHub and the LLM backend."""

    def __init__(
        self,
        settings: Settings,
        backend: AnythingLLMClient,
        store: ThreadMappingStore,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._backend = backend
        self._store = store
        self._sleep = sleep

    async def _post_reply(self, ctx: CommandContext, reply: str) -> StageOutcome:
        try:
            await ctx.placeholder.discard()
            await post_reply(
                ctx.chat,
                ctx.channel_id,
                ctx.reply_target,
                reply,
                delay_seconds=self._settings.segment_post_delay_seconds,
                sleep=self._sleep,
            )
        except Exception as exc:
            logger.error("Failed to post command reply", exc_info=True)
            await report(ctx, f"❌ Error posting reply: {exc}")
            return StageOutcome.error(str(exc))
        return StageOutcome.handled()

    async def release(self, cmd: ReleaseInfo, ctx: CommandContext) -> StageOutcome:
        owner, repo = split_repo_id(cmd.repo_id, self._settings.github_owner)
        try:
            release = await ctx.github.get_latest_release(owner, repo)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                await report(ctx, f"ℹ️ No published releases found for `{owner}/{repo}`.")
                return StageOutcome.handled()
            logger.error("GitHub error fetching release for %s/%s", owner, repo, exc_info=True)
            await report(ctx, f"❌ GitHub error fetching release for `{owner}/{repo}`: {exc.response.status_code}")
            return StageOutcome.error(f"GitHub returned {exc.response.status_code}")
        except httpx.HTTPError as exc:
            logger.error("Release lookup failed for %s/%s", owner, repo, exc_info=True)
            await report(ctx, f"❌ Error fetching release for `{owner}/{repo}`: {exc}")
            return StageOutcome.error(str(exc))

        await report(ctx, format_release(owner, repo, release))
        return StageOutcome.handled()

    async def pr_review(self, cmd: PrReview, ctx: CommandContext) -> StageOutcome:
        label = f"{cmd.owner}/{cmd.repo}#{cmd.pr_number}"
        await ctx.placeholder.set_status(f":mag: Reviewing PR `{label}` in workspace `{cmd.workspace_slug}`...")
        try:
            pr = await ctx.github.get_pull_request(cmd.owner, cmd.repo, cmd.pr_number)
            diff = await ctx.github.get_pull_request_diff(cmd.owner, cmd.repo, cmd.pr_number)

            # A review starts a fresh LLM thread; follow-ups in this Slack thread continue it
            thread_slug = await self._backend.create_thread(cmd.workspace_slug)
            await self._store.put(ctx.channel_id, ctx.reply_target, cmd.workspace_slug, thread_slug)

            prompt = build_pr_review_prompt(pr, diff) + RESPONSE_FORMAT_INSTRUCTION
            reply = await self._backend.query(cmd.workspace_slug, thread_slug, prompt)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                await report(ctx, f"❌ PR `{label}` not found (or workspace `{cmd.workspace_slug}` does not exist).")
            else:
                logger.error("HTTP error reviewing %s", label, exc_info=True)
                await report(ctx, f"❌ Error reviewing PR `{label}`: {exc.response.status_code}")
            return StageOutcome.error(f"GitHub or LLM returned {exc.response.status_code}")
        except Exception as exc:
            logger.error("PR review failed for %s", label, exc_info=True)
            await report(ctx, f"❌ Error reviewing PR `{label}`: {exc}")
            return StageOutcome.error(str(exc))

        return await self._post_reply(ctx, reply)

    async def issue_analysis(
        self,
        cmd: IssueAnalysis,
        ctx: CommandContext,
        workspace_slug: str,
        thread_slug: str,
    ) -> StageOutcome:
        label = f"{cmd.owner}/{cmd.repo}#{cmd.issue_number}"
        await ctx.placeholder.set_status(f":mag: Analyzing issue `{label}` in workspace `{workspace_slug}`...")
        try:
            issue = await ctx.github.get_issue(cmd.owner, cmd.repo, cmd.issue_number)
            comments = await ctx.github.get_issue_comments(cmd.owner, cmd.repo, cmd.issue_number)
            prompt = build_issue_prompt(issue, comments, cmd.user_prompt) + RESPONSE_FORMAT_INSTRUCTION
            reply = await self._backend.query(workspace_slug, thread_slug, prompt)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                await report(ctx, f"❌ Issue `{label}` not found.")
            else:
                logger.error("HTTP error analyzing %s", label, exc_info=True)
                await report(ctx, f"❌ Error analyzing issue `{label}`: {exc.response.status_code}")
            return StageOutcome.error(f"GitHub or LLM returned {exc.response.status_code}")
        except Exception as exc:
            logger.error("Issue analysis failed for %s", label, exc_info=True)
            await report(ctx, f"❌ Error analyzing issue `{label}`: {exc}")
            return StageOutcome.error(str(exc))

        return await self._post_reply(ctx, reply)

    async def generic_api(self, cmd: GenericApi, ctx: CommandContext) -> StageOutcome:
        github_ws = self._settings.github_workspace_slug
        formatter_ws = self._settings.formatter_workspace_slug
        if not github_ws:
            await report(ctx, "❌ The `api` command is disabled (GITHUB_WORKSPACE_SLUG not configured).")
            return StageOutcome.handled()

        await ctx.placeholder.set_status(":satellite: Asking GitHub...")
        try:
            plan_reply = await self._backend.query(
                github_ws, None, build_api_plan_prompt(cmd.query, self._settings.github_owner)
            )
            plan = parse_api_plan(plan_reply)
            logger.info("Executing GitHub API plan: GET %s", plan.endpoint, extra={"params": plan.params})
            result = await ctx.github.get_json(plan.endpoint, plan.params)

            if formatter_ws:
                reply = await self._backend.query(formatter_ws, None, build_api_format_prompt(cmd.query, result))
            else:
                reply = f"```json\n{json.dumps(result, indent=2)[:3500]}\n```"
        except httpx.HTTPStatusError as exc:
            logger.error("GitHub API command failed", exc_info=True)
            await report(ctx, f"❌ GitHub API error: {exc.response.status_code} for `{exc.request.url.path}`")
            return StageOutcome.error(f"GitHub returned {exc.response.status_code}")
        except Exception as exc:
            logger.error("GitHub API command failed", exc_info=True)
            await report(ctx, f"❌ Error running API command: {exc}")
            return StageOutcome.error(str(exc))

        return await self._post_reply(ctx, reply)

"""Command grammars: pure functions from cleaned message text to a command match.

Every pattern is case-insensitive and anchored to the whole message (only
surrounding whitespace is tolerated). A matcher returns None when the text
does not match structurally, and MalformedCommand when it matches but the
captured values fail validation.
"""

import re
from functools import lru_cache

from pydantic import ValidationError

from orbit_bot.models.commands import (
    DeleteLastMessage,
    GenericApi,
    IssueAnalysis,
    MalformedCommand,
    PrReview,
    ReleaseInfo,
)

DELETE_LAST_MESSAGE_COMMAND = "#delete_last_message"

_RELEASE = r"^\s*{prefix}\s*release\s+(?P<repo_id>[\w.-]+(?:/[\w.-]+)?)\s*$"
_PR_REVIEW = (
    r"^\s*{prefix}\s*review\s+pr\s+(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+)#(?P<pr_number>\d+)"
    r"\s+#(?P<workspace_slug>[\w-]+)\s*$"
)
_ISSUE_ANALYSIS = (
    r"^\s*{prefix}\s*(?:analyze|summarize|explain)\s+issue\s+"
    r"(?:(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+))?#(?P<issue_number>\d+)"
    r"(?:\s*#(?P<workspace_slug>[\w-]+))?(?:\s+(?P<user_prompt>.+?))?\s*$"
)
_GENERIC_API = r"^\s*{prefix}\s*api\s+(?P<api_query>.+?)\s*$"


def usage_hint(command: str, prefix: str) -> str:
    """User-facing usage message for a command."""
    hints = {
        "release": f"`{prefix} release owner/repo`",
        "review pr": f"`{prefix} review pr owner/repo#number #workspace`",
        "analyze issue": f"`{prefix} analyze issue [#123 | owner/repo#123] [#optional-ws] [question]`",
        "api": f"`{prefix} api <what you want to know>`",
    }
    return hints[command]


@lru_cache(maxsize=32)
def _compile(template: str, prefix: str) -> re.Pattern:
    return re.compile(template.format(prefix=re.escape(prefix)), re.IGNORECASE | re.DOTALL)


def match_delete_last_message(text: str) -> DeleteLastMessage | None:
    """Only a leading `#delete_last_message` counts; it takes no prefix."""
    if text.lower().startswith(DELETE_LAST_MESSAGE_COMMAND):
        return DeleteLastMessage()
    return None


def has_prefix(text: str, prefix: str) -> bool:
    return text.lower().startswith(prefix.lower())


def match_release(text: str, prefix: str) -> ReleaseInfo | MalformedCommand | None:
    match = _compile(_RELEASE, prefix).match(text)
    if not match:
        return None
    try:
        return ReleaseInfo(repo_id=match["repo_id"])
    except ValidationError:
        return MalformedCommand(command="release", usage=usage_hint("release", prefix))


def match_pr_review(text: str, prefix: str) -> PrReview | MalformedCommand | None:
    match = _compile(_PR_REVIEW, prefix).match(text)
    if not match:
        return None
    try:
        return PrReview(
            owner=match["owner"],
            repo=match["repo"],
            pr_number=int(match["pr_number"]),
            workspace_slug=match["workspace_slug"],
        )
    except ValidationError:
        return MalformedCommand(command="review pr", usage=usage_hint("review pr", prefix))


def match_issue_analysis(
    text: str, prefix: str, default_owner: str, default_repo: str
) -> IssueAnalysis | MalformedCommand | None:
    match = _compile(_ISSUE_ANALYSIS, prefix).match(text)
    if not match:
        return None
    try:
        return IssueAnalysis(
            owner=match["owner"] or default_owner,
            repo=match["repo"] or default_repo,
            issue_number=int(match["issue_number"]),
            explicit_workspace=match["workspace_slug"],
            user_prompt=match["user_prompt"],
        )
    except ValidationError:
        return MalformedCommand(command="analyze issue", usage=usage_hint("analyze issue", prefix))


def match_generic_api(text: str, prefix: str) -> GenericApi | MalformedCommand | None:
    match = _compile(_GENERIC_API, prefix).match(text)
    if not match:
        return None
    try:
        return GenericApi(query=match["api_query"])
    except ValidationError:
        return MalformedCommand(command="api", usage=usage_hint("api", prefix))

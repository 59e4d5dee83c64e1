"""Prompt templates for intent detection and the GitHub command workflows.

Intent labels are kept as a module constant so routing code and the prompt
never drift apart.
"""

import json

# Intent labels the classifier may return
KNOWN_INTENTS = {
    "github_issue_lookup": "The user wants details about a specific GitHub issue or PR.",
    "ask_faq": "The user asks a frequently asked product or support question.",
    "code_help": "The user wants help writing, debugging or reviewing code.",
    "general_question": "Anything else that should be answered conversationally.",
}

# Appended to every conversational query; not user-configurable
RESPONSE_FORMAT_INSTRUCTION = (
    "\n\nIMPORTANT: Provide a clean answer without referencing internal context markers "
    '(like "CONTEXT N"). Format your response using Slack markdown '
    "(bold, italics, code blocks, links)."
)

# Upper bound on diff / issue text sent to the LLM
MAX_CONTEXT_CHARS = 12_000


def build_intent_prompt(workspaces: list[str]) -> str:
    """System prompt for intent detection, listing intents and known workspaces."""
    intent_lines = "\n".join(f"- {name}: {desc}" for name, desc in KNOWN_INTENTS.items())
    if workspaces:
        workspace_lines = "\n".join(f"- {slug}" for slug in workspaces)
    else:
        workspace_lines = "- (none known; return null)"
    return (
        "You classify messages sent to a developer assistant Slack bot.\n\n"
        "## Intents\n"
        f"{intent_lines}\n\n"
        "## Workspaces\n"
        "Each workspace is a knowledge base. Suggest the one whose slug best matches "
        "the message topic, or null.\n"
        f"{workspace_lines}\n\n"
        "Return the intent label exactly as written above, a confidence between 0 and 1, "
        "and the suggested workspace slug exactly as written above."
    )


def _truncate(text: str, limit: int = MAX_CONTEXT_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "\n... (truncated)"


def build_pr_review_prompt(pr: dict, diff: str) -> str:
    """Ask for a code review of a pull request."""
    return (
        f"Review GitHub pull request #{pr.get('number')}: {pr.get('title', '')}\n"
        f"Author: {(pr.get('user') or {}).get('login', 'unknown')}\n"
        f"Base: {(pr.get('base') or {}).get('ref', '?')} <- Head: {(pr.get('head') or {}).get('ref', '?')}\n\n"
        f"Description:\n{pr.get('body') or '(no description)'}\n\n"
        f"Diff:\n```diff\n{_truncate(diff)}\n```\n\n"
        "Point out bugs, risky changes, missing tests and style problems. "
        "Finish with a short overall verdict."
    )


def build_issue_prompt(issue: dict, comments: list[dict], user_prompt: str | None) -> str:
    """Ask for an analysis of an issue and its discussion."""
    comment_lines = "\n\n".join(
        f"{(c.get('user') or {}).get('login', 'unknown')}: {c.get('body', '')}" for c in comments
    )
    task = user_prompt or "Summarize the issue, the discussion so far, and suggest next steps."
    return (
        f"GitHub issue #{issue.get('number')}: {issue.get('title', '')}\n"
        f"State: {issue.get('state', 'unknown')}\n"
        f"Labels: {', '.join(label.get('name', '') for label in issue.get('labels', [])) or 'none'}\n\n"
        f"Body:\n{_truncate(issue.get('body') or '(empty)')}\n\n"
        f"Comments:\n{_truncate(comment_lines) or '(none)'}\n\n"
        f"Task: {task}"
    )


def build_api_plan_prompt(query: str, default_owner: str) -> str:
    """Ask the GitHub workspace to translate a request into one REST GET call."""
    return (
        "Translate the request below into exactly one read-only GitHub REST API call.\n"
        f'If no owner is mentioned, assume "{default_owner}".\n'
        'Respond with JSON only: {"endpoint": "/repos/{owner}/{repo}/...", "params": {}}\n\n'
        f"Request: {query}"
    )


def build_api_format_prompt(query: str, result: object) -> str:
    """Ask the formatter workspace to present a GitHub API result."""
    return (
        f"A user asked: {query}\n\n"
        f"The GitHub API returned:\n```json\n{_truncate(json.dumps(result, indent=2))}\n```\n\n"
        "Answer the user's question from this data."
        + RESPONSE_FORMAT_INSTRUCTION
    )

"""Structured command matches produced by the command grammars.

Each grammar returns one of these models (or None when it does not match
structurally). Validation failures on captured values become
MalformedCommand so the router can answer with a usage hint.
"""

from pydantic import BaseModel, Field


class DeleteLastMessage(BaseModel):
    """`#delete_last_message`: remove the bot's latest reply."""


class ReleaseInfo(BaseModel):
    """`<prefix> release <repo-id>`."""

    repo_id: str = Field(min_length=1)  # "owner/repo" or bare repo name


class PrReview(BaseModel):
    """`<prefix> review pr <owner>/<repo>#<n> #<workspace>`."""

    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    pr_number: int = Field(gt=0)
    workspace_slug: str = Field(min_length=1)


class IssueAnalysis(BaseModel):
    """`<prefix> analyze issue [<owner>/<repo>]#<n> [#<workspace>] [prompt]`."""

    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    issue_number: int = Field(gt=0)
    explicit_workspace: str | None = None
    user_prompt: str | None = None


class GenericApi(BaseModel):
    """`<prefix> api <query>`."""

    query: str = Field(min_length=1)


class MalformedCommand(BaseModel):
    """A grammar matched structurally but its captured values were invalid."""

    command: str
    usage: str


class Unrecognized(BaseModel):
    """Prefix-bearing text that matched no grammar."""

    text: str


CommandMatch = (
    DeleteLastMessage
    | ReleaseInfo
    | PrReview
    | IssueAnalysis
    | GenericApi
    | MalformedCommand
    | Unrecognized
)

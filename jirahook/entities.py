from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict


__all__ = [
    "Action",
    "PullRequestState",
    "DispatchAction",
    "Outcome",
    "Repository",
    "PullRequest",
    "WebhookEvent",
    "JiraLink",
    "TransitionSpec",
    "Result",
]


class Action(Enum):
    OPENED = "opened"
    EDITED = "edited"
    REOPENED = "reopened"
    CLOSED = "closed"

    def __str__(self):
        return self.value


class PullRequestState(Enum):
    OPEN = "open"
    CLOSED = "closed"

    def __str__(self):
        return self.value


class DispatchAction(Enum):
    OPEN = "opened"
    MERGE = "merged"
    CLOSE = "closed"

    @property
    def key(self):
        return self.name.lower()

    def __str__(self):
        return self.value


class Outcome(Enum):
    PROCESSED = "processed"
    REJECTED = "rejected"
    IGNORED = "ignored"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Repository:
    owner_login: str
    name: str
    full_name: str

    def __str__(self):
        return self.full_name


@dataclass(frozen=True)
class PullRequest:
    number: int
    title: str
    html_url: str
    state: PullRequestState
    merged: bool = False
    body: str = ""


@dataclass(frozen=True)
class WebhookEvent:
    action: Action
    pull_request: PullRequest
    repository: Repository

    def __str__(self):
        return f"{self.action} event for {self.repository}#{self.pull_request.number}"


@dataclass(frozen=True)
class JiraLink:
    key: str
    already_linked: bool = False
    linking: bool = False

    def __str__(self):
        return self.key


@dataclass(frozen=True)
class TransitionSpec:
    transition_id: int
    fields: Dict[str, Any] = field(default_factory=dict)

    def __str__(self):
        return f"transition {self.transition_id}"


@dataclass(frozen=True)
class Result:
    ok: bool
    error: str = None

    @classmethod
    def success(cls):
        return cls(ok=True)

    @classmethod
    def failure(cls, error):
        return cls(ok=False, error=str(error))

    def __bool__(self):
        return self.ok

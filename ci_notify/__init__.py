"""Slack notifications for CI pipeline step outcomes."""

from __future__ import annotations

from ci_notify.config import NotifierConfig
from ci_notify.models import (
    Commit,
    CommitStatus,
    ConclusionKind,
    DispatchResult,
    EmailSource,
    PullRequest,
    RunReport,
)
from ci_notify.runner import NotificationRunner

__all__ = [
    "Commit",
    "CommitStatus",
    "ConclusionKind",
    "DispatchResult",
    "EmailSource",
    "NotificationRunner",
    "NotifierConfig",
    "PullRequest",
    "RunReport",
]

"""
Per-user results of sandbox provisioning and reclaiming.

Every lifecycle operation returns one SandboxOutcome per input user instead
of raising, so callers (event listeners, scripts, tests) can aggregate and
assert on what happened without reading logs.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional


class SandboxStatus(str, Enum):
    """Terminal state of one user's unit of work."""
    # provisioning
    PROVISIONED = "provisioned"
    ALREADY_PROVISIONED = "already_provisioned"
    BATCH_FAILED = "batch_failed"
    LINK_FAILED = "link_failed"
    # reclaiming
    RECLAIMED = "reclaimed"
    NO_SANDBOX = "no_sandbox"
    NOT_FOUND = "not_found"
    RECLAIM_FAILED = "reclaim_failed"
    CASCADE_FAILED = "cascade_failed"


SUCCESS_STATUSES = frozenset({
    SandboxStatus.PROVISIONED,
    SandboxStatus.ALREADY_PROVISIONED,
    SandboxStatus.RECLAIMED,
})


@dataclass
class SandboxOutcome:
    """
    Result for a single user.

    Attributes:
        username: User the outcome belongs to
        status: Terminal status
        sandbox_id: Sandbox organization id involved, if known
        error: Error text for failed outcomes
        projects_removed: Projects deleted by a reclaim
        elements_removed: Elements deleted by a reclaim
    """
    username: str
    status: SandboxStatus
    sandbox_id: Optional[str] = None
    error: Optional[str] = None
    projects_removed: int = 0
    elements_removed: int = 0

    @property
    def ok(self) -> bool:
        return self.status in SUCCESS_STATUSES


def summarize_outcomes(outcomes: Iterable[SandboxOutcome]) -> Dict[str, int]:
    """Count outcomes per status value, e.g. {"provisioned": 2, "link_failed": 1}."""
    counts = Counter(outcome.status.value for outcome in outcomes)
    return dict(counts)

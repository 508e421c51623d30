from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

CLOSED = "closed"
LABELED = "labeled"


@dataclass(frozen=True)
class Repository:
    owner: str
    name: str
    clone_url: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class SourcePullRequest:
    """Snapshot of the pull request that triggered the run."""
    number: int
    title: str
    body: str
    labels: Tuple[str, ...]
    merge_commit_sha: Optional[str]
    merged: bool
    author: str
    merged_by: Optional[str] = None


@dataclass(frozen=True)
class BackportEvent:
    action: str
    pull_request: SourcePullRequest
    repository: Repository
    # Only set for "labeled" events
    label: Optional[str] = None


@dataclass(frozen=True)
class BackportTarget:
    base: str
    head: str
    title: str
    body: str
    labels: Tuple[str, ...]
    commit_sha: str
    author: str
    merged_by: str = ""


@dataclass(frozen=True)
class TargetFailure:
    base: str
    head: str
    error_message: str


@dataclass(frozen=True)
class BackportReport:
    created: Dict[str, int] = field(default_factory=dict)
    failures: Tuple[TargetFailure, ...] = ()

    @property
    def result(self) -> Dict[str, int]:
        return dict(self.created)

    def with_created(self, base: str, number: int) -> "BackportReport":
        created = dict(self.created)
        created[base] = number
        return BackportReport(created=created, failures=self.failures)

    def with_failure(self, failure: TargetFailure) -> "BackportReport":
        return BackportReport(created=dict(self.created), failures=self.failures + (failure,))

"""
Shared fixtures for the backport tests.

GitHub and git are replaced with mocks: a MagicMock PyGithub repository and a
Workspace wrapped around a MagicMock GitPython repo.
"""

from unittest.mock import MagicMock

import pytest

from auto_backport.config import BackportConfig
from auto_backport.git_driver import Workspace
from auto_backport.labels import compile_label_pattern
from auto_backport.models import CLOSED, BackportEvent, Repository, SourcePullRequest
from auto_backport.templates import compile_template

LABEL_PATTERN = r"^backport base:(?P<base>\S+)$"


def make_event(labels=("backport base:release-1.0",), action=CLOSED, label=None, merged=True,
               merge_commit_sha="abc123", number=42, body="Fix the flux capacitor", merged_by="merger"):
    return BackportEvent(
        action=action,
        pull_request=SourcePullRequest(
            number=number,
            title="Fix bug",
            body=body,
            labels=tuple(labels),
            merge_commit_sha=merge_commit_sha,
            merged=merged,
            author="author",
            merged_by=merged_by,
        ),
        repository=Repository(owner="acme", name="widgets", clone_url="https://github.com/acme/widgets.git"),
        label=label,
    )


@pytest.fixture
def config():
    return BackportConfig(
        label_pattern=compile_label_pattern(LABEL_PATTERN),
        get_head=compile_template("backport-{base}-{number}"),
        get_title=compile_template("[Backport {base}] {title}"),
        get_body=compile_template("Backport {merge_commit_sha} from #{number}.\n\n{body}"),
        token="s3cr3t",
        reviewer_team="release-guild",
        run_url="https://github.com/acme/widgets/actions/runs/7",
        workdir="/tmp/backport",
    )


@pytest.fixture
def github_repo():
    """PyGithub Repository mock that hands out PR numbers 100, 101, ..."""
    repo = MagicMock()
    repo.allow_merge_commit = False
    repo.allow_rebase_merge = False
    repo.owner.login = "acme"
    numbers = iter(range(100, 200))

    def create_pull(base, head, title, body):
        number = next(numbers)
        return MagicMock(number=number, html_url=f"https://github.com/acme/widgets/pull/{number}")

    repo.create_pull.side_effect = create_pull
    return repo


@pytest.fixture
def github(github_repo):
    client = MagicMock()
    client.get_repo.return_value = github_repo
    return client


@pytest.fixture
def local_repo():
    """GitPython Repo mock behind the workspace."""
    return MagicMock()


@pytest.fixture
def workspace(local_repo):
    return Workspace(local_repo)

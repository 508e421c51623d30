import logging
from typing import Optional

from auto_backport.models import TargetFailure

BACKPORTS_LABEL = "backports"
RELEASE_BLOCKER_LABEL = "release-blocker"


def get_failed_backport_labels(base: str) -> list:
    return [BACKPORTS_LABEL, RELEASE_BLOCKER_LABEL, f"failed-backport-to-{base}"]


def get_failed_backport_comment_body(
    base: str,
    head: str,
    commit_sha: str,
    error_message: str,
    run_url: Optional[str] = None,
    reviewer_team: Optional[str] = None,
    owner: Optional[str] = None,
) -> str:
    worktree_path = f".worktrees/backport-{base}"
    lines = [
        f"The backport to `{base}` failed:",
        "```",
        error_message,
        "```",
        "To backport manually, run these commands in your terminal:",
        "```bash",
        "# Fetch latest updates from GitHub",
        "git fetch",
        "# Create a new working tree",
        f"git worktree add {worktree_path} {base}",
        "# Navigate to the new working tree",
        f"cd {worktree_path}",
        "# Create a new branch",
        f"git switch --create {head}",
        "# Cherry-pick the merged commit of this pull request and resolve the conflicts",
        f"git cherry-pick -x --mainline 1 {commit_sha}",
        "# Push it to GitHub",
        f"git push --set-upstream origin {head}",
        "# Go back to the original working tree",
        "cd ../..",
        "# Delete the working tree",
        f"git worktree remove {worktree_path}",
        "```",
        f"Then, create a pull request where the `base` branch is `{base}` and the `compare`/`head` branch is `{head}`.",
    ]
    if run_url:
        lines.append(f"See {run_url} for more information.")
    if reviewer_team:
        team = reviewer_team.lstrip("@")
        if owner and "/" not in team:
            team = f"{owner}/{team}"
        lines.append(f"Make sure to tag `@{team}` in the pull request description.")
    lines.append(
        f"Once the backport pull request is created, kindly remove the `{RELEASE_BLOCKER_LABEL}` label from this pull request."
    )
    return "\n".join(lines)


class FailureRecoveryReporter:
    """Leaves manual backport instructions and failure labels on the source PR."""

    def __init__(self, repo, commit_sha: str, run_url: Optional[str] = None, reviewer_team: Optional[str] = None):
        self.repo = repo
        self.commit_sha = commit_sha
        self.run_url = run_url
        self.reviewer_team = reviewer_team

    def report(self, pull_request_number: int, failure: TargetFailure) -> bool:
        """
        Best effort: a failing comment or label call is logged and never raised.

        Returns True when both the comment and the labels were applied.
        """
        labels = get_failed_backport_labels(failure.base)

        try:
            issue = self.repo.get_issue(pull_request_number)
        except Exception:
            logging.exception(f"Failed to load PR #{pull_request_number} to report the failed backport to {failure.base}")
            return False

        commented = True
        try:
            body = get_failed_backport_comment_body(
                base=failure.base,
                head=failure.head,
                commit_sha=self.commit_sha,
                error_message=failure.error_message,
                run_url=self.run_url,
                reviewer_team=self.reviewer_team,
                owner=self.repo.owner.login,
            )
            issue.create_comment(body)
            logging.info(f"Posted manual backport instructions on PR #{pull_request_number}")
        except Exception:
            commented = False
            logging.exception(f"Failed to comment on PR #{pull_request_number}")

        labeled = True
        try:
            issue.add_to_labels(*labels)
            logging.info(f"Added labels {labels} to PR #{pull_request_number}")
        except Exception:
            labeled = False
            logging.exception(f"Failed to add labels {labels} to PR #{pull_request_number}")

        return commented and labeled

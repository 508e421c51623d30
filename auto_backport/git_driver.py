import logging
from contextlib import contextmanager
from urllib.parse import urlsplit, urlunsplit

from git import Repo, GitCommandError
from git.exc import GitError

from auto_backport.errors import CloneError, GitOperationError, WorkspaceBusyError

COMMITTER_NAME = "github-actions[bot]"
COMMITTER_EMAIL = "github-actions[bot]@users.noreply.github.com"
TOKEN_USERNAME = "x-access-token"


def authenticated_clone_url(clone_url: str, token: str) -> str:
    """
    Embed the access token in an https clone URL.

    'https://github.com/owner/repo.git' -> 'https://x-access-token:<token>@github.com/owner/repo.git'
    """
    parts = urlsplit(clone_url)
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    return urlunsplit((parts.scheme, f"{TOKEN_USERNAME}:{token}@{host}", parts.path, parts.query, parts.fragment))


def redact(text: str, token: str) -> str:
    if not token:
        return text
    return text.replace(token, "***")


class Workspace:
    """
    A local clone shared by all backport targets of a run.

    Only one target may use the clone at a time, its branch pointer is moved
    target by target. Wrap each target's operations in checkout_target().
    """

    def __init__(self, repo: Repo, token: str = ""):
        self.repo = repo
        self.token = token
        self._busy = False

    @classmethod
    def clone(cls, clone_url: str, token: str, path: str) -> "Workspace":
        url = authenticated_clone_url(clone_url, token)
        logging.info(f"Cloning {clone_url} into {path}")
        try:
            repo = Repo.clone_from(url, path)
        except GitCommandError as e:
            raise CloneError(f"Failed to clone {clone_url}: {redact(str(e), token)}") from None

        with repo.config_writer() as config:
            config.set_value("user", "name", COMMITTER_NAME)
            config.set_value("user", "email", COMMITTER_EMAIL)
        return cls(repo, token)

    @contextmanager
    def checkout_target(self):
        if self._busy:
            raise WorkspaceBusyError("The working copy is already used by another backport target")
        self._busy = True
        try:
            yield self
        finally:
            self._busy = False

    def switch(self, branch: str) -> None:
        logging.info(f"Switching to {branch}")
        try:
            self.repo.git.switch(branch)
        except GitError as e:
            raise GitOperationError(f"switch {branch}", redact(str(e), self.token)) from e

    def create_branch(self, head: str) -> None:
        logging.info(f"Creating branch {head}")
        try:
            self.repo.git.switch("--create", head)
        except GitError as e:
            raise GitOperationError(f"switch --create {head}", redact(str(e), self.token)) from e

    def cherry_pick(self, commit_sha: str) -> None:
        logging.info(f"Cherry-picking {commit_sha}")
        try:
            # -x records "(cherry picked from commit ...)" in the new commit message
            self.repo.git.cherry_pick("-x", commit_sha)
        except GitError as e:
            logging.warning(f"Cherry-pick of {commit_sha} failed: {redact(str(e), self.token)}")
            self.restore()
            raise GitOperationError(f"cherry-pick -x {commit_sha}", redact(str(e), self.token)) from e
        except Exception:
            self.restore()
            raise

    def push(self, head: str) -> None:
        logging.info(f"Pushing {head} to origin")
        try:
            self.repo.git.push("--set-upstream", "origin", head)
        except GitError as e:
            raise GitOperationError(f"push --set-upstream origin {head}", redact(str(e), self.token)) from e

    def restore(self) -> None:
        """Abort an in-progress cherry-pick so the next target starts from a clean tree."""
        try:
            self.repo.git.cherry_pick("--abort")
        except GitError as e:
            logging.warning(f"Could not abort cherry-pick: {redact(str(e), self.token)}")

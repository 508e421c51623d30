import logging
from typing import List, Optional

import requests
from github import GithubException

from auto_backport.errors import PublishError
from auto_backport.models import BackportTarget

API_ERRORS = (GithubException, requests.exceptions.RequestException)


def get_reviewers(author: str, merged_by: Optional[str]) -> List[str]:
    """
    The source PR author, plus whoever merged it when that's someone else.
    """
    reviewers = [author] if author else []
    if merged_by and merged_by != author:
        reviewers.append(merged_by)
    return reviewers


def team_slug(team: Optional[str]) -> Optional[str]:
    """Accept both 'release-guild' and '@org/release-guild'."""
    if not team:
        return None
    return team.lstrip("@").split("/")[-1] or None


class PullRequestPublisher:
    def __init__(self, repo, reviewer_team: Optional[str] = None):
        self.repo = repo
        self.reviewer_team = team_slug(reviewer_team)

    def publish(self, target: BackportTarget) -> int:
        """
        Open the backport pull request, request reviews and apply labels.

        Nothing is rolled back: when a later step fails, the error carries the
        number of the PR that was already created.
        """
        try:
            pull = self.repo.create_pull(base=target.base, head=target.head, title=target.title, body=target.body)
        except API_ERRORS as e:
            raise PublishError(f"create pull request from {target.head} to {target.base}", str(e)) from e
        logging.info(f"Pull request created: {pull.html_url}")

        self._request_reviews(pull, target)

        if target.labels:
            try:
                pull.set_labels(*target.labels)
            except API_ERRORS as e:
                raise PublishError(f"add labels {list(target.labels)}", str(e), pull.number) from e
            logging.info(f"Added labels to PR #{pull.number}: {list(target.labels)}")

        logging.info(f"PR #{pull.number} has been created.")
        return pull.number

    def _request_reviews(self, pull, target: BackportTarget) -> None:
        reviewers = get_reviewers(target.author, target.merged_by)
        request = {"reviewers": reviewers}
        if self.reviewer_team:
            request["team_reviewers"] = [self.reviewer_team]
        if not reviewers and not self.reviewer_team:
            logging.info(f"No reviewers to request on PR #{pull.number}")
            return

        try:
            pull.create_review_request(**request)
        except API_ERRORS as e:
            raise PublishError(f"request reviews from {request}", str(e), pull.number) from e
        logging.info(f"Requested reviews on PR #{pull.number}: {request}")

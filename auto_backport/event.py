import json
import logging

from auto_backport.errors import ConfigurationError, UnsupportedEventError
from auto_backport.models import CLOSED, LABELED, BackportEvent, Repository, SourcePullRequest

SUPPORTED_ACTIONS = (CLOSED, LABELED)


def load_event(path: str) -> BackportEvent:
    if not path:
        raise ConfigurationError("No event payload, set GITHUB_EVENT_PATH or pass --event-path")
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Could not read event payload {path}: {e}") from e
    return parse_event(payload)


def parse_event(payload: dict) -> BackportEvent:
    """
    Build a BackportEvent from a `pull_request` or `pull_request_target` webhook payload.
    """
    action = payload.get("action")
    pull_request = payload.get("pull_request")
    if not pull_request:
        raise UnsupportedEventError(f"Unsupported event action: {action}.")
    if action not in SUPPORTED_ACTIONS:
        raise UnsupportedEventError(f"Unsupported pull request event action: {action}.")

    merged_by = pull_request.get("merged_by") or {}
    source = SourcePullRequest(
        number=pull_request["number"],
        title=pull_request.get("title") or "",
        body=pull_request.get("body") or "",
        labels=tuple(label["name"] for label in pull_request.get("labels") or []),
        merge_commit_sha=pull_request.get("merge_commit_sha"),
        merged=pull_request.get("merged") is True,
        author=pull_request["user"]["login"],
        merged_by=merged_by.get("login"),
    )

    repository = payload["repository"]
    repo = Repository(
        owner=repository["owner"]["login"],
        name=repository["name"],
        clone_url=repository["clone_url"],
    )

    label = None
    if action == LABELED:
        label = (payload.get("label") or {}).get("name")

    logging.info(f"Handling '{action}' event for {repo.full_name}#{source.number}")
    return BackportEvent(action=action, pull_request=source, repository=repo, label=label)

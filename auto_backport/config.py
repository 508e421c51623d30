import argparse
import os
from dataclasses import dataclass
from re import Pattern
from typing import Mapping, Optional, Sequence

from auto_backport.errors import ConfigurationError
from auto_backport.labels import DEFAULT_LABEL_PATTERN, compile_label_pattern
from auto_backport.templates import (
    DEFAULT_BODY_TEMPLATE,
    DEFAULT_HEAD_TEMPLATE,
    DEFAULT_TITLE_TEMPLATE,
    Template,
    compile_template,
)


@dataclass(frozen=True)
class BackportConfig:
    label_pattern: Pattern
    get_head: Template
    get_title: Template
    get_body: Template
    token: str
    reviewer_team: Optional[str] = None
    run_url: Optional[str] = None
    workdir: str = "."


def _input(environ: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    """Read an action input, GitHub passes `with:` values as INPUT_<NAME>."""
    value = environ.get(f"INPUT_{name.upper()}", "").strip()
    return value or default


def get_run_url(environ: Mapping[str, str]) -> Optional[str]:
    """
    Link to the workflow run, e.g. https://github.com/owner/repo/actions/runs/42/attempts/2
    """
    run_id = environ.get("GITHUB_RUN_ID")
    repository = environ.get("GITHUB_REPOSITORY")
    if not run_id or not repository:
        return None
    run_url = f"{environ.get('GITHUB_SERVER_URL', 'https://github.com')}/{repository}/actions/runs/{run_id}"
    attempt = environ.get("GITHUB_RUN_ATTEMPT")
    if attempt:
        run_url += f"/attempts/{attempt}"
    return run_url


def parse_args(argv: Optional[Sequence[str]] = None, environ: Mapping[str, str] = os.environ) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="auto-backport",
        description="Cherry-pick a merged pull request onto the branches named by its backport labels",
    )
    parser.add_argument('--event-path', type=str, default=environ.get("GITHUB_EVENT_PATH"),
                        help='Path of the pull_request webhook payload (defaults to $GITHUB_EVENT_PATH)')
    parser.add_argument('--label-pattern', type=str, default=_input(environ, "label_pattern", DEFAULT_LABEL_PATTERN),
                        help='Regular expression with a "base" named group matching backport labels')
    parser.add_argument('--head-template', type=str, default=_input(environ, "head_template", DEFAULT_HEAD_TEMPLATE),
                        help='Backport branch name, placeholders: {base}, {number}')
    parser.add_argument('--title-template', type=str, default=_input(environ, "title_template", DEFAULT_TITLE_TEMPLATE),
                        help='Backport PR title, placeholders: {base}, {number}, {title}')
    parser.add_argument('--body-template', type=str, default=_input(environ, "body_template", DEFAULT_BODY_TEMPLATE),
                        help='Backport PR body, placeholders: {base}, {number}, {body}, {merge_commit_sha}')
    parser.add_argument('--github-token', type=str, default=_input(environ, "github_token") or environ.get("GITHUB_TOKEN"),
                        help='Token used for the API and for pushing (defaults to $INPUT_GITHUB_TOKEN, then $GITHUB_TOKEN)')
    parser.add_argument('--team-reviewer', type=str, default=_input(environ, "team_reviewer"),
                        help='Team to request reviews from on backport PRs')
    parser.add_argument('--run-url', type=str, default=get_run_url(environ),
                        help='Workflow run linked from failure comments')
    parser.add_argument('--workdir', type=str, default=".",
                        help='Directory the repository is cloned into')
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> BackportConfig:
    token = args.github_token
    if not token:
        raise ConfigurationError("Please pass --github-token, set the 'github_token' input or the 'GITHUB_TOKEN' environment variable")

    return BackportConfig(
        label_pattern=compile_label_pattern(args.label_pattern),
        get_head=compile_template(args.head_template),
        get_title=compile_template(args.title_template),
        get_body=compile_template(args.body_template),
        token=token,
        reviewer_team=args.team_reviewer or None,
        run_url=args.run_url or None,
        workdir=args.workdir,
    )

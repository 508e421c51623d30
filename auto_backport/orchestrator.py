import logging
import os
from typing import Callable, Dict, List, Union

from auto_backport import actions
from auto_backport.config import BackportConfig
from auto_backport.errors import FatalBackportError, SecurityPreconditionError, TargetError
from auto_backport.git_driver import Workspace
from auto_backport.labels import filter_backport_labels, get_base_branches
from auto_backport.merge_methods import warn_if_squash_is_not_the_only_allowed_merge_method
from auto_backport.models import BackportEvent, BackportReport, BackportTarget, SourcePullRequest, TargetFailure
from auto_backport.publisher import PullRequestPublisher
from auto_backport.recovery import BACKPORTS_LABEL, FailureRecoveryReporter
from auto_backport.templates import TemplateContext, strip_test_plan

WorkspaceFactory = Callable[[str, str, str], Workspace]


def validate_source_pull_request(pr: SourcePullRequest) -> None:
    # pull_request_target runs with write permissions, never act on unmerged code
    # https://docs.github.com/en/actions/using-workflows/events-that-trigger-workflows#pull_request_target
    if pr.merged is not True or not pr.merge_commit_sha:
        raise SecurityPreconditionError("For security reasons, this action should only run on merged PRs.")


def get_backport_labels(pr: SourcePullRequest, base: str, config: BackportConfig) -> List[str]:
    labels = filter_backport_labels(pr.labels, config.label_pattern)
    labels += [BACKPORTS_LABEL, f"backported-to-{base}"]
    # dict keeps the first occurrence of each label
    return list(dict.fromkeys(labels))


def build_target(event: BackportEvent, base: str, config: BackportConfig) -> BackportTarget:
    pr = event.pull_request
    head = config.get_head(TemplateContext(base=base, number=pr.number))
    title = config.get_title(TemplateContext(base=base, number=pr.number, title=pr.title))
    body = config.get_body(TemplateContext(
        base=base,
        number=pr.number,
        body=strip_test_plan(pr.body or ""),
        merge_commit_sha=pr.merge_commit_sha,
    ))
    return BackportTarget(
        base=base,
        head=head,
        title=title,
        body=body,
        labels=tuple(get_backport_labels(pr, base, config)),
        commit_sha=pr.merge_commit_sha,
        author=pr.author,
        merged_by=pr.merged_by or "",
    )


class Backporter:
    """
    Cherry-picks a merged pull request onto every branch requested by its labels.

    Targets are processed one after the other on a single clone. A failing
    target leaves a comment and labels on the source PR and the run moves on;
    only an unmerged PR, a broken configuration or a failed clone stop the run.
    """

    def __init__(self, github, config: BackportConfig, workspace_factory: WorkspaceFactory = Workspace.clone):
        self.github = github
        self.config = config
        self.workspace_factory = workspace_factory

    def run(self, event: BackportEvent) -> BackportReport:
        pr = event.pull_request
        validate_source_pull_request(pr)

        bases = get_base_branches(event, self.config.label_pattern)
        if not bases:
            logging.info("No backports required.")
            return BackportReport()

        # Render everything up front, a template error must not leave half the targets done
        targets = [build_target(event, base, self.config) for base in bases]

        repo = self.github.get_repo(event.repository.full_name)
        warn_if_squash_is_not_the_only_allowed_merge_method(repo)

        logging.info(f"Backporting {pr.merge_commit_sha} from #{pr.number}.")
        workspace = self.workspace_factory(
            event.repository.clone_url,
            self.config.token,
            os.path.join(self.config.workdir, event.repository.name),
        )

        publisher = PullRequestPublisher(repo, reviewer_team=self.config.reviewer_team)
        reporter = FailureRecoveryReporter(
            repo,
            commit_sha=pr.merge_commit_sha,
            run_url=self.config.run_url,
            reviewer_team=self.config.reviewer_team,
        )

        report = BackportReport()
        for target in targets:
            report = self._backport_target(report, target, pr, workspace, publisher, reporter)

        logging.info(f"Created {len(report.created)} backport PR(s), {len(report.failures)} backport(s) failed")
        return report

    def _backport_target(self, report, target, pr, workspace, publisher, reporter) -> BackportReport:
        with actions.group(f"Backporting to {target.base} on {target.head}."):
            outcome = self._attempt(target, workspace, publisher)
            if isinstance(outcome, TargetFailure):
                logging.error(f"Backport to {target.base} failed: {outcome.error_message}")
                actions.error(f"Backport to {target.base} failed: {outcome.error_message}")
                reporter.report(pr.number, outcome)
                return report.with_failure(outcome)
            return report.with_created(target.base, outcome)

    @staticmethod
    def _attempt(target: BackportTarget, workspace: Workspace, publisher: PullRequestPublisher) -> Union[int, TargetFailure]:
        try:
            with workspace.checkout_target():
                workspace.switch(target.base)
                workspace.create_branch(target.head)
                workspace.cherry_pick(target.commit_sha)
                workspace.push(target.head)
            return publisher.publish(target)
        except FatalBackportError:
            raise
        except TargetError as e:
            return TargetFailure(base=target.base, head=target.head, error_message=str(e))
        except Exception as e:
            logging.exception(f"Unexpected error while backporting to {target.base}")
            return TargetFailure(base=target.base, head=target.head, error_message=f"{type(e).__name__}: {e}")


def backport(event: BackportEvent, github, config: BackportConfig, **kwargs) -> Dict[str, int]:
    """Run all backports for the event and return {base branch: created PR number}."""
    return Backporter(github, config, **kwargs).run(event).result

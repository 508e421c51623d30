import logging

from auto_backport import actions

SQUASH_ONLY_WARNING = "\n".join([
    "Your repository allows merge commits and rebase merging.",
    " However, Backport only supports rebased and merged pull requests with a single commit"
    " and squashed and merged pull requests.",
    " Consider only allowing squash merging.",
    " See https://help.github.com/en/github/administering-a-repository/about-merge-methods-on-github"
    " for more information.",
])


def warn_if_squash_is_not_the_only_allowed_merge_method(repo) -> bool:
    """
    Warn when the repository allows merge commits or rebase merging.

    Cherry-picking the merge commit only reproduces the whole PR when that commit
    is a squash, so other merge methods can produce partial backports.
    """
    if repo.allow_merge_commit or repo.allow_rebase_merge:
        logging.warning(SQUASH_ONLY_WARNING)
        actions.warning(SQUASH_ONLY_WARNING)
        return True
    return False

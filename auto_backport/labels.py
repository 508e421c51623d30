import logging
import re
from re import Pattern
from typing import Iterable, List, Optional

from auto_backport.errors import LabelPatternError
from auto_backport.models import BackportEvent, LABELED

BASE_GROUP = "base"
DEFAULT_LABEL_PATTERN = r"^backport (?P<base>([^ ]+))$"


def compile_label_pattern(pattern: str) -> Pattern:
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise LabelPatternError(f'Invalid label pattern "{pattern}": {e}') from e
    if BASE_GROUP not in compiled.groupindex:
        raise LabelPatternError(f'Label pattern "{pattern}" is missing a "{BASE_GROUP}" named capturing group.')
    return compiled


def get_base_branch_from_label(label: str, pattern: Pattern) -> Optional[str]:
    """
    Extract the target base branch from a backport label.

    Returns None when the label is not a backport label. A label that matches
    but yields no `base` group is a broken pattern, not a skipped label.
    """
    match = pattern.search(label)
    if not match:
        return None

    base = match.groupdict().get(BASE_GROUP)
    if not base:
        raise LabelPatternError(
            f'RegExp "{pattern.pattern}" matched "{label}" but missed a "{BASE_GROUP}" named capturing group.'
        )
    return base


def get_base_branches(event: BackportEvent, pattern: Pattern) -> List[str]:
    if event.action == LABELED:
        # Only the label that triggered the event, the others were handled before
        base = get_base_branch_from_label(event.label or "", pattern)
        return [base] if base else []

    bases = []
    for label in event.pull_request.labels:
        base = get_base_branch_from_label(label, pattern)
        if base:
            bases.append(base)
        else:
            logging.debug(f"Label '{label}' is not a backport label")
    return bases


def filter_backport_labels(labels: Iterable[str], pattern: Pattern) -> List[str]:
    """Labels to carry over to a backport PR: everything except the backport requests."""
    return [label for label in labels if not pattern.search(label)]

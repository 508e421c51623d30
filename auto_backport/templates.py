import string
from dataclasses import dataclass
from typing import Callable

from auto_backport.errors import TemplateError

DEFAULT_HEAD_TEMPLATE = "backport-{base}-{number}"
DEFAULT_TITLE_TEMPLATE = "[Backport {base}] {title}"
DEFAULT_BODY_TEMPLATE = "Backport {merge_commit_sha} from #{number}.\n\n{body}"

TEST_PLAN_START = "<!--"
TEST_PLAN_END = "-->"


@dataclass(frozen=True)
class TemplateContext:
    base: str
    number: int
    title: str = ""
    body: str = ""
    merge_commit_sha: str = ""

    def as_dict(self) -> dict:
        return {
            "base": self.base,
            "number": self.number,
            "title": self.title,
            "body": self.body,
            "merge_commit_sha": self.merge_commit_sha,
        }


Template = Callable[[TemplateContext], str]

_FIELDS = set(TemplateContext.__dataclass_fields__)


def compile_template(text: str) -> Template:
    """
    Turn a template string like 'backport-{base}-{number}' into a callable.

    Placeholders are checked up front, so a typo in the workflow inputs fails
    the run before anything is cloned or pushed.
    """
    try:
        placeholders = [name for _, name, _, _ in string.Formatter().parse(text) if name is not None]
    except ValueError as e:
        raise TemplateError(f"Invalid template {text!r}: {e}") from e

    for name in placeholders:
        root = name.split(".")[0].split("[")[0]
        if root not in _FIELDS:
            raise TemplateError(
                f"Template {text!r} uses unknown placeholder '{{{name}}}'. "
                f"Available placeholders: {', '.join(sorted(_FIELDS))}"
            )

    def render(context: TemplateContext) -> str:
        try:
            return text.format_map(context.as_dict())
        except (AttributeError, IndexError, KeyError, ValueError) as e:
            raise TemplateError(f"Failed to render template {text!r}: {e}") from e

    return render


def strip_test_plan(body: str, start: str = TEST_PLAN_START, end: str = TEST_PLAN_END) -> str:
    """
    Remove the first delimited block (e.g. an HTML comment holding the test plan) from a PR body.

    Examples:
        'before<!--plan-->after' -> 'beforeafter'
        'no comment here' -> 'no comment here'
        'before<!--unterminated' -> 'before<!--unterminated'
    """
    if not body:
        return body

    start_index = body.find(start)
    if start_index == -1:
        return body

    end_index = body.find(end, start_index + len(start))
    if end_index == -1:
        return body

    return body[:start_index] + body[end_index + len(end):]

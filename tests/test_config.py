import pytest

from auto_backport.config import get_run_url, load_config, parse_args
from auto_backport.errors import ConfigurationError, LabelPatternError, TemplateError
from auto_backport.templates import TemplateContext


@pytest.fixture
def environ():
    return {
        "GITHUB_TOKEN": "s3cr3t",
        "GITHUB_EVENT_PATH": "/github/workflow/event.json",
        "GITHUB_SERVER_URL": "https://github.com",
        "GITHUB_REPOSITORY": "acme/widgets",
        "GITHUB_RUN_ID": "7",
    }


class TestGetRunUrl:
    def test_run_url(self, environ):
        assert get_run_url(environ) == "https://github.com/acme/widgets/actions/runs/7"

    def test_run_attempt(self, environ):
        environ["GITHUB_RUN_ATTEMPT"] = "2"
        assert get_run_url(environ) == "https://github.com/acme/widgets/actions/runs/7/attempts/2"

    def test_outside_of_actions(self):
        assert get_run_url({}) is None


class TestLoadConfig:
    def test_defaults(self, environ):
        args = parse_args([], environ)
        config = load_config(args)

        assert args.event_path == "/github/workflow/event.json"
        assert config.token == "s3cr3t"
        assert config.reviewer_team is None
        assert config.run_url == "https://github.com/acme/widgets/actions/runs/7"
        assert config.label_pattern.search("backport release-1.0").group("base") == "release-1.0"
        assert config.get_head(TemplateContext(base="release-1.0", number=42)) == "backport-release-1.0-42"

    def test_action_inputs(self, environ):
        environ.update({
            "INPUT_GITHUB_TOKEN": "from-input",
            "INPUT_LABEL_PATTERN": r"^to:(?P<base>\S+)$",
            "INPUT_HEAD_TEMPLATE": "bp/{number}/{base}",
            "INPUT_TEAM_REVIEWER": "release-guild",
        })
        config = load_config(parse_args([], environ))

        assert config.token == "from-input"
        assert config.reviewer_team == "release-guild"
        assert config.label_pattern.pattern == r"^to:(?P<base>\S+)$"
        assert config.get_head(TemplateContext(base="5.3", number=1)) == "bp/1/5.3"

    def test_command_line_overrides(self, environ):
        args = parse_args(["--team-reviewer", "core", "--workdir", "/tmp/x", "--run-url", "https://ci/1"], environ)
        config = load_config(args)
        assert (config.reviewer_team, config.workdir, config.run_url) == ("core", "/tmp/x", "https://ci/1")

    def test_command_line_token(self, environ):
        environ["INPUT_GITHUB_TOKEN"] = "from-input"
        config = load_config(parse_args(["--github-token", "from-flag"], environ))
        assert config.token == "from-flag"

    def test_token_flag_without_environment(self):
        config = load_config(parse_args(["--github-token", "from-flag"], {}))
        assert config.token == "from-flag"

    def test_missing_token(self, environ):
        del environ["GITHUB_TOKEN"]
        with pytest.raises(ConfigurationError, match="GITHUB_TOKEN"):
            load_config(parse_args([], environ))

    def test_pattern_without_base_group(self, environ):
        with pytest.raises(LabelPatternError):
            load_config(parse_args(["--label-pattern", r"^backport (\S+)$"], environ))

    def test_bad_template(self, environ):
        with pytest.raises(TemplateError):
            load_config(parse_args(["--title-template", "{branch}"], environ))

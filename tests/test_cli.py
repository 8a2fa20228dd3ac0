"""Tests for CLI configuration and the command entrypoint."""

import argparse
from collections.abc import Iterator
import json
import logging
from pathlib import Path

import pytest

from lcov_prefixer.cli import main as cli_main
from lcov_prefixer.cli.config import load_config, parse_bool
from lcov_prefixer.logging_utils import AzurePipelinesLogFormatter, JsonLogFormatter, configure_logging


CLEARED_ENV = (
    "COVERAGE_REPORT",
    "COVERAGE_OUTPUT",
    "COVERAGE_PATH_PREFIX",
    "COVERAGE_PATH_SEPARATOR",
    "COVERAGE_IN_PLACE",
    "COVERAGE_KEEP_BACKUP",
    "COVERAGE_STRICT",
    "COVERAGE_ACTIONS",
    "BUILD_SOURCEBRANCH",
    "SYSTEM_PULLREQUEST_PULLREQUESTID",
    "LOG_FORMAT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in CLEARED_ENV:
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def make_args(**overrides) -> argparse.Namespace:
    values = {
        "input": None,
        "output": None,
        "in_place": False,
        "prefix": None,
        "separator": None,
        "keep_backup": False,
        "strict": False,
        "dry_run": False,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


class TestLoadConfig:
    def test_arguments_win_over_environment(self) -> None:
        config = load_config(
            make_args(input="a.info", output="b.info", prefix="src"),
            {"COVERAGE_REPORT": "x.info", "COVERAGE_PATH_PREFIX": "lib"},
        )
        assert config.report_path == Path("a.info")
        assert config.output_path == Path("b.info")
        assert config.prefix == "src"
        assert config.separator == "/"

    def test_environment_fallbacks(self) -> None:
        config = load_config(
            make_args(),
            {
                "COVERAGE_REPORT": "coverage/lcov.info",
                "COVERAGE_PATH_PREFIX": "src",
                "COVERAGE_IN_PLACE": "yes",
                "COVERAGE_STRICT": "1",
            },
        )
        assert config.output_path is None
        assert config.strict

    def test_output_equal_to_input_means_in_place(self) -> None:
        config = load_config(make_args(input="a.info", output="a.info", prefix="src"), {})
        assert config.output_path is None

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"prefix": "src", "in_place": True}, "Missing coverage report"),
            ({"input": "a.info", "in_place": True}, "Missing path prefix"),
            ({"input": "a.info", "prefix": "src"}, "Missing destination"),
            ({"input": "a.info", "prefix": "src", "output": "b", "in_place": True}, "not both"),
            ({"input": "a.info", "prefix": "//", "in_place": True}, "more than separators"),
        ],
    )
    def test_invalid_configuration(self, overrides: dict, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            load_config(make_args(**overrides), {})

    def test_parse_bool_rejects_garbage(self) -> None:
        assert parse_bool(" On ", "X") is True
        with pytest.raises(ValueError, match="X must be a boolean"):
            parse_bool("maybe", "X")


class TestBuildActionPipeline:
    def test_default_actions(self) -> None:
        pipeline = cli_main._build_action_pipeline({})
        assert [action.name for action in pipeline.actions] == ["normalize-paths", "validate-prefix"]

    def test_sonar_properties_action_needs_branch(self) -> None:
        with pytest.raises(ValueError, match="BUILD_SOURCEBRANCH"):
            cli_main._build_action_pipeline({"COVERAGE_ACTIONS": "write-sonar-properties"})

    def test_unknown_action(self) -> None:
        with pytest.raises(RuntimeError, match="Unknown action"):
            cli_main._build_action_pipeline({"COVERAGE_ACTIONS": "normalize-paths,upload"})


class TestMain:
    def test_rewrites_report(self, report_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        exit_code = cli_main.main(["--input", str(report_file), "--in-place", "--prefix", "src"])

        assert exit_code == 0
        assert "SF:src/utils/helper.ts" in report_file.read_text(encoding="utf-8")
        out = capsys.readouterr().out
        assert "Rewritten paths: 1" in out
        assert "Prefixed after rewrite: 2/2" in out
        assert "Records: 2" in out
        assert "Already prefixed: 1" in out

    def test_malformed_report_exits_1(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "lcov.info"
        path.write_text("SF:\nend_of_record\n", encoding="utf-8")

        exit_code = cli_main.main(["--input", str(path), "--in-place", "--prefix", "src"])

        assert exit_code == 1
        assert "Empty source path on line 1" in capsys.readouterr().err
        assert path.read_text(encoding="utf-8") == "SF:\nend_of_record\n"

    def test_strict_mismatch_exits_3(
        self, report_file: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("COVERAGE_ACTIONS", "validate-prefix")
        output = tmp_path / "out.info"
        exit_code = cli_main.main(
            ["--input", str(report_file), "--output", str(output), "--prefix", "src", "--strict"]
        )
        assert exit_code == 3

    def test_writes_sonar_properties(
        self, report_file: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        properties = tmp_path / "sonar-project.properties"
        monkeypatch.setenv("COVERAGE_ACTIONS", "normalize-paths,validate-prefix,write-sonar-properties")
        monkeypatch.setenv("BUILD_SOURCEBRANCH", "refs/heads/feature/login")
        monkeypatch.setenv("SONAR_PROPERTIES_FILE", str(properties))
        monkeypatch.setenv("SONAR_REFERENCE_BRANCH", "develop")

        exit_code = cli_main.main(["--input", str(report_file), "--in-place", "--prefix", "src"])

        assert exit_code == 0
        content = properties.read_text(encoding="utf-8")
        assert "sonar.branch.name=feature/login\n" in content
        assert "sonar.newCode.referenceBranch=develop\n" in content

    def test_unknown_log_format_is_usage_error(self, report_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_FORMAT", "xml")
        with pytest.raises(SystemExit) as excinfo:
            cli_main.main(["--input", str(report_file), "--in-place", "--prefix", "src"])
        assert excinfo.value.code == 2

    def test_missing_prefix_is_usage_error(self, report_file: Path) -> None:
        with pytest.raises(SystemExit) as excinfo:
            cli_main.main(["--input", str(report_file), "--in-place"])
        assert excinfo.value.code == 2

    def test_unknown_action_is_usage_error(self, report_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COVERAGE_ACTIONS", "upload")
        with pytest.raises(SystemExit) as excinfo:
            cli_main.main(["--input", str(report_file), "--in-place", "--prefix", "src"])
        assert excinfo.value.code == 2


class TestLogging:
    def _record(self, level: int, **extra) -> logging.LogRecord:
        record = logging.LogRecord("lcov", level, __file__, 1, "paths %s", ("checked",), None)
        record.__dict__.update(extra)
        return record

    def test_json_formatter_includes_extra_fields(self) -> None:
        payload = json.loads(JsonLogFormatter().format(self._record(logging.INFO, event="x.y", count=2)))
        assert payload["message"] == "paths checked"
        assert payload["event"] == "x.y"
        assert payload["count"] == 2
        assert payload["level"] == "INFO"

    def test_azure_formatter_marks_warnings(self) -> None:
        line = AzurePipelinesLogFormatter().format(self._record(logging.WARNING, event="x.y"))
        assert line == "##[warning]paths checked event=x.y"

    def test_azure_formatter_leaves_info_plain(self) -> None:
        assert AzurePipelinesLogFormatter().format(self._record(logging.INFO)) == "paths checked"

    def test_configure_logging_rejects_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="Unsupported log format"):
            configure_logging("INFO", "xml")

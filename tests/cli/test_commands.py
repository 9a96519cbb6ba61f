"""Tests for the coverview show and generate commands."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

from coverview import __version__
from coverview.cli.main import cli
from coverview.config.loader import config_path_for
from coverview.coverage.source import DEFAULT_RECORDS_FILE

runner = CliRunner()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A root with two source files and a coverage records document."""
    root = tmp_path / "app"
    (root / "src").mkdir(parents=True)
    (root / "src" / "a.ts").write_text("")
    (root / "src" / "b.ts").write_text("")
    (root / "coverage").mkdir()
    (root / "coverage" / DEFAULT_RECORDS_FILE).write_text(
        json.dumps(
            {
                "files": [
                    {
                        "file_path": "a.ts",
                        "lines_found": 10,
                        "lines_hit": 9,
                        "functions": [{"name": "main", "source_line": 1, "hit_count": 3}],
                    },
                    {"file_path": "src/b.ts", "lines_found": 10, "lines_hit": 1},
                ]
            }
        )
    )
    return root


def write_config(root: Path, content: str) -> None:
    path = config_path_for(root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


class TestMain:
    def test_version(self) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("show", "watch", "generate"):
            assert command in result.output


class TestShowCommand:
    """Tests for coverview show."""

    def test_given_records_when_show_json_then_tree_printed(self, workspace: Path) -> None:
        # When
        result = runner.invoke(cli, ["show", "--json", str(workspace)])

        # Then
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        (app,) = data["tree"]["children"]
        (src,) = app["children"]
        assert app["label"] == "app"
        assert (app["total_lines"], app["covered_lines"]) == (20, 10)
        assert [f["label"] for f in src["children"]] == ["a.ts", "b.ts"]
        assert src["children"][0]["level"] == "high"
        assert src["children"][1]["level"] == "low"
        assert src["children"][0]["children"][0]["hit_count"] == 3
        assert data["diagnostics"] == []

    def test_given_records_when_show_then_rich_tree_printed(self, workspace: Path) -> None:
        result = runner.invoke(cli, ["show", str(workspace)])

        assert result.exit_code == 0, result.output
        assert "a.ts" in result.output
        assert "90%" in result.output
        assert "main" not in result.output

    def test_given_functions_flag_when_show_then_functions_printed(self, workspace: Path) -> None:
        result = runner.invoke(cli, ["show", "--functions", str(workspace)])

        assert result.exit_code == 0, result.output
        assert "main" in result.output
        assert "3 hits" in result.output

    def test_given_bad_document_when_show_then_root_kept_with_diagnostic(
        self, workspace: Path
    ) -> None:
        (workspace / "coverage" / DEFAULT_RECORDS_FILE).write_text("{broken")

        result = runner.invoke(cli, ["show", "--json", str(workspace)])

        assert result.exit_code == 0
        data = json.loads(result.stdout[result.stdout.index("{") :])
        assert data["diagnostics"][0]["kind"] == "load_failed"
        assert data["tree"]["children"][0]["children"] == []


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell syntax")
class TestGenerateCommand:
    """Tests for coverview generate."""

    def test_given_command_when_generate_then_output_echoed(self, workspace: Path) -> None:
        write_config(workspace, "coverage_command: echo regenerated\n")

        result = runner.invoke(cli, ["generate", str(workspace)])

        assert result.exit_code == 0, result.output
        assert "regenerated" in result.output

    def test_given_no_command_when_generate_then_fails(self, workspace: Path) -> None:
        result = runner.invoke(cli, ["generate", str(workspace)])

        assert result.exit_code == 1
        assert "coverage_command" in result.output

    def test_given_failing_command_when_generate_then_exit_one(self, workspace: Path) -> None:
        write_config(workspace, "coverage_command: 'echo nope >&2; exit 4'\n")

        result = runner.invoke(cli, ["generate", str(workspace)])

        assert result.exit_code == 1
        assert "nope" in result.output

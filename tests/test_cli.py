"""Tests for the command-line interface."""

import pytest
from click.testing import CliRunner

from todo_md.cli import main
from todo_md.config import ConfigModel, save_config


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    save_config(ConfigModel(data_dir=str(tmp_path)), path)
    return path


@pytest.fixture
def todo_file(tmp_path):
    path = tmp_path / "todo.md"
    path.write_text(
        "# Weekly chores\n"
        "x Water plants {due:ed} {cm:2018-01-05}\n"
        "Plan trip +travel\n"
        "    Book flight @laptop\n"
        "Read {count:1/3}\n",
        encoding="utf-8",
    )
    return path


def invoke(runner, config_path, *args):
    return runner.invoke(main, ["--config", str(config_path)] + [str(arg) for arg in args])


class TestCheck:

    def test_due(self, runner, config_path):
        result = invoke(runner, config_path, "check", "mon", "--date", "2018-01-01")

        assert result.exit_code == 0
        assert "due on 2018-01-01" in result.output
        assert "recurring" in result.output
        assert "next due: 2018-01-08" in result.output

    def test_invalid_expression(self, runner, config_path):
        result = invoke(runner, config_path, "check", "someday", "--date", "2018-01-01")

        assert result.exit_code == 0
        assert "invalid" in result.output
        assert "next due" not in result.output

    def test_bad_date(self, runner, config_path):
        result = invoke(runner, config_path, "check", "mon", "--date", "01/01/2018")
        assert result.exit_code == 1


class TestShow:

    def test_tree(self, runner, config_path, todo_file):
        result = invoke(runner, config_path, "show", todo_file)

        assert result.exit_code == 0
        assert "Plan trip" in result.output
        assert "Book flight" in result.output
        assert "Weekly chores" not in result.output

    def test_hidden_subtasks(self, runner, config_path, tmp_path):
        path = tmp_path / "hidden.md"
        path.write_text("Plan trip\n    Secret gift {h}\n    Pack bags\n", encoding="utf-8")

        hidden = invoke(runner, config_path, "show", path)
        shown = invoke(runner, config_path, "show", path, "--all")

        assert hidden.exit_code == 0
        assert "Pack bags" in hidden.output
        assert "Secret gift" not in hidden.output
        assert "Secret gift" in shown.output

    def test_missing_file(self, runner, config_path, tmp_path):
        result = invoke(runner, config_path, "show", tmp_path / "nope.md")

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_no_file_and_no_default(self, runner, config_path):
        result = invoke(runner, config_path, "show")
        assert result.exit_code == 1


class TestGroups:

    def test_projects(self, runner, config_path, todo_file):
        result = invoke(runner, config_path, "groups", todo_file, "--kind", "project")

        assert result.exit_code == 0
        assert "travel" in result.output


class TestReset:

    def test_reopens_done_recurring_task(self, runner, config_path, todo_file):
        result = invoke(runner, config_path, "reset", todo_file, "--last-visit", "2000-01-01")

        assert result.exit_code == 0
        lines = todo_file.read_text(encoding="utf-8").splitlines()
        assert lines[1] == "Water plants {due:ed}"
        assert lines[0] == "# Weekly chores"

    def test_dry_run_leaves_file(self, runner, config_path, todo_file):
        before = todo_file.read_text(encoding="utf-8")
        result = invoke(runner, config_path, "reset", todo_file, "--last-visit", "2000-01-01", "--dry-run")

        assert result.exit_code == 0
        assert "dry run" in result.output
        assert todo_file.read_text(encoding="utf-8") == before


class TestDone:

    def test_advances_counter(self, runner, config_path, todo_file):
        result = invoke(runner, config_path, "done", todo_file, "--line", "5")

        assert result.exit_code == 0
        assert todo_file.read_text(encoding="utf-8").splitlines()[4] == "Read {count:2/3}"

    def test_line_without_task(self, runner, config_path, todo_file):
        result = invoke(runner, config_path, "done", todo_file, "--line", "1")
        assert result.exit_code == 1

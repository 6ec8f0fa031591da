"""Unit tests for the docsync CLI."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from docsync import hooks
from docsync.cli import main
from docsync.exceptions import GitError
from docsync.pipeline import UpdateResult
from docsync.progress_tracker import COUNTER_FILE, FrequencyCounter


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    """Config pointing logs into tmp_path."""
    path = tmp_path / "config.toml"
    path.write_text(f'log_dir = "{tmp_path / "logs"}"\n')
    path.chmod(0o600)
    monkeypatch.setenv("DOCSYNC_CONFIG", str(path))
    return path


class TestMainGroup:
    def test_no_command_shows_help(self, runner):
        result = runner.invoke(main, [])

        assert result.exit_code == 0
        assert "update-docs" in result.output

    def test_unknown_command(self, runner):
        result = runner.invoke(main, ["nonexistent-command"])

        assert result.exit_code != 0

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])

        assert "0.1.0" in result.output


class TestUpdateDocs:
    @pytest.fixture
    def mock_updater(self):
        with patch("docsync.commands.update_docs.RangeUpdater") as mock:
            yield mock.for_repository.return_value

    @pytest.mark.parametrize(
        ("result", "expected"),
        [
            (UpdateResult.success("initialized tracking"), "Documentation update completed"),
            (
                UpdateResult.skipped("no files changed", "abc1234..def5678"),
                "Range: abc1234..def5678",
            ),
            (UpdateResult.locked(), "already in progress"),
        ],
    )
    def test_statuses_exit_zero(
        self, runner, config_file, tmp_path, mock_updater, result, expected
    ):
        mock_updater.run.return_value = result

        out = runner.invoke(main, ["update-docs", "--project-dir", str(tmp_path)])

        assert out.exit_code == 0
        assert expected in out.output

    def test_success_lists_artifacts(self, runner, config_file, tmp_path, mock_updater):
        mock_updater.run.return_value = UpdateResult.success(
            affected=[str(tmp_path / "pkg" / "index.md")], processed_range="abc1234..def5678"
        )

        out = runner.invoke(main, ["update-docs", "--project-dir", str(tmp_path)])

        assert "(abc1234..def5678)" in out.output
        assert "Updated 1 index.md file(s)" in out.output

    def test_error_exits_one(self, runner, config_file, tmp_path, mock_updater):
        mock_updater.run.return_value = UpdateResult.error("git diff failed")

        out = runner.invoke(main, ["update-docs", "--project-dir", str(tmp_path)])

        assert out.exit_code == 1
        assert "git diff failed" in out.output

    def test_wait_flag_passed(self, runner, config_file, tmp_path):
        with patch("docsync.commands.update_docs.RangeUpdater") as mock:
            mock.for_repository.return_value.run.return_value = UpdateResult.locked()

            runner.invoke(main, ["update-docs", "--project-dir", str(tmp_path), "--wait"])

        assert mock.for_repository.call_args[1]["wait"] is True

    def test_not_a_repository(self, runner, config_file, tmp_path):
        with patch("docsync.commands.update_docs.GitService") as mock_git:
            mock_git.return_value.repo_root.side_effect = GitError("not a git repository")

            out = runner.invoke(main, ["update-docs", "--project-dir", str(tmp_path)])

        assert out.exit_code == 1
        assert "not a git repository" in out.output


class TestAutoDocHook:
    @pytest.fixture
    def payload(self, tmp_path, session_dir, transcript):
        return json.dumps(
            {
                "session_id": "abc123",
                "transcript_path": str(transcript),
                "cwd": str(tmp_path),
                "hook_event_name": "PostToolUse",
                "tool_name": "Edit",
            }
        )

    @pytest.fixture(autouse=True)
    def no_user_sessions(self, tmp_path, monkeypatch):
        monkeypatch.setattr(hooks, "USER_SESSIONS_DIR", tmp_path / "home-sessions")

    def test_counts_and_allows(self, runner, config_file, payload, session_dir):
        out = runner.invoke(main, ["hooks", "auto-doc"], input=payload)

        assert out.exit_code == 0
        assert json.loads(out.output) == {
            "hookSpecificOutput": {"hookEventName": "PostToolUse", "permissionDecision": "allow"}
        }
        assert (session_dir / COUNTER_FILE).read_text() == "1"

    def test_threshold_launches_generator(self, runner, config_file, payload, session_dir):
        FrequencyCounter(session_dir).write(4)

        with patch("docsync.generator.subprocess.Popen") as mock_popen:
            mock_popen.return_value.pid = 99
            out = runner.invoke(main, ["hooks", "auto-doc"], input=payload)

        assert out.exit_code == 0
        argv = mock_popen.call_args[0][0]
        assert argv[:2] == ["claude", "-p"]
        assert FrequencyCounter(session_dir).read() == 0

    def test_invalid_payload_still_allows(self, runner, config_file):
        out = runner.invoke(main, ["hooks", "auto-doc"], input="not json")

        assert out.exit_code == 0
        assert json.loads(out.output)["hookSpecificOutput"]["permissionDecision"] == "allow"

    def test_inside_generator_does_not_count(
        self, runner, config_file, payload, session_dir, monkeypatch
    ):
        monkeypatch.setenv("CLAUDE_HOOK_INTERNAL", "1")

        out = runner.invoke(main, ["hooks", "auto-doc"], input=payload)

        assert out.exit_code == 0
        assert not (session_dir / COUNTER_FILE).exists()

    def test_logs_to_file_not_stdout(self, runner, config_file, payload, tmp_path):
        out = runner.invoke(main, ["hooks", "auto-doc"], input=payload)

        json.loads(out.output)
        assert (tmp_path / "logs" / "auto-doc.log").exists()

    def test_invalid_log_level_still_allows(self, runner, config_file, payload, temp_home_dir):
        config_file.write_text("log_level = 10\n")

        out = runner.invoke(main, ["hooks", "auto-doc"], input=payload)

        assert out.exit_code == 0
        assert json.loads(out.output)["hookSpecificOutput"]["permissionDecision"] == "allow"
        assert (temp_home_dir / ".docsync" / "logs" / "auto-doc.log").exists()


class TestSessionEndHook:
    @pytest.fixture(autouse=True)
    def no_user_sessions(self, tmp_path, monkeypatch):
        monkeypatch.setattr(hooks, "USER_SESSIONS_DIR", tmp_path / "home-sessions")

    def test_final_update(self, runner, config_file, tmp_path, session_dir, transcript):
        payload = json.dumps(
            {
                "session_id": "abc123",
                "transcript_path": str(transcript),
                "cwd": str(tmp_path),
                "hook_event_name": "SessionEnd",
                "reason": "exit",
            }
        )

        with patch("docsync.generator.subprocess.Popen") as mock_popen:
            mock_popen.return_value.pid = 99
            out = runner.invoke(main, ["hooks", "session-end"], input=payload)

        assert out.exit_code == 0
        assert out.output == ""
        mock_popen.assert_called_once()

    def test_unknown_session(self, runner, config_file, tmp_path):
        payload = json.dumps({"session_id": "zzz", "cwd": str(tmp_path)})

        out = runner.invoke(main, ["hooks", "session-end"], input=payload)

        assert out.exit_code == 0


class TestConfigCommands:
    def test_show(self, runner, config_file):
        out = runner.invoke(main, ["config", "show", "--json"])

        assert out.exit_code == 0
        assert json.loads(out.output)["generator_command"] == "claude"

    def test_show_table(self, runner, config_file):
        out = runner.invoke(main, ["config", "show"])

        assert out.exit_code == 0
        assert "default_branch" in out.output

    def test_set(self, runner, config_file):
        out = runner.invoke(main, ["config", "set", "autodoc_frequency", "10"])

        assert out.exit_code == 0
        assert "autodoc_frequency = 10" in config_file.read_text()

    def test_set_list(self, runner, config_file):
        runner.invoke(main, ["config", "set", "skip_patterns", "*.md, *.rst"])

        shown = json.loads(runner.invoke(main, ["config", "show", "--json"]).output)
        assert shown["skip_patterns"] == ["*.md", "*.rst"]

    def test_set_unknown_key(self, runner, config_file):
        out = runner.invoke(main, ["config", "set", "colour", "blue"])

        assert out.exit_code == 1
        assert "Unknown config key" in out.output

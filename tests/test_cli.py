"""Unit tests for cli module."""

import os
from unittest.mock import MagicMock

import pytest

import compeek.cli as cli_mod
import compeek.log_config as log_config_mod
import compeek.server as server_mod
from compeek.cli import (
    build_parser,
    handle_untracked_files,
    main,
    prompt_user,
    resolve_targets,
)
from compeek.errors import ReferenceResolutionError
from compeek.server import PreparedServer


@pytest.fixture(autouse=True)
def restore_env(tmp_path, monkeypatch):
    """Undo COMPEEK_* variables written by the CLI and isolate user config."""
    saved = dict(os.environ)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setattr(log_config_mod, "configure_logging", lambda: None)
    yield
    for key in list(os.environ):
        if key.startswith("COMPEEK_") and key not in saved:
            del os.environ[key]


class TestArgParsing:
    """Test CLI argument parsing and env var mapping."""

    def test_defaults(self) -> None:
        args = build_parser().parse_args([])
        assert args.commitish == "HEAD"
        assert args.compare_with is None
        assert args.open is True
        assert args.clean is False
        assert args.ignore_whitespace is False

    def test_positionals_and_flags(self) -> None:
        args = build_parser().parse_args(
            ["main", "develop", "--port", "4000", "--no-open", "--mode", "inline", "-w", "--clean"]
        )
        assert (args.commitish, args.compare_with) == ("main", "develop")
        assert args.port == 4000
        assert args.open is False
        assert args.mode == "inline"
        assert args.ignore_whitespace is True
        assert args.clean is True

    def test_invalid_mode_exits(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--mode", "unified"])

    def test_overrides_written_to_env(self, monkeypatch) -> None:
        for key in ("COMPEEK_HOST", "COMPEEK_PORT", "COMPEEK_OPEN_BROWSER", "COMPEEK_MODE"):
            monkeypatch.delenv(key, raising=False)
        args = build_parser().parse_args(
            ["--host", "0.0.0.0", "--port", "4000", "--no-open", "--mode", "inline", "-w"]
        )

        cli_mod._apply_overrides(args)

        assert os.environ["COMPEEK_HOST"] == "0.0.0.0"
        assert os.environ["COMPEEK_PORT"] == "4000"
        assert os.environ["COMPEEK_OPEN_BROWSER"] == "0"
        assert os.environ["COMPEEK_MODE"] == "inline"
        assert os.environ["COMPEEK_IGNORE_WHITESPACE"] == "1"

    def test_port_zero_is_written(self, monkeypatch) -> None:
        """An explicit ``--port 0`` still overrides the configured port."""
        monkeypatch.setenv("COMPEEK_PORT", "3000")
        cli_mod._apply_overrides(build_parser().parse_args(["--port", "0"]))
        assert os.environ["COMPEEK_PORT"] == "0"


class TestResolveTargets:
    """Test default base selection."""

    @pytest.fixture
    def git(self) -> MagicMock:
        git = MagicMock()
        git.rev_parse.return_value = "a" * 40
        return git

    def test_explicit_base(self, git) -> None:
        assert resolve_targets("main", "develop", git) == ("main", "develop")

    def test_working_compares_with_staging(self, git) -> None:
        assert resolve_targets("working", None, git) == ("working", "staged")

    @pytest.mark.parametrize("target", ["staged", "."])
    def test_special_targets_compare_with_head(self, git, target) -> None:
        assert resolve_targets(target, None, git) == (target, "HEAD")

    def test_commit_compares_with_parent(self, git) -> None:
        assert resolve_targets("HEAD~2", None, git) == ("HEAD~2", "HEAD~2^")

    def test_no_history_shows_all_files(self, git) -> None:
        git.rev_parse.side_effect = ReferenceResolutionError("HEAD", "no commits")
        assert resolve_targets("HEAD", None, git) == (".", "HEAD")


class TestPrompts:
    """Test the untracked file prompt."""

    @pytest.mark.parametrize(
        ("answer", "expected"), [("", True), ("Y", True), ("yes", True), ("n", False)]
    )
    def test_prompt_answers(self, answer, expected) -> None:
        assert prompt_user("?", read=lambda _: answer) is expected

    def test_prompt_eof(self) -> None:
        def read(_):
            raise EOFError

        assert prompt_user("?", read=read) is False

    def test_no_untracked_files(self, capsys) -> None:
        git = MagicMock()
        git.find_untracked_files.return_value = []
        handle_untracked_files(git, read=lambda _: pytest.fail("should not prompt"))
        git.mark_intent_to_add.assert_not_called()
        assert capsys.readouterr().out == ""

    def test_accept_untracked_files(self, capsys) -> None:
        git = MagicMock()
        git.find_untracked_files.return_value = ["a.txt", "b.txt"]
        handle_untracked_files(git, read=lambda _: "y")
        git.mark_intent_to_add.assert_called_once_with(["a.txt", "b.txt"])
        out = capsys.readouterr().out
        assert "Found 2 untracked file(s)" in out
        assert "git reset -- a.txt b.txt" in out

    def test_decline_untracked_files(self, capsys) -> None:
        git = MagicMock()
        git.find_untracked_files.return_value = ["a.txt"]
        handle_untracked_files(git, read=lambda _: "no")
        git.mark_intent_to_add.assert_not_called()
        assert "will not be shown" in capsys.readouterr().out


class TestMain:
    """Test the end-to-end command flow with the server stubbed out."""

    def test_blank_target_exits(self, capsys) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["  "])
        assert excinfo.value.code == 1
        assert "Error: Target commit cannot be empty" in capsys.readouterr().err

    def test_not_a_repository_exits(self, monkeypatch, tmp_path, capsys) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(cli_mod, "has_git_repository", lambda path: False)
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 1
        assert "Not a git repository" in capsys.readouterr().err

    def test_serves_and_prints_comments(self, git_repo, monkeypatch, capsys) -> None:
        monkeypatch.chdir(git_repo)
        captured = {}

        def fake_prepare(options, parser=None):
            captured["options"] = options
            options.comments.add("app.py", "Looks good", line=1)
            return PreparedServer(
                app=MagicMock(),
                url="http://localhost:4321",
                host="127.0.0.1",
                port=4321,
                is_empty=False,
            )

        served = []
        monkeypatch.setattr(server_mod, "prepare_server", fake_prepare)
        monkeypatch.setattr(server_mod, "serve", served.append)

        main(["HEAD", "--port", "4321", "--no-open", "--mode", "inline"])

        options = captured["options"]
        assert (options.target, options.base) == ("HEAD", "HEAD^")
        assert options.port == 4321
        assert options.open_browser is False
        assert options.mode == "inline"
        assert len(served) == 1

        out = capsys.readouterr().out
        assert "compeek server started on http://localhost:4321" in out
        assert "Reviewing: HEAD" in out
        assert "Shutting down compeek server..." in out
        assert "app.py:1\nLooks good" in out

    def test_empty_diff_notice(self, git_repo, monkeypatch, capsys) -> None:
        monkeypatch.chdir(git_repo)
        monkeypatch.setattr(
            server_mod,
            "prepare_server",
            lambda options, parser=None: PreparedServer(
                app=MagicMock(),
                url="http://localhost:3000",
                host="127.0.0.1",
                port=3000,
                is_empty=True,
            ),
        )
        monkeypatch.setattr(server_mod, "serve", lambda prepared: None)

        main(["working"])

        out = capsys.readouterr().out
        assert "No differences found" in out
        assert "Shutting down" in out

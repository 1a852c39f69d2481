"""Tests for CLI commands using context injection.

Commands accept a _context parameter for dependency injection, so most tests
call them directly with a real filesystem rooted in tmp_path or with a mock.
"""

from __future__ import annotations

import errno
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import typer
from typer.testing import CliRunner

from iofs import cli
from iofs.config import Settings
from iofs.context import AppContext, create_context
from iofs.filesystem import AsyncFileSystem
from iofs.types import AccessMode, OperationOutcome

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the CLI callback from replacing pytest's log handlers."""
    monkeypatch.setattr(cli, "_configure_logging", lambda verbose: None)


@pytest.fixture
def context() -> AppContext:
    """Context backed by the real filesystem."""
    return create_context(Settings())


@pytest.fixture
def mock_context() -> AppContext:
    """Context whose filesystem is a mock with async methods."""
    filesystem = MagicMock(spec=AsyncFileSystem)
    for name in ("cat", "ls", "echo", "cp", "mv", "rm", "stat", "lstat", "mkdir",
                 "exists", "is_", "chmod", "chown"):
        setattr(filesystem, name, AsyncMock())
    return AppContext(filesystem=filesystem, settings=Settings())


class TestReadCommands:
    """Tests for cat, ls, stat, exists and access."""

    def test_cat_prints_content(
        self, context: AppContext, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test cat writes the file content to stdout."""
        target = tmp_path / "hello.txt"
        target.write_text("hello there")

        cli.cat(path=str(target), encoding="utf-8", _context=context)

        assert capsys.readouterr().out == "hello there"

    def test_cat_missing_exits(self, context: AppContext, tmp_path: Path) -> None:
        """Test cat of a missing file exits with status 1."""
        with pytest.raises(typer.Exit) as exc_info:
            cli.cat(path=str(tmp_path / "missing"), encoding=None, _context=context)
        assert exc_info.value.exit_code == 1

    def test_ls_recursive(
        self, context: AppContext, sample_tree: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test ls --recursive prints one absolute path per line."""
        cli.ls(path=str(sample_tree), recursive=True, _context=context)

        lines = capsys.readouterr().out.splitlines()
        assert lines == [
            str(sample_tree / "sub"),
            str(sample_tree / "x"),
            str(sample_tree / "sub" / "y"),
            str(sample_tree / "sub" / "z"),
        ]

    def test_ls_failure_exits(self, mock_context: AppContext) -> None:
        """Test a failed listing exits with status 1."""
        mock_context.filesystem.ls.return_value = None

        with pytest.raises(typer.Exit) as exc_info:
            cli.ls(path="/unreadable", recursive=False, _context=mock_context)
        assert exc_info.value.exit_code == 1

    def test_stat_file(
        self, context: AppContext, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test stat renders the type and size."""
        target = tmp_path / "f"
        target.write_bytes(b"1234")

        cli.stat(path=str(target), no_follow=False, _context=context)

        out = capsys.readouterr().out
        assert "file" in out
        assert "4 bytes" in out

    def test_stat_no_follow_uses_lstat(self, mock_context: AppContext) -> None:
        """Test --no-follow probes with lstat."""
        from iofs.types import StatKind, StatResult

        mock_context.filesystem.lstat.return_value = StatResult(path="/l", kind=StatKind.SYMLINK)

        cli.stat(path="/l", no_follow=True, _context=mock_context)

        mock_context.filesystem.lstat.assert_awaited_once_with("/l")
        mock_context.filesystem.stat.assert_not_called()

    def test_stat_missing_exits(self, context: AppContext, tmp_path: Path) -> None:
        """Test stat of a missing path exits with status 1."""
        with pytest.raises(typer.Exit) as exc_info:
            cli.stat(path=str(tmp_path / "missing"), no_follow=False, _context=context)
        assert exc_info.value.exit_code == 1

    def test_exists(self, context: AppContext, tmp_path: Path) -> None:
        """Test exists succeeds for a present path and exits 1 otherwise."""
        cli.exists(path=str(tmp_path), _context=context)

        with pytest.raises(typer.Exit):
            cli.exists(path=str(tmp_path / "missing"), _context=context)

    def test_access_parses_letters(self, mock_context: AppContext) -> None:
        """Test access letters are combined into an AccessMode."""
        mock_context.filesystem.is_.return_value = True

        cli.access(path="/p", mode="rw", _context=mock_context)

        mock_context.filesystem.is_.assert_awaited_once_with(
            "/p", AccessMode.EXISTS | AccessMode.READ | AccessMode.WRITE
        )

    def test_access_rejects_unknown_letter(self, mock_context: AppContext) -> None:
        """Test an unknown access letter is a usage error."""
        with pytest.raises(typer.BadParameter):
            cli.access(path="/p", mode="rq", _context=mock_context)


class TestWriteCommands:
    """Tests for echo, mkdir, cp, mv, rm, chmod and chown."""

    def test_echo_creates_parents(self, context: AppContext, tmp_path: Path) -> None:
        """Test echo writes through missing directories."""
        target = tmp_path / "out" / "sub" / "file.txt"

        cli.echo(data="hello", file=str(target), append=False, encoding=None, _context=context)

        assert target.read_text() == "hello"

    def test_echo_without_file_prints(
        self, context: AppContext, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test echo with no file prints the data back."""
        cli.echo(data="hello", file=None, append=False, encoding=None, _context=context)

        assert capsys.readouterr().out == "hello\n"

    def test_echo_append(self, context: AppContext, tmp_path: Path) -> None:
        """Test --append adds to the file."""
        target = tmp_path / "log.txt"
        target.write_text("a")

        cli.echo(data="b", file=str(target), append=True, encoding=None, _context=context)

        assert target.read_text() == "ab"

    def test_mkdir_with_mode(self, mock_context: AppContext) -> None:
        """Test --mode is parsed as octal."""
        mock_context.filesystem.mkdir.return_value = OperationOutcome.ok("/d")

        cli.mkdir(path="/d", mode="700", _context=mock_context)

        mock_context.filesystem.mkdir.assert_awaited_once_with("/d", 0o700)

    def test_mkdir_bad_mode(self, mock_context: AppContext) -> None:
        """Test a non-octal mode is a usage error."""
        with pytest.raises(typer.BadParameter):
            cli.mkdir(path="/d", mode="rwx", _context=mock_context)

    def test_cp_tree(self, context: AppContext, sample_tree: Path, tmp_path: Path) -> None:
        """Test cp copies a directory tree."""
        target = tmp_path / "copy"

        cli.cp(origin=str(sample_tree), target=str(target), _context=context)

        assert (target / "sub" / "z").read_bytes() == b"z" * 100

    def test_cp_reports_skipped_entries(
        self, mock_context: AppContext, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test entries skipped during a copy are listed as warnings."""
        skipped = OperationOutcome.failed("/b/x", PermissionError(errno.EACCES, "Permission denied"))
        mock_context.filesystem.cp.return_value = OperationOutcome.ok("/b", [skipped])

        cli.cp(origin="/a", target="/b", _context=mock_context)

        out = capsys.readouterr().out
        assert "Copied to /b" in out
        assert "Skipped /b/x" in out

    def test_mv_failure_exits(
        self, mock_context: AppContext, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test a failed move exits with status 1 and shows the error kind."""
        mock_context.filesystem.mv.return_value = OperationOutcome.failed(
            "/b", FileNotFoundError(errno.ENOENT, "No such file or directory")
        )

        with pytest.raises(typer.Exit) as exc_info:
            cli.mv(origin="/a", target="/b", _context=mock_context)

        assert exc_info.value.exit_code == 1
        assert "absent" in capsys.readouterr().out

    def test_mv_and_rm(self, context: AppContext, tmp_path: Path) -> None:
        """Test mv then rm through the real filesystem."""
        origin = tmp_path / "a.txt"
        origin.write_text("x")
        target = tmp_path / "b" / "a.txt"

        cli.mv(origin=str(origin), target=str(target), _context=context)
        assert target.exists() and not origin.exists()

        cli.rm(path=str(tmp_path / "b"), _context=context)
        assert not (tmp_path / "b").exists()

    def test_chmod(self, context: AppContext, tmp_path: Path) -> None:
        """Test chmod applies octal bits."""
        target = tmp_path / "f"
        target.touch()

        cli.chmod(path=str(target), mode="600", _context=context)

        assert target.stat().st_mode & 0o777 == 0o600

    def test_chown_passes_ids(self, mock_context: AppContext) -> None:
        """Test chown forwards uid and gid."""
        mock_context.filesystem.chown.return_value = OperationOutcome.ok("/f")

        cli.chown(path="/f", uid=1000, gid=100, _context=mock_context)

        mock_context.filesystem.chown.assert_awaited_once_with("/f", 1000, 100)


class TestCliRunner:
    """Tests invoking the Typer application end to end."""

    def test_version(self) -> None:
        """Test --version prints the version."""
        result = runner.invoke(cli.app, ["--version"])

        assert result.exit_code == 0
        assert "iofs v" in result.output

    def test_echo_then_cat(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test writing and reading back through the command line."""
        monkeypatch.delenv("IOFS_DIR_MODE", raising=False)
        target = tmp_path / "deep" / "note.txt"

        written = runner.invoke(cli.app, ["echo", "hi there", str(target)])
        read = runner.invoke(cli.app, ["cat", str(target)])

        assert written.exit_code == 0
        assert read.exit_code == 0
        assert read.output == "hi there"

    def test_rm_missing_fails(self, tmp_path: Path) -> None:
        """Test removing a missing path exits non-zero."""
        result = runner.invoke(cli.app, ["rm", str(tmp_path / "missing")])

        assert result.exit_code == 1

    def test_invalid_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test invalid settings are reported instead of raising."""
        monkeypatch.setenv("IOFS_CHUNK_SIZE", "huge")

        result = runner.invoke(cli.app, ["ls", str(tmp_path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_cp_onto_itself_fails(self, tmp_path: Path) -> None:
        """Test copying a file onto itself exits non-zero and keeps the file."""
        target = tmp_path / "keep.txt"
        target.write_text("keep")

        result = runner.invoke(cli.app, ["cp", str(target), str(target)])

        assert result.exit_code == 1
        assert target.read_text() == "keep"

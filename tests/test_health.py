import shutil
import subprocess
from unittest.mock import patch

import pytest

from workspace_diagnostics import __main__ as cli
from workspace_diagnostics.config import Settings
from workspace_diagnostics.health import check_clients, run_health_check
from workspace_diagnostics.models import HealthLevel

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def messages(results):
    return [result.message for result in results]


@pytest.mark.asyncio
@requires_git
async def test_outside_git_repository_warns(tmp_path):
    results = await run_health_check(Settings(workspace_root=str(tmp_path)))

    assert results[0].level == HealthLevel.OK
    assert results[1].level == HealthLevel.OK
    assert results[1].message.startswith("git is available: git version")
    work_tree = next(r for r in results if "git repository" in r.message)
    assert work_tree.level == HealthLevel.WARN
    assert "Run 'git init' to initialize a repository" in work_tree.advice


@pytest.mark.asyncio
@requires_git
async def test_inside_git_repository(tmp_path):
    subprocess.run(["git", "init", "-q", str(tmp_path)], check=True)

    results = await run_health_check(Settings(workspace_root=str(tmp_path)))

    work_tree = next(r for r in results if "git repository" in r.message)
    assert work_tree.level == HealthLevel.OK


@pytest.mark.asyncio
async def test_missing_git_is_an_error(tmp_path):
    with patch(
        "asyncio.create_subprocess_exec", side_effect=FileNotFoundError("git")
    ):
        results = await run_health_check(Settings(workspace_root=str(tmp_path)))

    assert results[1].level == HealthLevel.ERROR
    assert results[1].message == "git is not available"


@pytest.mark.asyncio
async def test_configuration_summary_and_clients(tmp_path, host):
    results = await run_health_check(Settings(workspace_root=str(tmp_path)), host=host)

    assert "Language clients attached: ts_ls" in messages(results)
    assert "Allowed clients: eslint, ts_ls" in messages(results)
    assert "Allowed extensions: .js, .jsx, .ts, .tsx" in messages(results)


def test_no_clients_is_informational(make_host):
    result = check_clients(make_host())

    assert result.level == HealthLevel.INFO


class TestCli:
    @requires_git
    def test_health_command(self, tmp_path, capsys):
        exit_code = cli.main(["--workspace-root", str(tmp_path), "health"])

        assert exit_code == 0
        assert "git is available" in capsys.readouterr().out

    @requires_git
    def test_files_command(self, tmp_path, capsys):
        subprocess.run(["git", "init", "-q", str(tmp_path)], check=True)
        (tmp_path / "index.ts").write_text("export {};\n")
        (tmp_path / "notes.txt").write_text("skip me\n")
        subprocess.run(["git", "-C", str(tmp_path), "add", "."], check=True)

        exit_code = cli.main(["--workspace-root", str(tmp_path), "files", "--refresh"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "index.ts" in out
        assert "notes.txt" not in out

    def test_files_outside_repository_fails(self, tmp_path):
        with patch(
            "asyncio.create_subprocess_exec", side_effect=FileNotFoundError("git")
        ):
            assert cli.main(["--workspace-root", str(tmp_path), "files"]) == 1

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.main([])

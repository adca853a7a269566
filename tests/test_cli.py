"""
Tests for CLI commands — plan, migrate, cache, and global options.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from pyenv_migrate.adapters.mock import MockCommandRunner
from pyenv_migrate.core.models.formula import Formula
from pyenv_migrate.core.services.cache import MS_PER_DAY, FormulaCache, now_ms
from pyenv_migrate.main import cli


def _info(name: str, deps: list[str]) -> str:
    return json.dumps({"formulae": [{"name": name, "versions": {"stable": "1.0"}, "dependencies": deps}]})


@pytest.fixture
def host(tmp_path: Path, monkeypatch) -> dict[str, Path]:
    """Paths the CLI resolves through the environment."""
    paths = {
        "profile": tmp_path / "home" / ".zshrc",
        "cache": tmp_path / "cache" / "formulae.json",
        "pyenv": tmp_path / "pyenv",
    }
    monkeypatch.setenv("PYENV_MIGRATE_PROFILE", str(paths["profile"]))
    monkeypatch.setenv("PYENV_MIGRATE_CACHE_FILE", str(paths["cache"]))
    monkeypatch.setenv("PYENV_ROOT", str(paths["pyenv"]))
    return paths


@pytest.fixture
def brew(cellar: Path) -> MockCommandRunner:
    """certbot depends on python@3.9; wget does not."""
    runner = MockCommandRunner()
    runner.set_response(["brew", "list", "--formula"], stdout="certbot\nwget\n")
    runner.set_response(["brew", "info", "certbot", "--json=v2"], stdout=_info("certbot", ["python@3.9"]))
    runner.set_response(["brew", "info", "wget", "--json=v2"], stdout=_info("wget", ["openssl"]))
    runner.set_response(["brew", "--cellar", "python@3.9"], stdout=str(cellar / "python@3.9"))
    return runner


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "pyenv-migrate" in result.output
        for command in ("plan", "migrate", "cache"):
            assert command in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_log_file_written(self, host, brew, tmp_path: Path):
        runner = CliRunner()
        runner.invoke(cli, ["migrate", "--yes"], obj={"runner": brew})
        log_text = (tmp_path / "logs" / "migration.log").read_text()
        assert "Reinstalled Brew package: certbot" in log_text


class TestPlanCommand:
    def test_plan(self, host, brew):
        runner = CliRunner()
        result = runner.invoke(cli, ["plan"], obj={"runner": brew})
        assert result.exit_code == 0, result.output
        assert "certbot" in result.output
        assert "python@3.9" in result.output
        assert f"{host['pyenv']}/versions/3.9.0-brew" in result.output
        assert "wget" not in result.output

    def test_plan_json(self, host, brew, cellar: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["plan", "--json"], obj={"runner": brew})
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["versions"] == ["python@3.9"]
        assert data["packages"] == [{"name": "certbot", "version": "1.0", "dependencies": ["python@3.9"]}]
        assert data["symlink_commands"] == [
            f"ln -s -f {cellar}/python@3.9/3.9.0 {host['pyenv']}/versions/3.9.0-brew"
        ]
        assert data["profile_ready"] is False

    def test_plan_uses_cache_second_time(self, host, brew):
        runner = CliRunner()
        runner.invoke(cli, ["plan"], obj={"runner": brew})
        calls_after_first = brew.call_count
        result = runner.invoke(cli, ["plan"], obj={"runner": brew})

        assert "(cached)" in result.output
        # only the cellar lookup runs again
        assert brew.call_log[calls_after_first:] == [["brew", "--cellar", "python@3.9"]]

    def test_plan_refresh(self, host, brew):
        runner = CliRunner()
        runner.invoke(cli, ["plan"], obj={"runner": brew})
        brew.call_log.clear()
        runner.invoke(cli, ["plan", "--refresh"], obj={"runner": brew})
        assert brew.call_log[0] == ["brew", "list", "--formula"]

    def test_plan_no_cache(self, host, brew):
        runner = CliRunner()
        runner.invoke(cli, ["plan", "--no-cache"], obj={"runner": brew})
        assert not host["cache"].exists()

    def test_nothing_to_migrate(self, host):
        brew = MockCommandRunner()
        brew.set_response(["brew", "list", "--formula"], stdout="wget")
        brew.set_default(stdout=_info("wget", ["openssl"]))
        result = CliRunner().invoke(cli, ["plan"], obj={"runner": brew})
        assert result.exit_code == 0
        assert "nothing to migrate" in result.output

    def test_missing_tools(self, host):
        result = CliRunner().invoke(cli, ["plan"], obj={"runner": MockCommandRunner(available=False)})
        assert result.exit_code == 1
        assert "brew" in result.output
        assert "pyenv" in result.output

    def test_fetch_error(self, host):
        brew = MockCommandRunner()
        brew.set_response(["brew", "list", "--formula"], stdout="wget")
        brew.set_default(stdout="not json")
        result = CliRunner().invoke(cli, ["plan", "--json"], obj={"runner": brew})
        assert result.exit_code == 1
        assert "not valid JSON" in json.loads(result.stdout)["error"]

    def test_bad_config(self, host, tmp_path: Path):
        bad = tmp_path / "bad.yml"
        bad.write_text("nonsense_key: 1\n")
        result = CliRunner().invoke(cli, ["--config", str(bad), "plan"], obj={"runner": MockCommandRunner()})
        assert result.exit_code == 1
        assert "Invalid migration configuration" in result.output


class TestMigrateCommand:
    def test_requires_confirmation(self, host, brew):
        result = CliRunner().invoke(cli, ["migrate"], input="n\n", obj={"runner": brew})
        assert result.exit_code == 1
        assert brew.call_count == 0

    def test_confirmed(self, host, brew):
        result = CliRunner().invoke(cli, ["migrate"], input="y\n", obj={"runner": brew})
        assert result.exit_code == 0, result.output
        assert "Migration ok" in result.output

    def test_migrate(self, host, brew):
        result = CliRunner().invoke(cli, ["migrate", "--yes"], obj={"runner": brew})
        assert result.exit_code == 0, result.output
        assert ["pyenv", "install", "-s", "3.9"] in brew.call_log
        assert ["brew", "reinstall", "certbot"] in brew.call_log
        assert ["brew", "uninstall", "--ignore-dependencies", "python@3.9"] in brew.call_log
        assert "pyenv init --path" in host["profile"].read_text()

    def test_custom_profile(self, host, brew, tmp_path: Path):
        profile = tmp_path / ".bashrc"
        result = CliRunner().invoke(
            cli, ["migrate", "--yes", "--profile", str(profile)], obj={"runner": brew}
        )
        assert result.exit_code == 0
        assert profile.is_file()
        assert not host["profile"].exists()

    def test_pyenv_root_flag(self, host, brew, tmp_path: Path):
        root = tmp_path / "alt-pyenv"
        CliRunner().invoke(cli, ["--pyenv-root", str(root), "migrate", "--yes"], obj={"runner": brew})
        links = [argv for argv in brew.call_log if argv[0] == "ln"]
        assert links[0][-1] == f"{root}/versions/3.9.0-brew"

    def test_dry_run(self, host, brew):
        result = CliRunner().invoke(cli, ["migrate", "--dry-run"], obj={"runner": brew})
        assert result.exit_code == 0
        assert "Dry run" in result.output
        assert brew.calls_to("pyenv") == []
        assert not host["profile"].exists()

    def test_install_failure(self, host, brew):
        brew.set_failure(["pyenv", "install", "-s", "3.9"], stderr="BUILD FAILED")
        result = CliRunner().invoke(cli, ["migrate", "--yes"], obj={"runner": brew})
        assert result.exit_code == 1
        assert "(install)" in result.output

    def test_install_failure_json(self, host, brew):
        brew.set_failure(["pyenv", "install", "-s", "3.9"])
        result = CliRunner().invoke(cli, ["migrate", "--yes", "--json"], obj={"runner": brew})
        assert result.exit_code == 1
        assert json.loads(result.stdout)["failed_stage"] == "install"

    def test_tolerated_failures_listed(self, host, brew):
        brew.set_failure(["brew", "reinstall", "certbot"])
        result = CliRunner().invoke(cli, ["migrate", "--yes"], obj={"runner": brew})
        assert result.exit_code == 0
        assert "Migration partial" in result.output
        assert "brew reinstall certbot" in result.output

    def test_json(self, host, brew):
        result = CliRunner().invoke(cli, ["migrate", "--yes", "--json"], obj={"runner": brew})
        data = json.loads(result.stdout)
        assert data["status"] == "ok"
        assert data["reinstalled"] == ["certbot"]
        assert data["uninstalled"] == ["python@3.9"]


class TestCacheCommands:
    def test_status_missing(self, host):
        result = CliRunner().invoke(cli, ["cache", "status"])
        assert result.exit_code == 0
        assert "No formula cache" in result.output

    def test_status_json(self, host):
        FormulaCache(host["cache"]).save([Formula(name="wget")], last_modified=now_ms() - 10 * MS_PER_DAY)
        result = CliRunner().invoke(cli, ["cache", "status", "--json"])
        data = json.loads(result.stdout)
        assert data["age_days"] == 10
        assert data["valid"] is False

    def test_status_text(self, host):
        FormulaCache(host["cache"]).save([Formula(name="wget")])
        result = CliRunner().invoke(cli, ["cache", "status"])
        assert "Formulae: 1" in result.output
        assert "valid" in result.output

    def test_clear(self, host):
        FormulaCache(host["cache"]).save([Formula(name="wget")])
        result = CliRunner().invoke(cli, ["cache", "clear"])
        assert result.exit_code == 0
        assert not host["cache"].exists()
        result = CliRunner().invoke(cli, ["cache", "clear"])
        assert "No formula cache" in result.output

"""
pyenv-migrate — CLI entrypoint.

Usage:
    pyenv-migrate --help
    pyenv-migrate plan
    pyenv-migrate migrate --dry-run
    pyenv-migrate cache status
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from pyenv_migrate import __version__
from pyenv_migrate.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="pyenv-migrate")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to pyenv-migrate.yml (default: auto-detect).",
)
@click.option(
    "--pyenv-root",
    type=click.Path(file_okay=False),
    default=None,
    help="pyenv root directory (default: $PYENV_ROOT or ~/.pyenv).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    pyenv_root: str | None,
) -> None:
    """pyenv-migrate — move Homebrew Python installations under pyenv."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["overrides"] = {"pyenv_root": pyenv_root}

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("PYENV_MIGRATE_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=_resolve_log_file(ctx.obj["config_path"]),
        log_file_level=os.environ.get("PYENV_MIGRATE_LOG_FILE_LEVEL", "INFO"),
        quiet_third_party=not debug,
    )


def _resolve_log_file(config_path: Path | None) -> Path | None:
    """Log file from config/env; a broken config is reported by the command."""
    from pyenv_migrate.core.config.loader import ConfigError, load_config

    try:
        return load_config(config_path).log_file
    except ConfigError:
        return None


# ── Plan ────────────────────────────────────────────────────────


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--refresh", is_flag=True, help="Ignore the formula cache.")
@click.option("--no-cache", is_flag=True, help="Neither read nor write the formula cache.")
@click.pass_context
def plan(ctx: click.Context, as_json: bool, refresh: bool, no_cache: bool) -> None:
    """Show which Homebrew packages and Pythons would be migrated."""
    from pyenv_migrate.core.use_cases.plan import run_plan

    result = run_plan(
        config_path=ctx.obj.get("config_path"),
        overrides=ctx.obj.get("overrides"),
        refresh=refresh,
        use_cache=not no_cache,
        runner=ctx.obj.get("runner"),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    migration_plan = result.plan
    assert migration_plan is not None  # guaranteed after error check above
    assert result.config is not None

    source = " (cached)" if migration_plan.from_cache else ""
    click.secho(
        f"\n🔍 Scanned {migration_plan.formulae_scanned} formulae{source}",
        fg="cyan",
        bold=True,
    )

    if migration_plan.is_empty:
        click.secho("   ✓ No formula depends on a Homebrew Python — nothing to migrate", fg="green")
        click.echo()
        return

    click.secho(f"   Python-dependent packages: {len(migration_plan.packages)}", bold=True)
    for pkg in migration_plan.packages:
        deps = ", ".join(pkg.python_dependencies)
        click.echo(f"     • {pkg.name} {pkg.version}  → {deps}")

    click.echo()
    click.secho("   pyenv versions to install:", bold=True)
    for version in migration_plan.versions:
        click.echo(f"     • {version}")

    click.echo()
    click.secho(f"   Symlinks into {result.config.pyenv_root}/versions:", bold=True)
    if not migration_plan.symlink_commands:
        click.echo("     (no Homebrew Python found in the Cellar)")
    for cmd in migration_plan.symlink_commands:
        click.echo(f"     $ {cmd}")

    click.echo()
    marker = "✓ already initialises pyenv" if result.profile_ready else "will be updated"
    click.echo(f"   Profile: {result.config.profile_path} ({marker})")
    click.echo()


# ── Migrate ─────────────────────────────────────────────────────


@cli.command()
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Shell profile to update (default: ~/.zshrc).",
)
@click.option("--dry-run", is_flag=True, help="Plan but don't execute.")
@click.option("--refresh", is_flag=True, help="Ignore the formula cache.")
@click.option("--no-cache", is_flag=True, help="Neither read nor write the formula cache.")
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def migrate(
    ctx: click.Context,
    profile_path: str | None,
    dry_run: bool,
    refresh: bool,
    no_cache: bool,
    yes: bool,
    as_json: bool,
) -> None:
    """Install pyenv Pythons, relink dependents, and remove Homebrew Pythons."""
    from pyenv_migrate.core.use_cases.migrate import run_migration

    if not dry_run and not yes:
        click.confirm(
            "This reinstalls Homebrew packages and uninstalls Homebrew Python. Continue?",
            abort=True,
        )

    overrides = dict(ctx.obj.get("overrides") or {})
    overrides["profile_path"] = profile_path

    result = run_migration(
        config_path=ctx.obj.get("config_path"),
        overrides=overrides,
        dry_run=dry_run,
        refresh=refresh,
        use_cache=not no_cache,
        runner=ctx.obj.get("runner"),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        stage = f" ({result.failed_stage})" if result.failed_stage else ""
        click.secho(f"❌ Migration failed{stage}: {result.error}", fg="red")
        sys.exit(1)

    report = result.report
    assert report is not None

    if report.status == "nothing-to-do":
        click.secho("✓ No formula depends on a Homebrew Python — nothing to migrate", fg="green")
        return

    if report.dry_run:
        click.secho("\n📋 Dry run — nothing was changed", fg="cyan", bold=True)
        click.echo(f"   Would install: {', '.join(report.plan.versions)}")
        click.echo(f"   Would create {len(report.plan.symlink_commands)} symlink(s)")
        click.echo(f"   Would reinstall: {', '.join(p.name for p in report.plan.packages)}")
        click.echo()
        return

    status_color = {"ok": "green", "partial": "yellow"}.get(report.status, "white")
    click.secho(f"\n🐍 Migration {report.status}", fg=status_color, bold=True)
    click.echo(f"   Installed:   {', '.join(report.installed) or '–'}")
    click.echo(f"   Symlinks:    {report.symlinks_created}")
    click.echo(f"   Reinstalled: {', '.join(report.reinstalled) or '–'}")
    click.echo(f"   Removed:     {', '.join(report.uninstalled) or '–'}")

    if report.reinstall_failed or report.uninstall_failed:
        click.echo()
        click.secho("⚠️  Tolerated failures:", fg="yellow")
        for name in report.reinstall_failed:
            click.echo(f"   • brew reinstall {name}")
        for name in report.uninstall_failed:
            click.echo(f"   • brew uninstall {name}")

    click.echo()
    click.echo("   Open a new shell (or `source` your profile) to pick up pyenv.")
    click.echo()


# ── Cache ───────────────────────────────────────────────────────


@cli.group()
def cache() -> None:
    """Formula metadata cache commands."""


def _load_cache(ctx: click.Context):
    from pyenv_migrate.core.config.loader import ConfigError, load_config
    from pyenv_migrate.core.services.cache import FormulaCache

    try:
        config = load_config(ctx.obj.get("config_path"), ctx.obj.get("overrides"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
    return FormulaCache(config.cache_file, config.cache_expiry_days)


@cache.command("status")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def cache_status(ctx: click.Context, as_json: bool) -> None:
    """Show age and validity of the formula cache."""
    info = _load_cache(ctx).status()

    if as_json:
        click.echo(json.dumps(info, indent=2))
        return

    if not info["exists"]:
        click.echo(f"No formula cache at {info['path']}")
        return

    valid = "valid" if info["valid"] else "expired"
    color = "green" if info["valid"] else "yellow"
    click.echo(f"📦 {info['path']}")
    click.echo(f"   Formulae: {info['formulae']}")
    click.echo(f"   Age: {info['age_days']} day(s), expiry {info['expiry_days']} — ", nl=False)
    click.secho(valid, fg=color)


@cache.command("clear")
@click.pass_context
def cache_clear(ctx: click.Context) -> None:
    """Delete the formula cache."""
    formula_cache = _load_cache(ctx)
    if formula_cache.clear():
        click.secho(f"✓ Removed {formula_cache.path}", fg="green")
    else:
        click.echo(f"No formula cache at {formula_cache.path}")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()

"""Health check command — run diagnostics on the gateway document and workspace."""

from __future__ import annotations

import json as json_mod
import sys
from pathlib import Path

import click
from rich.console import Console

from clawgate.cli.app import get_runtime
from clawgate.cli.formatters import format_check
from clawgate.config_file import get_section, read_config_snapshot, write_config_file
from clawgate.errors import StorageError
from clawgate.repair import drop_invalid_keys, find_unfixable, repair_document
from clawgate.workspace import ensure_workspace_and_sessions, resolve_user_path


@click.command("doctor")
@click.option("--fix", is_flag=True, help="Auto-fix issues where possible")
@click.option("--json", "json_output", is_flag=True, help="JSON output")
@click.pass_context
def doctor_cmd(ctx: click.Context, fix: bool, json_output: bool) -> None:
    """Run health checks on the clawgate installation."""
    runtime = get_runtime(ctx)
    settings = runtime.settings
    checks: list[dict] = []

    # 1. Python version
    py_ver = sys.version_info
    checks.append({
        "name": "Python version",
        "status": "ok" if py_ver >= (3, 11) else "error",
        "detail": f"{py_ver.major}.{py_ver.minor}.{py_ver.micro}",
    })

    # 2. Config file
    config_path = settings.config_path
    try:
        snapshot = read_config_snapshot(config_path)
    except StorageError as e:
        raise click.ClickException(str(e)) from None

    if not snapshot.exists:
        checks.append({
            "name": "Config file",
            "status": "info",
            "detail": f"{config_path} not found (run `clawgate onboard`)",
        })
        _report(checks, json_output, runtime.console)
        return
    checks.append({"name": "Config file", "status": "ok", "detail": str(config_path)})

    # 3. Schema
    data = snapshot.config
    changed = False
    if snapshot.valid:
        checks.append({"name": "Schema", "status": "ok", "detail": "valid"})
    elif not data:
        # Unparseable; nothing to salvage key by key.
        for issue in snapshot.issues:
            checks.append({"name": "Schema", "status": "error", "detail": str(issue)})
    elif fix:
        data, removed = drop_invalid_keys(data)
        changed = changed or bool(removed)
        for issue in removed:
            checks.append({"name": "Schema", "status": "fixed", "detail": f"removed {issue}"})
    else:
        for issue in snapshot.issues:
            checks.append({"name": "Schema", "status": "error", "detail": str(issue)})

    # 4. Normalization
    if data and (snapshot.valid or fix):
        repaired, findings = repair_document(data, token_factory=runtime.token_factory)
        for finding in findings:
            checks.append({
                "name": "Settings",
                "status": "fixed" if fix else "warning",
                "detail": str(finding),
            })
        if fix and findings:
            data = repaired
            changed = True
        if not findings:
            checks.append({"name": "Settings", "status": "ok", "detail": "normalized"})
        for finding in find_unfixable(data):
            checks.append({
                "name": "Settings",
                "status": "error",
                "detail": f"{finding} (run `clawgate onboard`)",
            })

    if changed:
        try:
            write_config_file(config_path, data)
        except StorageError as e:
            raise click.ClickException(str(e)) from None

    # 5. Workspace
    workspace = get_section(data, "agents", "defaults").get("workspace")
    if isinstance(workspace, str) and workspace.strip():
        workspace_dir = resolve_user_path(workspace)
        checks.append(_workspace_check(workspace_dir, settings.sessions_dir, data, fix))
    else:
        checks.append({"name": "Workspace", "status": "info", "detail": "not configured"})

    _report(checks, json_output, runtime.console)
    if any(c["status"] == "error" for c in checks):
        ctx.exit(1)


def _workspace_check(workspace_dir: Path, sessions_dir: Path, data: dict, fix: bool) -> dict:
    if workspace_dir.is_dir() and sessions_dir.is_dir():
        return {"name": "Workspace", "status": "ok", "detail": str(workspace_dir)}
    if not fix:
        return {
            "name": "Workspace",
            "status": "warning",
            "detail": f"{workspace_dir} or its sessions directory is missing",
        }
    skip_bootstrap = get_section(data, "agents", "defaults").get("skipBootstrap") is True
    try:
        ensure_workspace_and_sessions(workspace_dir, sessions_dir, skip_bootstrap=skip_bootstrap)
    except StorageError as e:
        return {"name": "Workspace", "status": "error", "detail": str(e)}
    return {"name": "Workspace", "status": "fixed", "detail": f"Created {workspace_dir}"}


def _report(checks: list[dict], json_output: bool, console: Console) -> None:
    if json_output:
        click.echo(json_mod.dumps({"checks": checks}, indent=2))
        return

    for check in checks:
        console.print(format_check(check["name"], check["status"], check["detail"]), soft_wrap=True)

    errors = sum(1 for c in checks if c["status"] == "error")
    warnings = sum(1 for c in checks if c["status"] == "warning")
    fixed = sum(1 for c in checks if c["status"] == "fixed")
    if errors:
        click.echo(f"\n{errors} error(s) found.")
    elif warnings:
        click.echo(f"\n{warnings} warning(s). Run `clawgate doctor --fix` to repair.")
    elif fixed:
        click.echo(f"\n{fixed} problem(s) fixed.")
    else:
        click.echo("\nAll checks passed.")

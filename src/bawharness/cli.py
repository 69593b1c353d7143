"""Click entry point: one subcommand per harness panel, plus `configure`."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from . import __version__
from .auth import prompt_for_settings
from .client import RequestExecutor, build_executor
from .config import load_profile, protect_credentials, resolve_config, save_profile
from .errors import ApiCallError, ConfigError, Failure, HarnessInputError, classify
from .harness import (
    DEFAULT_SERVICE_ENDPOINT,
    call_service,
    complete_task,
    load_client_data,
    parse_payload,
)
from .output import (
    EXIT_CLI_ERROR,
    print_api_error,
    print_error,
    print_response,
)
from .tracker import CallStateTracker


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _executor_or_fail(ctx: click.Context) -> RequestExecutor:
    obj = ctx.find_root().obj
    try:
        config = resolve_config(
            profile=obj["profile"],
            config_file=obj["config_file"],
            overrides=obj["overrides"],
        )
    except ConfigError as e:
        print_error("CONFIG_ERROR", e.message)
        sys.exit(EXIT_CLI_ERROR)
    return build_executor(config)


def _payload_or_fail(text: str | None, default: object = None) -> object:
    try:
        return parse_payload(text, default)
    except HarnessInputError as e:
        print_error(e.code, e.message)
        sys.exit(EXIT_CLI_ERROR)


def _run_panel(ctx: click.Context, coro) -> None:
    """Drive a panel coroutine and exit with the code matching its result."""
    use_json = ctx.find_root().obj["use_json"]
    try:
        response = asyncio.run(coro)
    except HarnessInputError as e:
        print_error(e.code, e.message)
        sys.exit(EXIT_CLI_ERROR)
    except ApiCallError as e:
        sys.exit(print_api_error(e))
    sys.exit(print_response(response, use_json=use_json))


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group(invoke_without_command=True)
@click.option("--profile", default="default", show_default=True, help="Stored profile in ~/.bawharness/")
@click.option("--config", "config_file", default=None, help="YAML or JSON config file")
@click.option("--task-base", default=None, help="Base URL for user task calls")
@click.option("--service-base", default=None, help="Base URL for automation service calls")
@click.option("--user", default=None, help="BAW user for Basic auth")
@click.option("--password", default=None, help="BAW password for Basic auth")
@click.option("--csrf-token", default=None, help="BPMCSRFToken header value")
@click.option("--timeout", default=None, type=float, help="Request timeout in seconds")
@click.option("--json-output", "--json", "use_json", is_flag=True, help="Output the raw JSON envelope")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.version_option(__version__)
@click.pass_context
def main(
    ctx: click.Context,
    profile: str,
    config_file: str | None,
    task_base: str | None,
    service_base: str | None,
    user: str | None,
    password: str | None,
    csrf_token: str | None,
    timeout: float | None,
    use_json: bool,
    verbose: bool,
) -> None:
    """bawharness — manual test harness for BAW task and service APIs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["config_file"] = config_file
    ctx.obj["use_json"] = use_json
    ctx.obj["overrides"] = {
        "task_base": task_base,
        "service_base": service_base,
        "user": user,
        "password": password,
        "csrf_token": csrf_token,
        "timeout": timeout,
    }

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ---------------------------------------------------------------------------
# `configure` subcommand (interactive)
# ---------------------------------------------------------------------------

@main.command()
@click.pass_context
def configure(ctx: click.Context) -> None:
    """Store base URLs and credentials for a profile (interactive)."""
    profile = ctx.obj["profile"]
    values = prompt_for_settings(load_profile(profile))

    env_path = save_profile(profile, values)
    click.echo(f"\nSettings saved to {env_path}")

    warning = protect_credentials(env_path)
    if warning:
        click.echo(click.style(warning, fg="yellow"), err=True)
    else:
        click.echo("Added *.env to .gitignore to protect credentials.")


# ---------------------------------------------------------------------------
# Panels
# ---------------------------------------------------------------------------

@main.command(name="complete-task")
@click.argument("task_id")
@click.option("--payload", default=None, help="Task output JSON (defaults to an approval payload)")
@click.pass_context
def complete_task_cmd(ctx: click.Context, task_id: str, payload: str | None) -> None:
    """Complete a user task via /bpm/user-tasks/<TASK_ID>/complete."""
    body = _payload_or_fail(payload)
    tracker = CallStateTracker(_executor_or_fail(ctx))
    _run_panel(ctx, complete_task(tracker, task_id, body))


@main.command(name="call-service")
@click.argument("endpoint", default=DEFAULT_SERVICE_ENDPOINT)
@click.option("--method", "-X", type=click.Choice(["GET", "POST"], case_sensitive=False), default="POST", show_default=True)
@click.option("--payload", default=None, help="Input JSON for the service")
@click.pass_context
def call_service_cmd(ctx: click.Context, endpoint: str, method: str, payload: str | None) -> None:
    """Call an automation service REST endpoint."""
    body = _payload_or_fail(payload)
    tracker = CallStateTracker(_executor_or_fail(ctx))
    _run_panel(ctx, call_service(tracker, endpoint, method, body))


@main.command(name="load-data")
@click.argument("id_solicitud")
@click.argument("sector_origen")
@click.option("--endpoint", default=DEFAULT_SERVICE_ENDPOINT, show_default=True)
@click.pass_context
def load_data_cmd(ctx: click.Context, id_solicitud: str, sector_origen: str, endpoint: str) -> None:
    """Load the client data for a request through the data service."""
    tracker = CallStateTracker(_executor_or_fail(ctx))
    outcome = asyncio.run(load_client_data(tracker, id_solicitud, sector_origen, endpoint))

    if isinstance(outcome, Failure):
        sys.exit(print_api_error(classify(outcome.cause or Exception(outcome.message))))
    sys.exit(print_response(outcome.response, use_json=ctx.find_root().obj["use_json"]))

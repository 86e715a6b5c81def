"""Command line interface for operating socless stores and executions."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Optional

import typer
from pydantic import ValidationError

from socless import StoreClients, create_events, end_human_interaction, load_config
from socless.context import load_execution_record
from socless.contracts import EventBatch, InvocationMetadata
from socless.exceptions import SoclessError

app = typer.Typer(help="CLI for socless playbooks")

# Command groups
events_app = typer.Typer(help="Commands for ingesting events")
execution_app = typer.Typer(help="Commands for inspecting executions")
vault_app = typer.Typer(help="Commands for managing vault objects")
interaction_app = typer.Typer(help="Commands for human interactions")

app.add_typer(events_app, name="events")
app.add_typer(execution_app, name="execution")
app.add_typer(vault_app, name="vault")
app.add_typer(interaction_app, name="interaction")


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to a YAML config file"),
) -> None:
    """socless CLI entry point."""
    if ctx.obj is None:
        ctx.obj = StoreClients(load_config(config_path))
    logging.basicConfig(level=ctx.obj.config.log_level)


def _run(coro: Awaitable[Any], clients: StoreClients) -> Any:
    async def _run_and_close() -> Any:
        try:
            return await coro
        finally:
            await clients.close()

    try:
        return asyncio.run(_run_and_close())
    except SoclessError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


def _load_json(raw: str) -> Any:
    try:
        text = raw if raw.lstrip().startswith(("{", "[")) else Path(raw).read_text()
        return json.loads(text)
    except OSError as e:
        typer.secho(f"Unable to read {raw}: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    except json.JSONDecodeError as e:
        typer.secho(f"Invalid JSON: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


@events_app.command("create")
def events_create(
    ctx: typer.Context,
    batch: str = typer.Argument(..., help="Event batch as a JSON file path or JSON string"),
    function_arn: str = typer.Option(
        ..., "--function-arn", help="ARN of the invoking function, used to locate playbooks"
    ),
) -> None:
    """
    Ingest an event batch and start one playbook execution per event.

    Example:
        socless events create batch.json --function-arn arn:aws:lambda:us-west-2:123456789012:function:create_events
    """
    try:
        event_batch = EventBatch.model_validate(_load_json(batch))
    except ValidationError as e:
        typer.secho(f"Invalid event batch: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    metadata = InvocationMetadata(invoked_function_arn=function_arn)
    statuses = _run(create_events(event_batch, metadata, clients=ctx.obj), ctx.obj)
    failed = False
    for status in statuses:
        label = "OK" if status.status else "FAILED"
        failed = failed or not status.status
        typer.echo(f"{label}\t{json.dumps(status.message)}")
    if failed:
        raise typer.Exit(code=1)


@execution_app.command("show")
def execution_show(ctx: typer.Context, execution_id: str) -> None:
    """Print the stored results of an execution as JSON."""
    record = _run(load_execution_record(execution_id, ctx.obj), ctx.obj)
    typer.echo(record.model_dump_json(indent=2))


@vault_app.command("put")
def vault_put(
    ctx: typer.Context,
    file: Path,
    key: Optional[str] = typer.Option(None, help="Vault key (generated when omitted)"),
) -> None:
    """Save a file to the vault and print its ``vault:`` reference."""
    if not file.exists():
        typer.secho("Specified file does not exist", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    saved_key = _run(ctx.obj.vault.save(file.read_bytes(), key), ctx.obj)
    typer.echo(f"vault:{saved_key}")


@vault_app.command("get")
def vault_get(ctx: typer.Context, key: str) -> None:
    """Print the text content of a vault object."""
    typer.echo(_run(ctx.obj.vault.fetch_utf8(key), ctx.obj))


@interaction_app.command("complete")
def interaction_complete(
    ctx: typer.Context,
    message_id: str,
    response: str = typer.Argument(..., help="Response body as a JSON file path or JSON string"),
) -> None:
    """Deliver a human response and resume the waiting playbook."""
    body = _load_json(response)
    if not isinstance(body, dict):
        typer.secho("Response body must be a JSON object", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    _run(end_human_interaction(message_id, body, clients=ctx.obj), ctx.obj)
    typer.echo(f"Interaction {message_id} completed")

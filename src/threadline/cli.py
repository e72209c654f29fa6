from __future__ import annotations

import logging
from pathlib import Path

import typer

from .adapters.bsky.client import AppViewClient
from .config import AppConfig, ConfigError, load_config
from .errors import NetworkError, NotFoundError, ThreadIntegrityError, ThreadShapeError
from .flatten import EntryRole, FlatEntry, FlattenResult
from .post_page import load_post_thread
from .util import dump_json

app = typer.Typer(add_completion=False, help="threadline: flatten Bluesky post threads")


def _load_config(config_path: Path | None) -> AppConfig:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _entry_line(result: FlattenResult, index: int, entry: FlatEntry) -> str:
    post = entry.post if isinstance(entry.post, dict) else {}
    author = post.get("author", {}).get("handle", "?")
    text = (post.get("record", {}).get("text") or "").replace("\n", " ")
    if len(text) > 80:
        text = text[:77].strip() + "..."

    if entry.role is EntryRole.FOCAL:
        prefix = ">>"
    elif result.is_reply(index):
        prefix = " |"
    else:
        prefix = "  "
    return f"{prefix} [{index}] @{author}: {text}"


@app.command("show")
def show_cmd(
    handle: str = typer.Argument(..., help="Author handle or DID"),
    post_id: str = typer.Argument(..., help="Post record key"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.json"),
    as_json: bool = typer.Option(False, "--json", help="Print the flattened thread as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Fetch a post thread and print it as a flat list."""
    _setup_logging(verbose)
    cfg = _load_config(config)
    client = AppViewClient(cfg.service_url, timeout=cfg.timeout_seconds)

    try:
        result = load_post_thread(client, handle, post_id)
    except (ThreadShapeError, NotFoundError) as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    except ThreadIntegrityError as exc:
        typer.secho(f"Error: thread data is malformed ({exc})", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    except NetworkError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(dump_json(result.to_dict()))
        return

    for index, entry in enumerate(result.entries):
        line = _entry_line(result, index, entry)
        if entry.role is EntryRole.FOCAL:
            typer.secho(line, fg=typer.colors.CYAN, bold=True)
        else:
            typer.echo(line)
    typer.echo(f"\nAnchor index: {result.anchor_index}")


@app.command("health")
def health_cmd(
    config: Path | None = typer.Option(None, "--config", help="Path to config.json"),
) -> None:
    """Check that the AppView is reachable."""
    cfg = _load_config(config)
    ok, message = AppViewClient(cfg.service_url, timeout=cfg.timeout_seconds).health_check()
    if ok:
        typer.secho(message, fg=typer.colors.GREEN)
        return
    typer.secho(message, fg=typer.colors.RED)
    raise typer.Exit(code=1)


@app.command("serve")
def serve_cmd(
    config: Path | None = typer.Option(None, "--config", help="Path to config.json"),
    host: str | None = typer.Option(None, "--host", help="Override gateway host"),
    port: int | None = typer.Option(None, "--port", help="Override gateway port"),
) -> None:
    """Run the HTTP gateway."""
    import uvicorn

    from .gateway.app import create_app

    _setup_logging(False)
    cfg = _load_config(config)
    uvicorn.run(create_app(cfg), host=host or cfg.gateway_host, port=port or cfg.gateway_port)


if __name__ == "__main__":
    app()

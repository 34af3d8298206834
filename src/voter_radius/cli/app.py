"""Typer CLI root application with serve command."""

import typer

from voter_radius.core.config import get_settings
from voter_radius.core.logging import setup_logging

app = typer.Typer(name="voter-radius", help="Nearby voter lookup and result-cache CLI")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
    host: str = typer.Option("0.0.0.0", "--host", help="Bind host"),  # noqa: S104
    port: int = typer.Option(8000, "--port", help="Bind port"),
) -> None:
    """Start the API server."""
    import uvicorn

    uvicorn.run(
        "voter_radius.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


def _register_subcommands() -> None:
    """Register the search and cache commands."""
    from voter_radius.cli.search_cmd import search
    from voter_radius.cli.warm_cmd import warm_cache

    app.command("search")(search)
    app.command("warm-cache")(warm_cache)


_register_subcommands()

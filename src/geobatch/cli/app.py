"""Typer CLI root application."""

import typer

from geobatch.core.config import get_settings
from geobatch.core.logging import setup_logging

app = typer.Typer(name="geobatch", help="Batch address geocoding CLI")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from geobatch.cli.geocode_cmd import geocode_app

    app.add_typer(geocode_app, name="geocode", help="Geocoding commands")


_register_subcommands()

"""Import pipeline: open script → parse → store."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from .config import SCRIPT_TITLES, SQLITE_PATH
from .errors import Script2ChatError, StoreError
from .parser import ScriptParser
from .storage import ScriptStore

logger = logging.getLogger(__name__)


def title_prefix_for(title: str) -> str:
    """Map a known script identifier to its prefix; other titles pass through."""
    return SCRIPT_TITLES.get(title, title)


def import_script(script_path: str, title: str, db_path: Path | None = None) -> dict:
    """Parse a play script file into the store.

    Returns a summary dict with import statistics.
    """
    script_file = Path(script_path)

    if not script_file.is_file():
        raise click.ClickException(f"File not found: {script_path}")

    prefix = title_prefix_for(title)
    try:
        store = ScriptStore(db_path or SQLITE_PATH)
    except StoreError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Parsing {script_file.name} as '{prefix}'...")
    try:
        with script_file.open("r", encoding="utf-8") as f:
            summary = ScriptParser(store).parse(f, prefix)
        store.record_import(
            file_path=str(script_file),
            title_prefix=prefix,
            conversations=summary.conversations,
            messages=summary.messages,
        )
    except (OSError, UnicodeDecodeError) as exc:
        # Whatever was written before the failure stays in the store.
        logger.error("Import of %s aborted", script_file, exc_info=True)
        raise click.ClickException(f"Could not read {script_path}: {exc}") from exc
    except Script2ChatError as exc:
        raise click.ClickException(str(exc)) from exc
    finally:
        store.close()

    click.echo()
    click.echo(click.style("Import complete!", fg="green", bold=True))
    click.echo(f"  Lines:          {summary.lines:,}")
    click.echo(f"  Speakers:       {summary.users:,}")
    click.echo(f"  Conversations:  {summary.conversations:,}")
    click.echo(f"  Messages:       {summary.messages:,}")

    return summary.model_dump()

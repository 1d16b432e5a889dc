"""CLI interface for script2chat."""

from __future__ import annotations

import logging
import shutil
import sys

import click

from . import __version__
from .config import DATA_DIR, LOG_LEVEL, SQLITE_PATH


@click.group()
@click.version_option(version=__version__, prog_name="script2chat")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
def cli(verbose: bool):
    """script2chat: turn play scripts into chat conversations.

    Each ACT becomes a conversation owned by the NARRATOR, each speaker cue
    becomes a user, and each speech becomes a message.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, LOG_LEVEL, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _open_store():
    from .errors import StoreError
    from .storage import ScriptStore

    try:
        return ScriptStore(SQLITE_PATH)
    except StoreError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command("import")
@click.argument("script_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--title",
    required=True,
    help="Script identifier (romandjul, julcaesar, midsumDream, tempest) or a custom title prefix",
)
def import_cmd(script_path: str, title: str):
    """Import a play script text file.

    The script should open with an ACT line; speaker names are ALL-CAPS
    lines and everything else is dialogue.

    Example:
        script2chat import romandjul.txt --title romandjul
    """
    from .importer import import_script

    import_script(script_path, title)


@cli.command()
def stats():
    """Show statistics about imported scripts."""
    if not SQLITE_PATH.exists():
        click.echo("No data found. Import a script first:")
        click.echo("  script2chat import romandjul.txt --title romandjul")
        return

    store = _open_store()
    s = store.get_stats()
    store.close()

    click.echo()
    click.echo(click.style("Script Import Statistics", bold=True))
    click.echo(f"  Users:          {s['total_users']:,}")
    click.echo(f"  Conversations:  {s['total_conversations']:,}")
    click.echo(f"  Messages:       {s['total_messages']:,}")
    click.echo(f"  Avg msgs/conv:  {s['avg_messages_per_conversation']}")
    if s["newest_user"]:
        click.echo(f"  Newest user:    {s['newest_user']}")
    if s["most_active_user"]:
        click.echo(f"  Most active:    {s['most_active_user']}")
    click.echo(f"  Location:       {DATA_DIR}")
    click.echo()


@cli.command("list")
@click.option("--limit", default=20, show_default=True, help="Maximum conversations to show")
@click.option("--offset", default=0, show_default=True, help="Skip this many conversations")
@click.option("--keyword", default=None, help="Only show titles containing this text")
def list_cmd(limit: int, offset: int, keyword: str | None):
    """List imported conversations."""
    if not SQLITE_PATH.exists():
        click.echo("No data found. Import a script first.")
        return

    store = _open_store()
    conversations = store.list_conversations(limit=limit, offset=offset, keyword=keyword)
    store.close()

    if not conversations:
        click.echo("No conversations found.")
        return

    for i, c in enumerate(conversations, offset + 1):
        click.echo(f"{i}. {click.style(c['title'], bold=True)}")
        click.echo(f"   ID: {c['id']} | {c['message_count']} msgs")

    if len(conversations) == limit:
        click.echo(f"\nMore available, use --offset {offset + limit} to see the next page.")


@cli.command()
@click.argument("conversation_id")
def show(conversation_id: str):
    """Print the transcript of one conversation."""
    if not SQLITE_PATH.exists():
        raise click.ClickException("No data found. Import a script first.")

    store = _open_store()
    conv = store.get_conversation(conversation_id)
    store.close()

    if not conv:
        raise click.ClickException(f"Conversation not found: {conversation_id}")

    click.echo(click.style(conv["title"], bold=True))
    click.echo(f"Owner: {conv['owner']} | Messages: {conv['message_count']}")
    click.echo()
    for msg in conv["messages"]:
        click.echo(f"{msg['author']}: {msg['content']}")


@cli.command()
@click.confirmation_option(prompt="This will delete all imported data. Are you sure?")
def reset():
    """Delete all imported data and start fresh."""
    if DATA_DIR.exists():
        shutil.rmtree(DATA_DIR)
        click.echo(f"Deleted {DATA_DIR}")
    else:
        click.echo("No data to delete.")

"""
Realms CLI - Command line interface for the Realms text adventure.

Usage:
    realms play           Start (or continue) a game in the terminal
    realms check-areas    Validate the area files
"""

import asyncio
import logging
import sys
from pathlib import Path

import click

from realms import __version__
from realms.config import DATA_DIR, DATABASE_URL, DEFAULT_PLAYER_NAME, LOG_LEVEL

QUIT_COMMANDS = ("quit", "exit")
LISTENER_ID = "terminal"


@click.group()
@click.version_option(version=__version__, prog_name="realms")
def main():
    """Realms - A single-player text adventure."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("--name", "-n", default=DEFAULT_PLAYER_NAME, help="Name of your character")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=DATA_DIR,
    help="Directory holding areas/ and skills.yaml",
)
@click.option("--database-url", default=DATABASE_URL, help="Database used for save games")
@click.option("--load", "load_save", is_flag=True, help="Continue from the saved game")
@click.option("--no-color", is_flag=True, help="Disable terminal colours")
def play(name: str, data_dir: Path, database_url: str, load_save: bool, no_color: bool):
    """Play the game in this terminal.

    Type 'help' in the game for a list of commands and 'quit' to leave.
    """
    try:
        asyncio.run(_play(name, data_dir, database_url, load_save, no_color))
    except KeyboardInterrupt:
        click.echo("")
    click.echo("Farewell!")


async def _play(name: str, data_dir: Path, database_url: str, load_save: bool, no_color: bool):
    from realms.db import init_db, make_engine, make_session_factory
    from realms.engine import DirectoryAreaSource, GameEngine, load_skills
    from realms.engine.formatting import AnsiColorizer, plain_colorizer
    from realms.engine.systems import SqlKeyValueStore

    db_engine = make_engine(database_url)
    await init_db(db_engine)

    engine = GameEngine(
        DirectoryAreaSource(data_dir / "areas"),
        skills=load_skills(data_dir / "skills.yaml"),
        store=SqlKeyValueStore(make_session_factory(db_engine)),
        colorizer=plain_colorizer if no_color else AnsiColorizer(),
    )
    queue = engine.channel.subscribe(LISTENER_ID)
    printer = asyncio.create_task(_print_messages(queue))

    try:
        click.echo(await engine.start_new_game(name))
        if not engine.game_started:
            return
        if load_save:
            click.echo(await engine.process_command("load"))

        await engine.start()
        await _input_loop(engine)

        if engine.game_started:
            await engine.save_game()
    finally:
        await engine.stop()
        printer.cancel()
        engine.channel.unsubscribe(LISTENER_ID)
        await db_engine.dispose()


async def _input_loop(engine):
    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break

        if line.strip().lower() in QUIT_COMMANDS:
            break
        output = await engine.process_command(line)
        if output:
            click.echo(output)


async def _print_messages(queue):
    """Echo timer-driven text (combat rounds, wandering NPCs) as it arrives."""
    from realms.engine.systems.events import MESSAGE

    while True:
        event = await queue.get()
        if event.get("type") == MESSAGE:
            click.echo(event["text"])


@main.command("check-areas")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=DATA_DIR,
    help="Directory holding areas/ and skills.yaml",
)
def check_areas(data_dir: Path):
    """Validate every area file and report what it contains."""
    ok = asyncio.run(_check_areas(data_dir))
    if not ok:
        sys.exit(1)


async def _check_areas(data_dir: Path) -> bool:
    from realms.engine.errors import AreaLoadError
    from realms.engine.loader import AreaLoader, DirectoryAreaSource

    source = DirectoryAreaSource(data_dir / "areas")
    loader = AreaLoader(source)
    area_ids = source.list_area_ids()
    if not area_ids:
        click.echo(click.style(f"No area files found in {source.root}", fg="red"))
        return False

    ok = True
    for area_id in area_ids:
        try:
            contents = await loader.load(area_id)
        except AreaLoadError as exc:
            ok = False
            click.echo(click.style(f"✗ {area_id}: {exc.reason}", fg="red"))
            continue
        click.echo(
            click.style(f"✓ {area_id}", fg="green")
            + f" ({contents.area.name}): {len(contents.rooms)} rooms,"
            f" {len(contents.items)} items, {len(contents.npcs)} npcs"
        )
    return ok


if __name__ == "__main__":
    main()

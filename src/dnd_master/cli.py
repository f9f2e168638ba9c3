"""Console front-end: login menu and play loop.

Run with ``dnd-master`` or ``python -m dnd_master``.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.text import Text

from dnd_master import __version__
from dnd_master.core import (
    ConfigurationError,
    StorageError,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    get_settings,
)
from dnd_master.dm import OpenAINarrator, SafeNarrator
from dnd_master.engine import SessionController, TurnOutcome
from dnd_master.engine.dice import DiceRoller
from dnd_master.models import PlayerState
from dnd_master.storage import CharacterStore, SessionStore


logger = get_logger(__name__)

_TITLE_STYLE = "bold yellow"
_STORY_BORDER = "cyan"


def _title(text: str) -> str:
    return f"[{_TITLE_STYLE}]{text}[/{_TITLE_STYLE}]"


# =============================================================================
# Login Menu
# =============================================================================


def _choose_character(console: Console, characters: CharacterStore, action: str) -> str | None:
    names = characters.list_names()
    if not names:
        console.print("[red]No characters found.[/red]")
        return None

    for index, name in enumerate(names, start=1):
        console.print(f"  {index}. {escape(name)}")
    answer = Prompt.ask(
        f"Choose a character to {action} (number or name, empty to go back)",
        console=console,
        default="",
        show_default=False,
    ).strip()
    if not answer:
        return None
    if answer.isdigit() and 1 <= int(answer) <= len(names):
        return names[int(answer) - 1]
    return answer


def _create_character(console: Console, characters: CharacterStore) -> PlayerState:
    while True:
        name = Prompt.ask("Name of your character", console=console).strip()
        if name:
            break
        console.print("[red]The name must not be empty.[/red]")

    player = characters.load(name)
    try:
        characters.save(player)
    except StorageError as e:
        logger.warning("Could not save new character", error=e.message, **e.details)
        console.print("[red]Could not save the character; playing on anyway.[/red]")
    console.print(f"[green]Character '{escape(player.name)}' is ready.[/green]")
    return player


def _delete_character(console: Console, characters: CharacterStore) -> None:
    name = _choose_character(console, characters, "delete")
    if name is None:
        return
    if not Confirm.ask(f"Really delete '{escape(name)}'?", console=console, default=False):
        console.print("Nothing deleted.")
        return
    try:
        deleted = characters.delete(name)
    except StorageError as e:
        console.print(f"[red]Could not delete the character: {escape(e.message)}[/red]")
        return
    if deleted:
        console.print(f"[green]'{escape(name)}' deleted.[/green]")
    else:
        console.print(f"No character named '{escape(name)}'.")


def run_login_menu(
    console: Console,
    characters: CharacterStore,
    sessions: SessionStore,
) -> PlayerState | None:
    """Ask who is playing.

    Returns:
        The chosen character, or None when the player exits.
    """
    while True:
        session_player = sessions.peek_player_name()
        options: list[tuple[str, str]] = []
        if session_player:
            options.append(("continue", f"Continue last session ({session_player})"))
        options += [
            ("new", "Start a new game (create character)"),
            ("load", "Load an existing character"),
            ("delete", "Delete a character"),
            ("exit", "Exit"),
        ]

        body = "\n".join(f"{index}. {label}" for index, (_, label) in enumerate(options, start=1))
        console.print(Panel.fit(Text(body), title=_title("DnD Master AI - Login"), border_style="yellow"))
        answer = Prompt.ask("Choose an option", console=console).strip().lower()

        keys = [key for key, _ in options]
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            choice = keys[int(answer) - 1]
        elif answer in keys or answer in ("quit", "startnewgame", "existing"):
            choice = {"quit": "exit", "startnewgame": "new", "existing": "load"}.get(answer, answer)
        else:
            console.print("[red]Invalid choice, try again.[/red]")
            continue

        if choice == "continue" and session_player:
            console.print(f"Continuing the session as {escape(session_player)}.")
            return characters.load(session_player)
        if choice == "new":
            return _create_character(console, characters)
        if choice == "load":
            name = _choose_character(console, characters, "load")
            if name is not None:
                return characters.load(name)
        elif choice == "delete":
            _delete_character(console, characters)
        elif choice == "exit":
            return None


# =============================================================================
# Play Loop
# =============================================================================


def render_outcome(console: Console, outcome: TurnOutcome) -> None:
    """Print a turn outcome; the story text goes in a panel."""
    for message in outcome.messages:
        if message and message == outcome.story:
            console.print(Panel(Text(message), border_style=_STORY_BORDER))
        else:
            console.print(Text(message))


def run_play_loop(console: Console, controller: SessionController) -> None:
    """Feed console lines to the controller until the session ends."""
    render_outcome(console, controller.start())
    console.print(Text("Type 'help' for commands, 'exit' to save and quit.", style="dim"))

    while True:
        try:
            line = console.input(f"\n{_title('What do you do?')} > ")
        except (EOFError, KeyboardInterrupt):
            console.print()
            render_outcome(console, controller.close())
            return

        outcome = controller.handle(line)
        render_outcome(console, outcome)
        if outcome.finished:
            return


# =============================================================================
# Entry Point
# =============================================================================


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="dnd-master", description="Text adventure with an AI Dungeon Master.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", help="Override the configured log level")
    parser.add_argument("--seed", type=int, help="Fixed dice seed for a reproducible game")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the game. Returns the process exit code."""
    args = _parse_args(argv)
    console = Console()

    try:
        settings = get_settings()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        return 2

    configure_logging(
        level=(args.log_level or ("DEBUG" if settings.debug else settings.log_level)).upper(),
        json_format=settings.log_json,
        log_file=settings.log_file,
    )

    characters = CharacterStore(settings.storage.characters_path)
    sessions = SessionStore(settings.storage.session_file)

    player = run_login_menu(console, characters, sessions)
    if player is None:
        console.print("[green]Goodbye![/green]")
        return 0

    bind_context(player=player.name)
    try:
        seed = args.seed if args.seed is not None else settings.game.seed
        controller = SessionController(
            player,
            narrator=SafeNarrator(OpenAINarrator(settings.ai)),
            character_store=characters,
            session_store=sessions,
            settings=settings.game,
            roller=DiceRoller(seed=seed),
        )
        run_play_loop(console, controller)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        return 2
    finally:
        clear_context()
    return 0


if __name__ == "__main__":
    sys.exit(main())

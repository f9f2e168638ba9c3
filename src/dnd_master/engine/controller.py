"""Session controller: one line of player input in, one turn outcome out.

The controller owns everything a play-through needs (story text, rolling
summary, active NPCs, the map, the player) and is driven as a small
state machine. Most input is handled while EXPLORING; attacking or
searching puts the controller in AWAITING_ENCOUNTER_CHOICE until the player
fights or flees, and a won fight with loot waits in AWAITING_LOOT_CHOICE for
the player to pick items. Exit is honoured in every state.

Persistence is best-effort. Save failures are logged and play continues.
Nothing raised while handling a line escapes `SessionController.handle`.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from dnd_master.core.config import GameSettings, get_settings
from dnd_master.core.constants import NEUTRAL_FILLER
from dnd_master.core.exceptions import (
    DiceRollError,
    DndMasterError,
    InvalidGameStateError,
    StorageError,
)
from dnd_master.core.logging import get_logger
from dnd_master.dm.narrator import NarrativeGenerator
from dnd_master.dm.prompts import (
    NO_ITEMS,
    OPENING_SCENES,
    build_location_prompt,
    build_story_prompt,
)
from dnd_master.engine.combat import CombatResolver
from dnd_master.engine.commands import (
    TAKE_ALL,
    TAKE_NONE,
    CommandParser,
    EncounterChoice,
    Intent,
    ParsedCommand,
)
from dnd_master.engine.dice import DiceRoller
from dnd_master.engine.encounters import EncounterGenerator
from dnd_master.engine.map import MapService, normalize_direction
from dnd_master.engine.narrative_state import NpcScanner, RollingSummary
from dnd_master.models import CombatResult, Enemy, Item, PlayerState, SessionRecord
from dnd_master.storage import CharacterStore, SessionStore


logger = get_logger(__name__)

ERROR_MESSAGE = "Something went wrong. Nothing happens."


# =============================================================================
# Controller State
# =============================================================================


class ControllerState(StrEnum):
    """What kind of input the controller expects next."""

    EXPLORING = "exploring"
    """Normal play; any command is accepted."""

    AWAITING_ENCOUNTER_CHOICE = "awaiting_encounter_choice"
    """An enemy blocks the way; the player must fight or flee."""

    AWAITING_LOOT_CHOICE = "awaiting_loot_choice"
    """A fight was won; the player picks which loot to take."""

    EXITED = "exited"
    """The session is saved and closed."""


@dataclass
class TurnOutcome:
    """Result of handling one line of input.

    Attributes:
        intent: The classified intent, None for encounter and loot answers.
        state: Controller state after the turn.
        messages: Plain text lines to show the player, in order.
        story: The current story text after the turn.
        combat: Combat result if a fight happened this turn.
        session_reset: True when the session was reset this turn.
        player_defeated: True when the player lost a fight this turn.
    """

    intent: Intent | None
    state: ControllerState
    messages: list[str] = field(default_factory=list)
    story: str = ""
    combat: CombatResult | None = None
    session_reset: bool = False
    player_defeated: bool = False

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    @property
    def finished(self) -> bool:
        return self.state is ControllerState.EXITED


@dataclass
class PendingEncounter:
    """An enemy waiting for the player's fight-or-flee answer."""

    enemy: Enemy
    loot: list[Item] = field(default_factory=list)


# =============================================================================
# Session Controller
# =============================================================================


class SessionController:
    """Runs one play session for one player.

    Args:
        player: The character playing this session.
        narrator: Story text generator.
        character_store: Where the player is saved.
        session_store: Where the session is saved.
        settings: Game settings; read from the environment when omitted.
        roller: Dice roller; seeded from ``settings.seed`` when omitted.
        map_service: Starting map; a fresh one when omitted.
        parser: Command parser; built from ``settings.vocabulary_file``
            when omitted.
        npc_scanner: NPC presence scanner.
        opening_scenes: Stories a new session can open with.

    Example:
        >>> controller = SessionController(player, narrator=narrator,
        ...     character_store=characters, session_store=sessions)
        >>> print(controller.start().text)
        >>> outcome = controller.handle("go north")
    """

    def __init__(
        self,
        player: PlayerState,
        *,
        narrator: NarrativeGenerator,
        character_store: CharacterStore,
        session_store: SessionStore,
        settings: GameSettings | None = None,
        roller: DiceRoller | None = None,
        map_service: MapService | None = None,
        parser: CommandParser | None = None,
        npc_scanner: NpcScanner | None = None,
        opening_scenes: Sequence[str] = OPENING_SCENES,
    ) -> None:
        self._settings = settings or get_settings().game
        self._player = player
        self._narrator = narrator
        self._characters = character_store
        self._sessions = session_store
        self._roller = roller or DiceRoller(seed=self._settings.seed)
        self._map = map_service or MapService()
        self._parser = parser or CommandParser.from_file(self._settings.vocabulary_file)
        self._scanner = npc_scanner or NpcScanner()
        self._opening_scenes = tuple(opening_scenes) or OPENING_SCENES

        self._encounters = EncounterGenerator(self._roller, loot_chance=self._settings.loot_chance)
        self._combat = CombatResolver(self._roller, max_turns=self._settings.max_combat_turns)

        self._state = ControllerState.EXPLORING
        self._story = ""
        self._summary = RollingSummary(max_length=self._settings.summary_max_length)
        self._active_npcs: list[str] = []
        self._pending: PendingEncounter | None = None
        self._pending_loot: tuple[Item, ...] = ()

        self._handlers: dict[Intent, Callable[[ParsedCommand], TurnOutcome]] = {
            Intent.EXIT: self._on_exit,
            Intent.RESET: self._on_reset,
            Intent.HELP: self._on_help,
            Intent.MAP: self._on_map,
            Intent.INVENTORY: self._on_inventory,
            Intent.STATUS: self._on_status,
            Intent.MOVE: self._on_move,
            Intent.PICKUP: self._on_pickup,
            Intent.ATTACK: self._on_attack,
            Intent.SEARCH: self._on_search,
            Intent.ROLL: self._on_roll,
            Intent.FREE_TEXT: self._on_free_text,
        }

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def player(self) -> PlayerState:
        return self._player

    @property
    def map(self) -> MapService:
        return self._map

    @property
    def story(self) -> str:
        return self._story

    @property
    def summary(self) -> str:
        return self._summary.text

    @property
    def active_npcs(self) -> list[str]:
        return list(self._active_npcs)

    @property
    def pending_enemy(self) -> Enemy | None:
        return self._pending.enemy if self._pending else None

    @property
    def pending_loot(self) -> tuple[Item, ...]:
        return self._pending_loot

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> TurnOutcome:
        """Open the session: continue the stored one or begin a new story."""
        record = self._sessions.load()
        if record is not None and record.player_name.lower() in ("", self._player.name.lower()):
            self._restore(record)
            messages = ["Previous session loaded.", self._story]
        else:
            if record is not None:
                logger.info(
                    "Stored session belongs to another player",
                    stored_player=record.player_name,
                    player=self._player.name,
                )
            self._begin_new_story()
            messages = [self._story]

        self._state = ControllerState.EXPLORING
        logger.info("Session started", player=self._player.name, location=self._map.current_key)
        return self._outcome(None, messages)

    def _restore(self, record: SessionRecord) -> None:
        self._story = record.story.strip() or self._roller.choice(self._opening_scenes)
        self._summary.reset(record.story_summary or self._story)
        self._map = MapService.from_dict(record.map)
        self._map.set_current_location(record.current_location)
        if self._map.current_key != record.current_location:
            logger.warning("Stored location not on the map", location=record.current_location)
        self._active_npcs = self._scanner.scan(self._summary.text)

    def _begin_new_story(self) -> None:
        self._story = self._roller.choice(self._opening_scenes)
        self._summary.reset(self._story)
        self._active_npcs = []
        self._map.reset()
        self._pending = None
        self._pending_loot = ()

    def save(self) -> bool:
        """Persist the player and the session.

        Returns:
            True if both were written.
        """
        player_saved = self._save_player()
        session_saved = self._save_session()
        return player_saved and session_saved

    def close(self) -> TurnOutcome:
        return self._on_exit(self._parser.parse("exit"))

    def reset(self) -> str:
        """Throw the session away and open a new story.

        Returns:
            The new opening story.
        """
        try:
            self._sessions.delete()
        except StorageError as e:
            logger.warning("Could not delete session", error=e.message, **e.details)
        self._begin_new_story()
        self._state = ControllerState.EXPLORING
        logger.info("Session reset", player=self._player.name)
        return self._story

    # -------------------------------------------------------------------------
    # Input handling
    # -------------------------------------------------------------------------

    def handle(self, line: str) -> TurnOutcome:
        """Process one line of player input.

        Args:
            line: Raw input.

        Returns:
            The TurnOutcome. Errors are logged and reported as a neutral
            message; they never propagate.
        """
        if self._state is ControllerState.EXITED:
            return self._outcome(None, ["The session has ended."])

        try:
            command = self._parser.parse(line)
            if self._state is not ControllerState.EXPLORING and command.intent is Intent.EXIT:
                logger.info("Leaving during a prompt", state=self._state)
                self._pending = None
                self._pending_loot = ()
                return self._on_exit(command)
            if self._state is ControllerState.AWAITING_ENCOUNTER_CHOICE:
                return self._on_encounter_choice(line)
            if self._state is ControllerState.AWAITING_LOOT_CHOICE:
                return self._on_loot_choice(line)

            if not command.raw:
                return self._outcome(None, ["What do you do?"])
            logger.debug("Command parsed", intent=command.intent, argument=command.argument)
            return self._handlers[command.intent](command)
        except InvalidGameStateError as e:
            logger.error("Inconsistent controller state, back to exploring", error=e.message, **e.details)
            self._pending = None
            self._pending_loot = ()
            self._state = ControllerState.EXPLORING
        except DndMasterError as e:
            logger.warning("Turn failed", error=e.message, state=self._state, **e.details)
        except Exception:
            logger.exception("Unexpected error while handling input", state=self._state)
        return self._outcome(None, [ERROR_MESSAGE])

    def _on_exit(self, command: ParsedCommand) -> TurnOutcome:
        saved = self.save()
        self._state = ControllerState.EXITED
        message = "Game saved. Until next time!" if saved else "Could not save the game. Until next time!"
        return self._outcome(command.intent, [message])

    def _on_reset(self, command: ParsedCommand) -> TurnOutcome:
        story = self.reset()
        return self._outcome(command.intent, ["A new game begins.", story], session_reset=True)

    def _on_help(self, command: ParsedCommand) -> TurnOutcome:
        phrases = self._parser.phrases
        lines = [
            "Commands:",
            f"  {' / '.join(phrases(Intent.MOVE))} <direction>  move (north, south, east, west, up, down, ...)",
            f"  {' / '.join(phrases(Intent.PICKUP))} <item>  pick something up",
            f"  {' / '.join(phrases(Intent.ATTACK))} <name>  attack someone who is present",
            f"  {' / '.join(phrases(Intent.SEARCH))}  look around for trouble",
            f"  {' / '.join(phrases(Intent.ROLL))} <dice>  roll dice, e.g. 1d20+2",
            f"  {' / '.join(phrases(Intent.MAP))}  show the map",
            f"  {' / '.join(phrases(Intent.INVENTORY))}  show your inventory",
            f"  {' / '.join(phrases(Intent.STATUS))}  show your stats",
            f"  {' / '.join(phrases(Intent.RESET))}  start a new game",
            f"  {' / '.join(phrases(Intent.EXIT))}  save and quit",
            "Anything else is told to the Dungeon Master.",
        ]
        return self._outcome(command.intent, lines)

    def _on_map(self, command: ParsedCommand) -> TurnOutcome:
        return self._outcome(command.intent, [self._map.display_map()])

    def _on_inventory(self, command: ParsedCommand) -> TurnOutcome:
        names = self._player.inventory_names()
        listing = ", ".join(names) if names else NO_ITEMS
        return self._outcome(command.intent, [f"Inventory of {self._player.name}: {listing}"])

    def _on_status(self, command: ParsedCommand) -> TurnOutcome:
        return self._outcome(
            command.intent,
            [
                f"{self._player.name} - {self._player.stat_line()}",
                f"Location: {self._map.get_current_location_name()}",
            ],
        )

    def _on_move(self, command: ParsedCommand) -> TurnOutcome:
        if not command.has_argument:
            return self._outcome(command.intent, ["Which direction do you want to go?"])

        origin = self._map.get_current_location_name()
        moved, key = self._map.try_move(command.argument)
        if not moved:
            return self._outcome(command.intent, ["You can't go that way."])

        direction = normalize_direction(command.argument)
        if self._map.is_described(key):
            story = (
                f"You go {direction} and return to {self._map.get_current_location_name()}. "
                f"{self._map.get_current_location_description()}"
            )
        else:
            description = self._narrate(
                build_location_prompt(
                    direction=direction,
                    origin=origin,
                    summary=self._summary.text,
                    language=self._settings.narrative_language,
                )
            )
            if description is not None:
                self._map.update_location_description(key, description)
            story = f"You go {direction}. {self._map.get_current_location_description()}"

        self._advance_story(story)
        self._save_session()
        return self._outcome(command.intent, [story])

    def _on_pickup(self, command: ParsedCommand) -> TurnOutcome:
        if not command.has_argument:
            return self._outcome(command.intent, ["What do you want to pick up?"])

        name = command.argument
        self._player.add_items([Item(name=name, description=f"Picked up: {name}")])
        self._save_player()
        return self._outcome(
            command.intent,
            [f"You picked up '{name}' and added it to your inventory."],
        )

    def _on_attack(self, command: ParsedCommand) -> TurnOutcome:
        if not command.has_argument:
            return self._outcome(command.intent, ["Who do you want to attack?"])

        target = self._scanner.match(command.argument, self._active_npcs)
        if target is None:
            return self._outcome(command.intent, [f"'{command.argument}' can't be found here."])

        enemy, loot = self._encounters.generate_encounter(self._player, enemy_name=target)
        return self._present_encounter(command.intent, enemy, loot, f"You square up to the {enemy.name}!")

    def _on_search(self, command: ParsedCommand) -> TurnOutcome:
        enemy, loot = self._encounters.generate_encounter(self._player)
        if enemy.name not in self._active_npcs:
            self._active_npcs.append(enemy.name)
        return self._present_encounter(
            command.intent, enemy, loot, f"While searching you run into a {enemy.name}!"
        )

    def _on_roll(self, command: ParsedCommand) -> TurnOutcome:
        if not command.has_argument:
            return self._outcome(command.intent, ["What do you want to roll? For example: roll 1d20+2"])
        try:
            result = self._roller.roll(command.argument)
        except DiceRollError:
            return self._outcome(command.intent, [f"'{command.argument}' is not a dice expression."])
        return self._outcome(command.intent, [f"You roll {result.breakdown}"])

    def _on_free_text(self, command: ParsedCommand) -> TurnOutcome:
        location = self._map.get_location(self._map.current_key)
        prompt = build_story_prompt(
            action=command.raw,
            summary=self._summary.text,
            stats=self._player.stat_line(),
            location_name=self._map.get_current_location_name(),
            location_description=self._map.get_current_location_description(),
            exits=list(location.exits) if location else [],
            npcs=self._active_npcs,
            inventory=self._player.inventory_names(),
            language=self._settings.narrative_language,
        )
        story = self._narrate(prompt) or NEUTRAL_FILLER
        self._advance_story(story)
        self._save_session()
        return self._outcome(command.intent, [story])

    # -------------------------------------------------------------------------
    # Encounters
    # -------------------------------------------------------------------------

    def _present_encounter(
        self,
        intent: Intent,
        enemy: Enemy,
        loot: list[Item],
        opening: str,
    ) -> TurnOutcome:
        self._pending = PendingEncounter(enemy=enemy, loot=loot)
        self._state = ControllerState.AWAITING_ENCOUNTER_CHOICE
        story = f"{opening} HP: {enemy.hp}, STR: {enemy.strength}, DEX: {enemy.dexterity}."
        self._advance_story(story, rescan=False)
        return self._outcome(intent, [story, self._encounter_prompt()])

    def _encounter_prompt(self) -> str:
        fight = self._parser.phrases(EncounterChoice.FIGHT)[0]
        flee = self._parser.phrases(EncounterChoice.FLEE)[0]
        return f"Do you fight or flee? ({fight}/{flee})"

    def _on_encounter_choice(self, line: str) -> TurnOutcome:
        if self._pending is None:
            raise InvalidGameStateError(
                "No encounter is pending",
                current_state=self._state,
                expected_states=[ControllerState.AWAITING_ENCOUNTER_CHOICE],
            )
        choice = self._parser.parse_encounter_choice(line)
        if choice is None:
            return self._outcome(None, [self._encounter_prompt()])

        pending = self._pending
        if choice is EncounterChoice.FIGHT:
            return self._fight(None, pending.enemy, pending.loot, [])

        escape = self._combat.attempt_escape(self._player, pending.enemy)
        if escape.escaped:
            self._pending = None
            self._state = ControllerState.EXPLORING
            story = f"You escape from the {pending.enemy.name}."
            self._advance_story(story)
            self._save_session()
            return self._outcome(None, [story])

        return self._fight(
            None,
            pending.enemy,
            pending.loot,
            [f"The {pending.enemy.name} blocks your escape!"],
        )

    def _fight(
        self,
        intent: Intent | None,
        enemy: Enemy,
        loot: list[Item],
        lines: list[str],
    ) -> TurnOutcome:
        self._pending = None
        self._pending_loot = ()
        self._state = ControllerState.EXPLORING

        result = self._combat.engage(self._player, enemy, loot)
        lines = [*lines, f"You attack the {enemy.name}! HP: {enemy.hp}, STR: {enemy.strength}.", *result.log]

        if not result.player_won:
            return self._soft_death(intent, enemy, result, lines)

        self._player.hp = result.player_remaining_hp
        self._active_npcs = [name for name in self._active_npcs if name.lower() != enemy.name.lower()]
        lines.append(f"You have defeated the {enemy.name}!")
        if result.loot:
            self._pending_loot = result.loot
            self._state = ControllerState.AWAITING_LOOT_CHOICE
            lines.append("You see the following loot:")
            lines.extend(f"  {index}. {item}" for index, item in enumerate(result.loot, start=1))
        else:
            lines.append("No loot was found.")

        self._advance_story("\n".join(lines), rescan=False)
        self._save_player()
        self._save_session()
        if self._pending_loot:
            lines.append(self._loot_prompt())
        return self._outcome(intent, lines, combat=result)

    def _soft_death(
        self,
        intent: Intent | None,
        enemy: Enemy,
        result: CombatResult,
        lines: list[str],
    ) -> TurnOutcome:
        revive_hp = self._settings.revive_hp
        self._player.hp = revive_hp
        if self._settings.clear_inventory_on_defeat:
            self._player.inventory = []
        lines.append(
            f"The {enemy.name} defeats you... but against all odds you survive. "
            f"You wake up later with {revive_hp} HP."
        )
        self._save_player()
        story = self.reset()
        logger.info("Player defeated", player=self._player.name, enemy=enemy.name, turns=result.turns)
        return self._outcome(
            intent,
            [*lines, "A new adventure begins.", story],
            combat=result,
            session_reset=True,
            player_defeated=True,
        )

    def _loot_prompt(self) -> str:
        take_all = self._parser.phrases(TAKE_ALL)[0]
        take_none = self._parser.phrases(TAKE_NONE)[0]
        return f"Which items do you take? ({take_all} / {take_none} / numbers such as 1,2)"

    def _on_loot_choice(self, line: str) -> TurnOutcome:
        loot = self._pending_loot
        if not loot:
            raise InvalidGameStateError(
                "No loot is on offer",
                current_state=self._state,
                expected_states=[ControllerState.AWAITING_LOOT_CHOICE],
            )
        picked = self._parser.parse_loot_choice(line, len(loot))
        if picked is None:
            return self._outcome(None, [self._loot_prompt()])

        taken = [loot[index] for index in picked]
        self._pending_loot = ()
        self._state = ControllerState.EXPLORING
        if taken:
            self._player.add_items(taken)
            self._save_player()
            story = "Added to your inventory: " + ", ".join(item.name for item in taken) + "."
        else:
            story = "You leave the loot behind."
        self._advance_story(story, rescan=False)
        self._save_session()
        return self._outcome(None, [story])

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _narrate(self, prompt: str) -> str | None:
        """Ask the narrator for text; None when it fails or says nothing."""
        try:
            text = self._narrator.generate(prompt)
        except DndMasterError as e:
            logger.warning("Narrator failed", error=e.message, **e.details)
            return None
        except Exception:
            logger.exception("Unexpected narrator failure")
            return None
        if not isinstance(text, str) or not text.strip() or text.strip() == NEUTRAL_FILLER:
            return None
        return text.strip()

    def _advance_story(self, story: str, *, rescan: bool = True) -> None:
        self._story = story
        self._summary.update(story)
        if rescan:
            self._active_npcs = self._scanner.scan(story)

    def _save_player(self) -> bool:
        try:
            self._characters.save(self._player)
        except StorageError as e:
            logger.warning("Could not save player", error=e.message, **e.details)
            return False
        return True

    def _save_session(self) -> bool:
        record = SessionRecord(
            story=self._story,
            story_summary=self._summary.text,
            player_name=self._player.name,
            current_location=self._map.current_key,
            map=self._map.to_dict(),
        )
        try:
            self._sessions.save(record)
        except StorageError as e:
            logger.warning("Could not save session", error=e.message, **e.details)
            return False
        return True

    def _outcome(
        self,
        intent: Intent | None,
        messages: list[str],
        *,
        combat: CombatResult | None = None,
        session_reset: bool = False,
        player_defeated: bool = False,
    ) -> TurnOutcome:
        return TurnOutcome(
            intent=intent,
            state=self._state,
            messages=messages,
            story=self._story,
            combat=combat,
            session_reset=session_reset,
            player_defeated=player_defeated,
        )


__all__ = [
    "ControllerState",
    "PendingEncounter",
    "SessionController",
    "TurnOutcome",
]

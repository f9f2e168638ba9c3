"""Integration tests for a scripted play-through with real dice."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from dnd_master.engine.controller import ControllerState, SessionController
from dnd_master.storage import CharacterStore


class TestGameFlow:
    """Drive the controller the way the console does."""

    def test_explore_and_map(self, make_controller: Callable[..., SessionController], make_narrator: type) -> None:
        session = make_controller(narrator=make_narrator(["A quiet field.", "A thorny hedge.", "A cold cellar."]))

        for line in ("go north", "go east", "go down"):
            assert session.handle(line).state == ControllerState.EXPLORING

        shown = session.handle("map").text
        assert "You are here: " in shown
        assert "Other places:" in shown
        assert session.map.location_count == 4
        assert session.map.is_connected()

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5, 6])
    def test_search_and_fight_settles(
        self,
        make_controller: Callable[..., SessionController],
        character_store: CharacterStore,
        seed: int,
    ) -> None:
        session = make_controller(seed=seed)
        session.handle("search")
        assert session.state == ControllerState.AWAITING_ENCOUNTER_CHOICE

        outcome = session.handle("fight")
        if session.state == ControllerState.AWAITING_LOOT_CHOICE:
            outcome = session.handle("all")

        assert session.state == ControllerState.EXPLORING
        assert session.player.hp >= 1
        assert outcome.text
        assert character_store.exists("Aria")

    @pytest.mark.parametrize("seed", [11, 12, 13])
    def test_flee_settles(self, make_controller: Callable[..., SessionController], seed: int) -> None:
        session = make_controller(seed=seed)
        session.handle("zoek")

        outcome = session.handle("vlucht")
        if session.state == ControllerState.AWAITING_LOOT_CHOICE:
            session.handle("nee")

        assert session.state == ControllerState.EXPLORING
        assert outcome.messages

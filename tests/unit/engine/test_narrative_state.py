"""Tests for the rolling summary and the NPC scanner."""

from __future__ import annotations

import pytest

from dnd_master.engine.narrative_state import NpcScanner, RollingSummary


class TestRollingSummary:
    """Tests for RollingSummary."""

    def test_appends_with_space(self) -> None:
        summary = RollingSummary("You wake up.")

        assert summary.update("A door creaks.") == "You wake up. A door creaks."

    def test_ignores_blank_updates(self) -> None:
        summary = RollingSummary("Start.")
        summary.update("   ")

        assert summary.text == "Start."

    def test_cuts_at_sentence_boundary(self) -> None:
        summary = RollingSummary(max_length=40)

        result = summary.update("You wake up. A goblin watches you from the trees.")

        assert result == "A goblin watches you from the trees."

    @pytest.mark.parametrize("budget", [100, 250, 1200])
    def test_never_exceeds_budget(self, budget: int) -> None:
        summary = RollingSummary(max_length=budget)

        for index in range(300):
            summary.update(f"Event number {index} happens! Did it matter? Perhaps.")
            assert len(summary) <= budget

    def test_truncated_summary_starts_after_terminator(self) -> None:
        summary = RollingSummary(max_length=100)
        for index in range(20):
            summary.update(f"Sentence {index} is here.")

        assert summary.text.startswith("Sentence")
        assert summary.text.endswith("Sentence 19 is here.")

    def test_ellipsis_is_one_boundary(self) -> None:
        summary = RollingSummary(max_length=100)

        result = summary.update(
            "You wake up in a dark dungeon. Somewhere, a drop of water falls... "
            + "The torch flickers and dies. " * 3
        )

        assert result.startswith("The torch flickers")
        assert len(result) <= 100

    def test_mixed_terminators_are_one_boundary(self) -> None:
        summary = RollingSummary(max_length=30)

        assert summary.update("Who goes there?! The gate swings open.") == "The gate swings open."

    def test_text_without_terminator_keeps_tail(self) -> None:
        summary = RollingSummary(max_length=10)

        assert summary.update("abcdefghijklmnopqrstuvwxyz") == "qrstuvwxyz"

    def test_reset(self) -> None:
        summary = RollingSummary("Old story.")
        summary.reset("New story.")

        assert str(summary) == "New story."

    def test_invalid_budget(self) -> None:
        with pytest.raises(ValueError):
            RollingSummary(max_length=0)


class TestNpcScanner:
    """Tests for NPC presence detection."""

    def test_finds_known_names(self) -> None:
        scanner = NpcScanner()

        found = scanner.scan("A goblin and a TROLL block the bridge.")

        assert "Goblin" in found
        assert "Troll" in found

    def test_plural_matches(self) -> None:
        assert NpcScanner(["Goblin"]).scan("Three goblins appear.") == ["Goblin"]

    def test_word_boundaries(self) -> None:
        scanner = NpcScanner(["Orc", "Bard"])

        assert scanner.scan("The orchard is quiet and bombarded by rain.") == []

    def test_multi_word_names(self) -> None:
        assert NpcScanner(["Feral wolf"]).scan("A feral  wolf howls.") == []
        assert NpcScanner(["Feral wolf"]).scan("A feral wolf howls.") == ["Feral wolf"]

    def test_empty_text(self) -> None:
        assert NpcScanner().scan("") == []

    @pytest.mark.parametrize(
        ("target", "expected"),
        [
            ("goblin", "Goblin"),
            ("the Goblin", "Goblin"),
            ("goblins", "Goblin"),
            ("de dief", "Dief"),
            ("dragon", None),
            ("the", None),
        ],
    )
    def test_match_target(self, target: str, expected: str | None) -> None:
        assert NpcScanner.match(target, ["Goblin", "Dief"]) == expected

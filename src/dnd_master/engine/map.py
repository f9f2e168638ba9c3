"""Procedurally grown location graph.

The world is not authored up front. Every time the player walks in a
direction the current location has no exit for, a new location is created
and wired in both directions, so the graph stays connected and every move
can be walked back.

Compass moves place locations on a grid; their keys are derived from the
grid cell, and walking into an occupied cell links to the location already
there. Other directions ("up", "into the cave") create off-grid locations.
The graph is a networkx DiGraph whose edges carry the direction.
"""

from __future__ import annotations

import re
from typing import Any

import networkx as nx

from dnd_master.core.constants import (
    NEW_LOCATION_DESCRIPTION,
    NEW_LOCATION_NAME,
    START_LOCATION_DESCRIPTION,
    START_LOCATION_KEY,
    START_LOCATION_NAME,
    UNKNOWN_LOCATION_DESCRIPTION,
    UNKNOWN_LOCATION_NAME,
)
from dnd_master.core.exceptions import MapError
from dnd_master.core.logging import get_logger
from dnd_master.models import Location


logger = get_logger(__name__)


# =============================================================================
# Direction Tables
# =============================================================================


DIRECTION_SYNONYMS: dict[str, str] = {
    "n": "north",
    "north": "north",
    "noord": "north",
    "s": "south",
    "south": "south",
    "z": "south",
    "zuid": "south",
    "e": "east",
    "east": "east",
    "o": "east",
    "oost": "east",
    "w": "west",
    "west": "west",
    "u": "up",
    "up": "up",
    "omhoog": "up",
    "d": "down",
    "down": "down",
    "omlaag": "down",
    "in": "in",
    "inside": "in",
    "binnen": "in",
    "out": "out",
    "outside": "out",
    "buiten": "out",
    "back": "back",
    "terug": "back",
    "forward": "forward",
    "vooruit": "forward",
}

OPPOSITE_DIRECTIONS: dict[str, str] = {
    "north": "south",
    "south": "north",
    "east": "west",
    "west": "east",
    "up": "down",
    "down": "up",
    "in": "out",
    "out": "in",
    "back": "forward",
    "forward": "back",
}

GRID_OFFSETS: dict[str, tuple[int, int]] = {
    "north": (0, 1),
    "south": (0, -1),
    "east": (1, 0),
    "west": (-1, 0),
}

FREEFORM_REVERSE = "back"
"""Reverse direction wired for free-form direction names."""


def normalize_direction(direction: str | None) -> str:
    """Map a direction token onto its canonical name.

    Unknown tokens pass through lower-cased with whitespace collapsed, so
    any phrase can become a direction.

    Args:
        direction: Raw direction text from the player.

    Returns:
        Canonical direction, or "" for empty input.
    """
    if not direction:
        return ""
    token = " ".join(direction.lower().split())
    return DIRECTION_SYNONYMS.get(token, token)


def opposite_direction(direction: str) -> str:
    """Return the direction that leads back along an edge."""
    return OPPOSITE_DIRECTIONS.get(direction, FREEFORM_REVERSE)


def _slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")
    return slug or "path"


# =============================================================================
# Map Service
# =============================================================================


class MapService:
    """Owns the location graph and the player's position in it.

    Example:
        >>> world = MapService()
        >>> world.try_move("n")
        (True, 'loc_0_1')
        >>> world.try_move("south")
        (True, 'start')
    """

    def __init__(self) -> None:
        self._graph: nx.DiGraph = nx.DiGraph()
        self._cells: dict[tuple[int, int], str] = {}
        self._current_key = START_LOCATION_KEY
        self._add_start_location()

    def _add_start_location(self) -> None:
        self._graph.add_node(
            START_LOCATION_KEY,
            name=START_LOCATION_NAME,
            description=START_LOCATION_DESCRIPTION,
            position=(0, 0),
            described=False,
        )
        self._cells[(0, 0)] = START_LOCATION_KEY
        self._current_key = START_LOCATION_KEY

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def current_key(self) -> str:
        return self._current_key

    @property
    def location_count(self) -> int:
        return self._graph.number_of_nodes()

    def has_location(self, key: str) -> bool:
        return self._graph.has_node(key)

    def exits_of(self, key: str) -> dict[str, str]:
        """Direction -> neighbour key for a location (empty if unknown)."""
        if not self._graph.has_node(key):
            return {}
        return {
            data["direction"]: target
            for _, target, data in self._graph.out_edges(key, data=True)
        }

    def get_location(self, key: str) -> Location | None:
        """Snapshot of a location, or None when the key is unknown."""
        if not self._graph.has_node(key):
            return None
        data = self._graph.nodes[key]
        position = data.get("position")
        return Location(
            key=key,
            name=data["name"],
            description=data["description"],
            exits=self.exits_of(key),
            position=tuple(position) if position is not None else None,
            described=bool(data.get("described", False)),
        )

    def locations(self) -> list[Location]:
        return [loc for key in self._graph.nodes if (loc := self.get_location(key))]

    def is_described(self, key: str) -> bool:
        return self.has_location(key) and bool(self._graph.nodes[key].get("described"))

    def get_current_location_name(self) -> str:
        if not self._graph.has_node(self._current_key):
            return UNKNOWN_LOCATION_NAME
        return self._graph.nodes[self._current_key]["name"]

    def get_current_location_description(self) -> str:
        if not self._graph.has_node(self._current_key):
            return UNKNOWN_LOCATION_DESCRIPTION
        return self._graph.nodes[self._current_key]["description"]

    def get_available_exits(self) -> list[str]:
        return list(self.exits_of(self._current_key))

    def is_connected(self) -> bool:
        """True when every location can be reached from the start."""
        if not self._graph.has_node(START_LOCATION_KEY):
            return False
        reachable = nx.descendants(self._graph, START_LOCATION_KEY) | {START_LOCATION_KEY}
        return reachable == set(self._graph.nodes)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def try_move(self, direction: str | None) -> tuple[bool, str]:
        """Move the player, growing the map when the way is unknown.

        Args:
            direction: Raw direction token; synonyms are normalized.

        Returns:
            Tuple of (moved, key of the location the player is now in).
            Only an empty direction fails to move.
        """
        canonical = normalize_direction(direction)
        if not canonical or not self._graph.has_node(self._current_key):
            logger.debug("Move rejected", direction=direction, current=self._current_key)
            return False, self._current_key

        exits = self.exits_of(self._current_key)
        if canonical in exits:
            self._current_key = exits[canonical]
            logger.debug("Followed exit", direction=canonical, key=self._current_key)
            return True, self._current_key

        target = self._neighbour_in_cell(canonical)
        if target is None:
            target = self._create_location(canonical)
        self._link(self._current_key, target, canonical)
        self._current_key = target
        logger.info("Player moved", direction=canonical, key=target)
        return True, target

    def _target_cell(self, direction: str) -> tuple[int, int] | None:
        offset = GRID_OFFSETS.get(direction)
        position = self._graph.nodes[self._current_key].get("position")
        if offset is None or position is None:
            return None
        return (position[0] + offset[0], position[1] + offset[1])

    def _neighbour_in_cell(self, direction: str) -> str | None:
        """Existing location in the grid cell the move lands on, if linkable."""
        cell = self._target_cell(direction)
        if cell is None or cell not in self._cells:
            return None
        key = self._cells[cell]
        if opposite_direction(direction) in self.exits_of(key):
            return None
        return key

    def _create_location(self, direction: str) -> str:
        cell = self._target_cell(direction)
        if cell is not None and cell not in self._cells:
            key = f"loc_{cell[0]}_{cell[1]}"
            position: tuple[int, int] | None = cell
        else:
            key = self._unique_key(f"loc_{_slugify(direction)}")
            position = None

        self._graph.add_node(
            key,
            name=NEW_LOCATION_NAME,
            description=NEW_LOCATION_DESCRIPTION,
            position=position,
            described=False,
        )
        if position is not None:
            self._cells[position] = key
        logger.debug("Location created", key=key, direction=direction, position=position)
        return key

    def _unique_key(self, base: str) -> str:
        index = 1
        while self._graph.has_node(f"{base}_{index}"):
            index += 1
        return f"{base}_{index}"

    def _link(self, source: str, target: str, direction: str) -> None:
        self._graph.add_edge(source, target, direction=direction)
        self._graph.add_edge(target, source, direction=opposite_direction(direction))

    def update_location_description(self, key: str, description: str) -> None:
        """Overwrite a location's description; unknown keys are ignored."""
        if not self._graph.has_node(key):
            return
        self._graph.nodes[key]["description"] = description
        self._graph.nodes[key]["described"] = True

    def update_location_name(self, key: str, name: str) -> None:
        if self._graph.has_node(key) and name.strip():
            self._graph.nodes[key]["name"] = name.strip()

    def set_current_location(self, key: str) -> None:
        """Place the player at an existing location; unknown keys are ignored."""
        if self._graph.has_node(key):
            self._current_key = key

    def reset(self) -> None:
        """Discard the whole graph and start over at the start location."""
        self._graph.clear()
        self._cells.clear()
        self._add_start_location()
        logger.info("Map reset")

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def display_map(self) -> str:
        """Render the explored world as text. Never mutates the graph."""
        lines: list[str] = ["", "=== MAP ===", ""]

        if self._cells:
            xs = [cell[0] for cell in self._cells]
            ys = [cell[1] for cell in self._cells]
            min_x, max_x, min_y, max_y = min(xs), max(xs), min(ys), max(ys)

            for y in range(max_y, min_y - 1, -1):
                room_line: list[str] = []
                name_line: list[str] = []
                for x in range(min_x, max_x + 1):
                    key = self._cells.get((x, y))
                    if key is None:
                        room_line.append(" " * 7)
                        name_line.append(" " * 7)
                    else:
                        marker = "[@]" if key == self._current_key else "[o]"
                        room_line.append(marker.center(7))
                        name_line.append(self._graph.nodes[key]["name"][:7].center(7))
                    if x < max_x:
                        connected = key is not None and self.exits_of(key).get("east") == self._cells.get((x + 1, y))
                        room_line.append("-" if connected else " ")
                        name_line.append(" ")
                lines.append("".join(room_line).rstrip())
                lines.append("".join(name_line).rstrip())

                if y > min_y:
                    vertical: list[str] = []
                    for x in range(min_x, max_x + 1):
                        key = self._cells.get((x, y))
                        below = self._cells.get((x, y - 1))
                        connected = key is not None and below is not None and self.exits_of(key).get("south") == below
                        vertical.append("|".center(7) if connected else " " * 7)
                        if x < max_x:
                            vertical.append(" ")
                    lines.append("".join(vertical).rstrip())

        off_grid = [
            key for key, data in self._graph.nodes(data=True) if data.get("position") is None
        ]
        if off_grid:
            lines.append("")
            lines.append("Other places:")
            for key in off_grid:
                marker = " (you are here)" if key == self._current_key else ""
                lines.append(f"  - {self._graph.nodes[key]['name']} [{key}]{marker}")

        lines.append("")
        lines.append(f"You are here: {self.get_current_location_name()}")
        lines.append(f"  {self.get_current_location_description()}")

        exits = self.get_available_exits()
        if exits:
            lines.append("Exits: " + ", ".join(exits))
        else:
            lines.append("You can go in any direction (north, south, east, west).")
        lines.append("Legend: [@] = you are here | [o] = visited")
        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Node-link JSON of the graph."""
        data = nx.node_link_data(self._graph, edges="edges")
        for node in data["nodes"]:
            if node.get("position") is not None:
                node["position"] = list(node["position"])
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> MapService:
        """Rebuild a map from `to_dict` output.

        Malformed data yields a fresh map rather than an error.
        """
        service = cls()
        if not data:
            return service
        try:
            graph = nx.node_link_graph(data, directed=True, multigraph=False, edges="edges")
            cells: dict[tuple[int, int], str] = {}
            for key, attrs in graph.nodes(data=True):
                if not isinstance(attrs.get("name"), str) or not isinstance(attrs.get("description"), str):
                    raise MapError("Location lacks a name or description", location_key=str(key))
                position = attrs.get("position")
                if position is not None:
                    cell = (int(position[0]), int(position[1]))
                    if cell in cells:
                        raise MapError(f"Grid cell {cell} holds two locations", location_key=str(key))
                    attrs["position"] = cell
                    cells[cell] = key
                attrs["described"] = bool(attrs.get("described", False))
            for _, _, attrs in graph.edges(data=True):
                if not isinstance(attrs.get("direction"), str):
                    raise MapError("Edge without a direction")
            if not graph.has_node(START_LOCATION_KEY):
                raise MapError("Map has no start location", location_key=START_LOCATION_KEY)
        except MapError as exc:
            logger.warning("Discarding malformed map data", error=exc.message, **exc.details)
            return service
        except (KeyError, TypeError, ValueError, IndexError, nx.NetworkXError) as exc:
            logger.warning("Discarding malformed map data", error=str(exc))
            return service

        service._graph = graph
        service._cells = cells
        service._current_key = START_LOCATION_KEY
        return service


__all__ = [
    "DIRECTION_SYNONYMS",
    "OPPOSITE_DIRECTIONS",
    "GRID_OFFSETS",
    "MapService",
    "normalize_direction",
    "opposite_direction",
]

"""World-level records: map locations and the persisted session.

Location is a read-only view of one node of the location graph; the graph
itself lives in the map service. SessionRecord is the JSON document written
to disk between play sessions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dnd_master.core.constants import START_LOCATION_KEY


class Location(BaseModel):
    """Snapshot of a location in the map graph.

    Attributes:
        key: Unique, addressable identifier.
        name: Display name.
        description: Current description (refined by narrative text).
        exits: Canonical direction -> neighbouring location key.
        position: Grid cell for compass-placed locations, None off-grid.
        described: Whether narrative text has described this location.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1)
    name: str
    description: str
    exits: dict[str, str] = Field(default_factory=dict)
    position: tuple[int, int] | None = None
    described: bool = False


class SessionRecord(BaseModel):
    """The persisted session document.

    Missing or null fields are replaced by defaults so older or partial
    files still load; the controller substitutes a fresh opening story for
    a blank one.

    Attributes:
        story: Latest story text shown to the player.
        story_summary: Rolling summary of the narrative so far.
        player_name: Name of the character playing this session.
        current_location: Key of the location the player stands in.
        map: Node-link dump of the location graph, if saved.
        saved_at: When the record was written.
    """

    model_config = ConfigDict(extra="ignore")

    story: str = ""
    story_summary: str = ""
    player_name: str = ""
    current_location: str = START_LOCATION_KEY
    map: dict[str, Any] | None = None
    saved_at: datetime | None = None

    @field_validator("story", "story_summary", "player_name", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("current_location", mode="before")
    @classmethod
    def default_location(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return START_LOCATION_KEY
        return v


__all__ = [
    "Location",
    "SessionRecord",
]

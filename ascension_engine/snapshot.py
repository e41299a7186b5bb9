"""
Engine Snapshot

Typed, versioned serialization of the whole engine state. Every field has
an explicit default so older snapshots missing newer fields still load.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .state import (
    CoreState, ModuleStates, DisciplineState, ProjectionState, LogEntry,
)

SNAPSHOT_VERSION = 1


class SnapshotVersionError(ValueError):
    """Snapshot was written by a newer engine than this one."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(
            f"Snapshot version {version} is newer than supported version {SNAPSHOT_VERSION}"
        )


class EngineSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    version: int = SNAPSHOT_VERSION
    saved_at: Optional[str] = None
    core: CoreState = Field(default_factory=CoreState)
    modules: ModuleStates = Field(default_factory=ModuleStates)
    discipline: DisciplineState = Field(default_factory=DisciplineState)
    projections: ProjectionState = Field(default_factory=ProjectionState)
    logs: List[LogEntry] = Field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineSnapshot":
        """Validate a raw mapping; a missing version is read as version 1."""
        version = int(data.get("version") or 1)
        if version > SNAPSHOT_VERSION:
            raise SnapshotVersionError(version)
        return cls.model_validate({**data, "version": version})

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

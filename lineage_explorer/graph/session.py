"""Exploration sessions: one graph per user exploration, held in memory."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Optional

from lineage_explorer.graph.state import GraphStateModel


@dataclass
class ExplorationSession:
    id: str
    parent: str
    model: GraphStateModel = field(default_factory=GraphStateModel)

    @classmethod
    def start(cls, parent: str, fqn: str) -> "ExplorationSession":
        """Create a session whose graph holds only the root node."""
        session = cls(id=str(uuid.uuid4()), parent=parent)
        session.model.add_root(fqn, parent)
        return session


class ExplorationRegistry:
    """Live sessions keyed by id.  Ending a session discards its graph."""

    def __init__(self) -> None:
        self._sessions: dict[str, ExplorationSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def start(self, parent: str, fqn: str) -> ExplorationSession:
        session = ExplorationSession.start(parent, fqn)
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> Optional[ExplorationSession]:
        return self._sessions.get(session_id)

    def end(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

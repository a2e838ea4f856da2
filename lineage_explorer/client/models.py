"""Data models for lineage API payloads.

These are plain frozen dataclasses parsed from the Data Lineage REST JSON.
``to_json`` renders them back in the camelCase shape the HTTP API returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional


def scope_of(name: str) -> str:
    """Return the ``projects/P/locations/L`` prefix of a lineage resource name."""
    return "/".join(name.split("/")[:4])


@dataclass(frozen=True)
class LineageLink:
    """A directed source -> target edge reported by the lineage backend.

    ``id`` is the link resource name and is the link's identity.  ``process``
    stays ``""`` until a producing process has been resolved.
    """

    id: str
    source: str
    target: str
    process: str = ""
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @property
    def scope(self) -> str:
        return scope_of(self.id)

    def with_process(self, process: str) -> "LineageLink":
        return replace(self, process=process)

    def other_side(self, resource: str) -> str:
        """Return the endpoint that is not *resource*."""
        return self.target if self.source == resource else self.source

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "LineageLink":
        return cls(
            id=payload["name"],
            source=payload.get("source", {}).get("fullyQualifiedName", ""),
            target=payload.get("target", {}).get("fullyQualifiedName", ""),
            process=payload.get("process", ""),
            start_time=payload.get("startTime"),
            end_time=payload.get("endTime"),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.id,
            "source": {"fullyQualifiedName": self.source},
            "target": {"fullyQualifiedName": self.target},
            "process": self.process,
            "startTime": self.start_time,
            "endTime": self.end_time,
        }


@dataclass(frozen=True)
class Process:
    """A lineage process: the job or pipeline that produces links."""

    name: str
    display_name: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)
    origin_source_type: str = ""
    origin_name: str = ""

    @property
    def origin_project(self) -> str:
        return self.origin_name.split(":")[0] if self.origin_name else ""

    @property
    def origin_location(self) -> Optional[str]:
        parts = self.origin_name.split(":", 1)
        return parts[1] if len(parts) == 2 and parts[1] else None

    @property
    def bigquery_job_id(self) -> Optional[str]:
        value = self.attributes.get("bigquery_job_id")
        # Attribute values may arrive wrapped as protobuf Value JSON.
        if isinstance(value, dict):
            value = value.get("stringValue")
        return value or None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Process":
        origin = payload.get("origin") or {}
        return cls(
            name=payload.get("name", ""),
            display_name=payload.get("displayName", ""),
            attributes=dict(payload.get("attributes") or {}),
            origin_source_type=origin.get("sourceType", ""),
            origin_name=origin.get("name", ""),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "attributes": self.attributes,
            "origin": {"sourceType": self.origin_source_type, "name": self.origin_name},
        }

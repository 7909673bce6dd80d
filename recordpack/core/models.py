"""Core data model for recording documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from recordpack.core.types import Tree

TEST_KEY = "test"
DATASET_NAME_KEY = "dataset name"
ARGUMENTS_KEY = "arguments"
VALUES_KEY = "values"


@dataclass(slots=True)
class Recording:
    """Recorded assertion values of one test call."""

    test: str
    values: list[Tree] = field(default_factory=list)
    dataset_name: str | None = None
    arguments: Tree | None = None

    def header(self) -> dict[str, Any]:
        """Metadata that must match between recording and replay."""
        payload: dict[str, Any] = {TEST_KEY: self.test}
        if self.dataset_name:
            payload[DATASET_NAME_KEY] = self.dataset_name
        if self.arguments:
            payload[ARGUMENTS_KEY] = self.arguments
        return payload

    def to_dict(self) -> dict[str, Any]:
        payload = self.header()
        payload[VALUES_KEY] = list(self.values)
        return payload

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Recording":
        values = raw.get(VALUES_KEY)
        return cls(
            test=raw[TEST_KEY],
            values=list(values) if isinstance(values, list) else [],
            dataset_name=raw.get(DATASET_NAME_KEY),
            arguments=raw.get(ARGUMENTS_KEY),
        )

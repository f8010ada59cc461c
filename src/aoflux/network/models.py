"""Value types exchanged with the AO network.

Process and message identifiers are plain strings; everything else the
network hands back is parsed into the frozen dataclasses below.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

ProcessId = str
MessageId = str


def _present(value: Any) -> Any:
    """Map the falsy scalars the network uses for "no value" to None."""
    if value is None or value is False or value == "":
        return None
    return value


@dataclass(frozen=True, slots=True)
class Tag:
    """A single name/value tag. Order within a tag list is significant."""

    name: str
    value: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> Tag:
        return cls(name=str(raw.get("name", "")), value=str(raw.get("value", "")))

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


def coerce_tags(tags: Iterable[Tag | Mapping[str, Any]] | None) -> tuple[Tag, ...]:
    """Turn a sequence of tags or ``{name, value}`` mappings into Tags.

    Order is preserved and duplicates are kept.
    """
    if not tags:
        return ()
    return tuple(t if isinstance(t, Tag) else Tag.from_mapping(t) for t in tags)


class ModuleVariant(enum.Enum):
    """Which execution module a spawned process runs."""

    STANDARD = "standard"
    SQLITE = "sqlite"


@dataclass(frozen=True, slots=True)
class ResultMessage:
    """One message emitted by a process while handling a submission."""

    data: Any = None
    tags: tuple[Tag, ...] = ()
    target: str | None = None
    anchor: str | None = None

    @classmethod
    def from_json(cls, raw: Any) -> ResultMessage:
        if not isinstance(raw, Mapping):
            return cls(data=raw)
        raw_tags = raw.get("Tags")
        tags = (
            coerce_tags(t for t in raw_tags if isinstance(t, Mapping))
            if isinstance(raw_tags, list)
            else ()
        )
        return cls(
            data=raw.get("Data"),
            tags=tags,
            target=raw.get("Target"),
            anchor=raw.get("Anchor"),
        )


@dataclass(frozen=True, slots=True)
class MessageResult:
    """The computed outcome of one message, as served by a compute unit.

    ``error`` takes precedence: when it is set the result is an error
    regardless of what ``messages`` holds.
    """

    error: Any = None
    messages: tuple[ResultMessage, ...] = ()
    output: Any = None
    spawns: tuple[Any, ...] = ()
    gas_used: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @classmethod
    def from_json(cls, raw: Mapping[str, Any]) -> MessageResult:
        """Parse a compute-unit result body. Unknown keys are kept in ``raw``."""
        messages = raw.get("Messages")
        spawns = raw.get("Spawns")
        gas = raw.get("GasUsed")
        return cls(
            error=_present(raw.get("Error")),
            messages=tuple(ResultMessage.from_json(m) for m in messages)
            if isinstance(messages, list)
            else (),
            output=raw.get("Output"),
            spawns=tuple(spawns) if isinstance(spawns, list) else (),
            gas_used=gas if isinstance(gas, int) else None,
            raw=dict(raw),
        )

    def to_json(self) -> dict[str, Any]:
        """Render back to the network's field names, for display."""
        if self.raw:
            return dict(self.raw)
        body: dict[str, Any] = {
            "Messages": [
                {
                    "Data": m.data,
                    "Tags": [t.to_dict() for t in m.tags],
                    "Target": m.target,
                    "Anchor": m.anchor,
                }
                for m in self.messages
            ],
            "Spawns": list(self.spawns),
            "Output": self.output,
        }
        if self.error is not None:
            body["Error"] = self.error
        if self.gas_used is not None:
            body["GasUsed"] = self.gas_used
        return body

"""AO network client and value types."""

from aoflux.network.client import DispatchClient
from aoflux.network.models import (
    MessageId,
    MessageResult,
    ModuleVariant,
    ProcessId,
    ResultMessage,
    Tag,
    coerce_tags,
)

__all__ = [
    "DispatchClient",
    "MessageId",
    "MessageResult",
    "ModuleVariant",
    "ProcessId",
    "ResultMessage",
    "Tag",
    "coerce_tags",
]

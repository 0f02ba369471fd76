"""Conversation context entity."""

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ConversationContext:
    """Opaque continuation token returned by the inference service.

    The token is kept as its exact JSON text so that storing and loading it
    reproduces it byte-for-byte. Nothing in the bot interprets it.

    Attributes:
        raw: JSON text of the token.
    """

    raw: str

    @classmethod
    def from_value(cls, value: Any) -> "ConversationContext":
        """Serialize a JSON-compatible value into a context.

        Args:
            value: Any JSON-serializable value.

        Returns:
            ConversationContext wrapping the serialized value.
        """
        return cls(raw=json.dumps(value, ensure_ascii=False, separators=(",", ":")))

    @property
    def value(self) -> Any:
        """Deserialized token."""
        return json.loads(self.raw)

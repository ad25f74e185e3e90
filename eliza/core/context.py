"""Per-request conversation context schema.

Architectural role:
    Defines the optional context bag passed by UI layers to the direct
    assistant client and to the edge proxy functions. Nothing here is
    persisted; every object is rebuilt from the request payload.

Field naming:
    Python attributes are snake_case; the camelCase names sent by the browser
    UI (`isFounder`, `hashRate`, `recentMessages`, ...) are accepted as aliases.
    Unknown fields are ignored.

Leniency:
    Context is display-only, so validation never rejects a JSON object.
    Flags follow truthiness, text fields stringify scalars, numeric fields
    keep whatever value was sent, `null` falls back to the field default and
    malformed sub-objects or list items are dropped.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ContextModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _flag(value: Any) -> bool:
    return bool(value)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _objects(value: Any) -> list:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, (dict, BaseModel))]


def _object_or_none(value: Any):
    return value if isinstance(value, (dict, BaseModel)) else None


class UserContext(_ContextModel):
    is_founder: bool = Field(default=False, alias="isFounder")
    ip: Optional[str] = None

    @field_validator("is_founder", mode="before")
    @classmethod
    def coerce_founder(cls, value):
        return _flag(value)

    @field_validator("ip", mode="before")
    @classmethod
    def coerce_ip(cls, value):
        return _text(value)


class MiningStats(_ContextModel):
    hash_rate: Any = Field(default=0, alias="hashRate")
    is_online: bool = Field(default=False, alias="isOnline")
    valid_shares: Any = Field(default=0, alias="validShares")
    amount_due: Any = Field(default=0, alias="amountDue")
    amount_paid: Any = Field(default=0, alias="amountPaid")

    @field_validator("is_online", mode="before")
    @classmethod
    def coerce_online(cls, value):
        return _flag(value)

    @field_validator("hash_rate", "valid_shares", "amount_due", "amount_paid", mode="before")
    @classmethod
    def zero_when_null(cls, value):
        return 0 if value is None else value


class HistoryMessage(_ContextModel):
    """One prior turn; `sender == "user"` marks user turns."""

    sender: str = ""
    content: Any = ""

    @field_validator("sender", mode="before")
    @classmethod
    def coerce_sender(cls, value):
        return _text(value) or ""


class ConversationSummary(_ContextModel):
    summary_text: str = Field(default="", alias="summaryText")

    @field_validator("summary_text", mode="before")
    @classmethod
    def coerce_summary(cls, value):
        return _text(value) or ""


class ConversationHistory(_ContextModel):
    recent_messages: List[HistoryMessage] = Field(default_factory=list, alias="recentMessages")
    summaries: List[ConversationSummary] = Field(default_factory=list)

    @field_validator("recent_messages", "summaries", mode="before")
    @classmethod
    def drop_malformed(cls, value):
        return _objects(value)


class SystemVersion(_ContextModel):
    version: Optional[str] = None
    status: Optional[str] = None

    @field_validator("version", "status", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return _text(value)


class ConversationContext(_ContextModel):
    user_context: Optional[UserContext] = Field(default=None, alias="userContext")
    mining_stats: Optional[MiningStats] = Field(default=None, alias="miningStats")
    conversation_history: Optional[ConversationHistory] = Field(
        default=None, alias="conversationHistory"
    )
    system_version: Optional[SystemVersion] = Field(default=None, alias="systemVersion")

    @field_validator(
        "user_context", "mining_stats", "conversation_history", "system_version", mode="before"
    )
    @classmethod
    def drop_malformed_sections(cls, value):
        return _object_or_none(value)

    @classmethod
    def from_payload(cls, payload: Any) -> "ConversationContext":
        """Build a context from a JSON-like dict (anything else -> empty context)."""
        if not isinstance(payload, dict):
            payload = {}
        return cls.model_validate(payload)

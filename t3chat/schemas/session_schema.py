"""Chat session and message records kept in client-side storage."""

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, TypeAdapter

from t3chat.services.title_service import DEFAULT_TITLE

Role = Literal["user", "assistant"]


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(UTC)


def assume_utc(value: datetime) -> datetime:
    """Read timestamps stored without an offset as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(assume_utc)]


class Message(BaseModel):
    """A single turn in a conversation.

    ``content`` grows while the assistant reply streams in and is left alone
    once the exchange finishes.
    """

    id: str
    role: Role
    content: str = ""
    timestamp: UtcDatetime = Field(default_factory=utc_now)


class ChatSession(BaseModel):
    """One persisted conversation."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = DEFAULT_TITLE
    messages: list[Message] = Field(default_factory=list)
    created_at: UtcDatetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: UtcDatetime = Field(default_factory=utc_now, alias="updatedAt")

    @property
    def has_default_title(self) -> bool:
        return self.title == DEFAULT_TITLE

    def first_user_message(self) -> Message | None:
        """Return the earliest user turn, if any."""
        return next((m for m in self.messages if m.role == "user"), None)


SessionList = TypeAdapter(list[ChatSession])

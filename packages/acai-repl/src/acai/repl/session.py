"""Persisted conversation messages.

Models mirror the provider-neutral message shape the agent stores:
``user`` / ``assistant`` / ``tool`` / ``system`` roles, with content as a
plain string or a list of typed parts. camelCase aliases keep the JSON
compatible with the files written by the agent.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

# --- Content parts ---


class TextPart(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["text"] = "text"
    text: str = ""


class ReasoningPart(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["reasoning"] = "reasoning"
    text: str = ""


class ImagePart(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["image"] = "image"
    image: Any = None
    media_type: str | None = Field(default=None, alias="mediaType")


class FilePart(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["file"] = "file"
    data: Any = None
    media_type: str | None = Field(default=None, alias="mediaType")


class ToolCallPart(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["tool-call"] = "tool-call"
    tool_call_id: str = Field(alias="toolCallId")
    tool_name: str = Field(alias="toolName")
    input: Any = None


class ToolOutput(BaseModel):
    type: str = "text"  # text | json | error-text | error-json
    value: Any = None

    @property
    def is_error(self) -> bool:
        return self.type.startswith("error")

    def as_text(self) -> str:
        if self.value is None:
            return ""
        return str(self.value)


class ToolResultPart(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["tool-result"] = "tool-result"
    tool_call_id: str = Field(alias="toolCallId")
    tool_name: str = Field(alias="toolName")
    output: ToolOutput | None = None


UserPart = TextPart | ImagePart | FilePart
AssistantPart = TextPart | ReasoningPart | FilePart | ToolCallPart
ToolPart = ToolResultPart


# --- Messages ---


class SystemModelMessage(BaseModel):
    role: Literal["system"] = "system"
    content: str


class UserModelMessage(BaseModel):
    role: Literal["user"] = "user"
    content: str | list[UserPart]


class AssistantModelMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str | list[AssistantPart]


class ToolModelMessage(BaseModel):
    role: Literal["tool"] = "tool"
    content: list[ToolPart] = Field(default_factory=list)


SessionMessage = SystemModelMessage | UserModelMessage | AssistantModelMessage | ToolModelMessage

_messages_adapter: TypeAdapter[list[SessionMessage]] = TypeAdapter(list[SessionMessage])


class SessionFormatError(ValueError):
    """Persisted messages could not be parsed."""


def parse_messages(data: list[dict[str, Any]] | str | bytes) -> list[SessionMessage]:
    """Validate raw messages, either already decoded or as a JSON document."""
    try:
        if isinstance(data, (str, bytes)):
            return _messages_adapter.validate_json(data)
        return _messages_adapter.validate_python(data)
    except ValidationError as exc:
        raise SessionFormatError(f"invalid session messages: {exc.error_count()} error(s)") from exc


def text_of(message: UserModelMessage | AssistantModelMessage) -> str:
    """Text parts of a message joined by newlines."""
    if isinstance(message.content, str):
        return message.content
    return "\n".join(part.text for part in message.content if isinstance(part, TextPart))


def reasoning_of(message: AssistantModelMessage) -> str:
    if isinstance(message.content, str):
        return ""
    return "\n".join(part.text for part in message.content if isinstance(part, ReasoningPart))


def tool_calls_of(message: AssistantModelMessage) -> list[ToolCallPart]:
    if isinstance(message.content, str):
        return []
    return [part for part in message.content if isinstance(part, ToolCallPart)]

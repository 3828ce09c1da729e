from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, field_serializer


class MessageRole(Enum):
    SYSTEM = "system"
    ASSISTANT = "assistant"
    USER = "user"
    FUNCTION = "function"
    TOOL = "tool"


class FunctionCall(BaseModel):
    name: str
    arguments: str


class Message(BaseModel):
    """A chat message as sent to the completion endpoint.

    Only ``content``, ``role``, ``name`` and ``function_call`` are kept;
    any other field on the input is ignored during validation. Roles
    outside :class:`MessageRole` and non-string content (e.g. a list of
    content parts) are passed through as given.
    """

    role: MessageRole | str
    content: Any = None
    name: str | None = None
    function_call: FunctionCall | None = None

    @field_serializer('role')
    def serialize_role(self, role: MessageRole | str, _info) -> str:
        if isinstance(role, MessageRole):
            return role.value
        return role


def clean_messages(
        messages: Iterable[Message | Mapping[str, Any]]
) -> list[dict[str, Any]]:
    """Reduce messages to the four fields the endpoint accepts.

    Fields the caller never set are left out of the result; an explicit
    ``None`` (e.g. the content of a function-call message) is kept.
    """
    cleaned = []
    for message in messages:
        if not isinstance(message, Message):
            message = Message.model_validate(message)
        cleaned.append(message.model_dump(exclude_unset=True))
    return cleaned

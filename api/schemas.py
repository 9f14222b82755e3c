"""Pydantic schemas for the table API and websocket messages."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


# Client -> server
class InputMessage(BaseModel):
    """Answer to the last prompt."""

    model_config = ConfigDict(str_strip_whitespace=True)

    type: Literal["input"]
    value: str = Field(..., max_length=64, description="Raw answer, e.g. 'h', 's', '2' or 'y'")


# Server -> client
class PromptMessage(BaseModel):
    """Question addressed to one player."""

    type: Literal["prompt"] = "prompt"
    text: str


class PrintMessage(BaseModel):
    """Log line shown to every player."""

    type: Literal["print"] = "print"
    text: str


class ErrorMessage(BaseModel):
    """Rejected join or malformed message."""

    type: Literal["error"] = "error"
    message: str


ServerMessage = Annotated[Union[PromptMessage, PrintMessage, ErrorMessage], Field(discriminator="type")]

_server_message = TypeAdapter(ServerMessage)


def parse_server_message(raw: str | bytes) -> PromptMessage | PrintMessage | ErrorMessage:
    """
    Decode one message sent to a seat.

    Raises:
        pydantic.ValidationError: Not JSON, or not a known message type
    """
    return _server_message.validate_json(raw)


# Table status
class PlayerStatusResponse(BaseModel):
    """One seat at the table."""

    name: str
    connected: bool
    total_score: int | None = None
    active: bool | None = None


class TableStatusResponse(BaseModel):
    """Current table state."""

    expected_players: int
    started: bool
    phase: str | None = None
    round: int | None = None
    players: list[PlayerStatusResponse]
    last_winners: list[str] = Field(default_factory=list)

"""Client-to-server message schemas.

Every inbound payload is parsed here before it reaches the coordinator.
``v`` is the protocol version; only version 1 exists.
"""
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

PROTOCOL_VERSION = 1

RoomCode = Annotated[str, Field(min_length=1, max_length=16)]


class Message(BaseModel):
    model_config = ConfigDict(extra='ignore', str_strip_whitespace=True)

    v: Literal[1] = PROTOCOL_VERSION


class JoinRoom(Message):
    room: RoomCode


class _Action(Message):
    room: RoomCode
    # Remaining seconds as seen by the acting client
    currentTime: Optional[int] = Field(default=None, ge=0)
    # Turn number from the last turnChanged/startGame; omitted by older clients
    turn: Optional[int] = Field(default=None, ge=1)


class SkipAction(_Action):
    action: Literal['skip']


class WrongAnswerAction(_Action):
    action: Literal['wrongAnswer']


class TimeoutAction(_Action):
    action: Literal['timeout']


PlayerAction = Annotated[
    Union[SkipAction, WrongAnswerAction, TimeoutAction],
    Field(discriminator='action'),
]
_player_action = TypeAdapter(PlayerAction)


class UpdateTimer(Message):
    room: RoomCode
    timeLeft: int = Field(ge=0)


class PlayerMove(Message):
    room: RoomCode
    answer: str = Field(default='', max_length=256)
    isCorrect: bool


class PlayerFinished(Message):
    room: RoomCode


def parse_action(data):
    return _player_action.validate_python(data or {})


def parse(model, data):
    """Validate ``data`` against ``model``; raises pydantic's ValidationError."""
    return model.model_validate(data or {})


__all__ = [
    'JoinRoom',
    'PlayerAction',
    'PlayerFinished',
    'PlayerMove',
    'PROTOCOL_VERSION',
    'SkipAction',
    'TimeoutAction',
    'UpdateTimer',
    'ValidationError',
    'WrongAnswerAction',
    'parse',
    'parse_action',
]

"""Match domain services: room registry, turn/timer coordination and
turn deadlines.

This package contains pure(ish) domain logic that should be imported by
socket handlers, keeping transport concerns separated from the core turn
mechanics. Mutating operations return a list of ``Emission`` objects that
the transport layer delivers.
"""

from .rooms import Emission, JoinResult, Room, RoomError, RoomFull, RoomNotFound, RoomRegistry, RoomStatus
from .turns import ACTIONS, TurnCoordinator

__all__ = [
    'ACTIONS',
    'Emission',
    'JoinResult',
    'Room',
    'RoomError',
    'RoomFull',
    'RoomNotFound',
    'RoomRegistry',
    'RoomStatus',
    'TurnCoordinator',
]

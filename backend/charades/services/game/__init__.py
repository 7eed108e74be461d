"""Game domain services: rooms, turns, timers and scoring.

Transport-free logic imported by the Socket.IO handlers and HTTP routes.
``registry`` and ``turns`` are the process-wide instances; ``create_app``
binds them to the configured app and Socket.IO server.
"""
from .errors import (
    GameError,
    InvalidConfig,
    InvalidPayload,
    InvalidTeam,
    NoEligibleWords,
    NotInRoom,
    RoomNotFound,
    StaleAction,
    TurnInProgress,
)
from .rooms import Player, Room, RoomConfig, RoomRegistry, Turn, TurnStatus
from .scoring import Difficulty, score_turn
from .turns import TurnOutcome, TurnStateMachine

registry = RoomRegistry()
turns = TurnStateMachine()

import enum
import logging
import random
import string
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional

from .errors import InvalidConfig, InvalidTeam, RoomNotFound

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class RoomConfig:
    name: str
    mode: str
    team_names: tuple
    duration: int

    @classmethod
    def from_payload(cls, data, default_duration=60, max_duration=600):
        """Build a config from a create-room payload.

        Accepts both ``name``/``mode`` and the older ``roomName``/``gameType``
        keys. ``duration`` may arrive as a string; unusable values fall back
        to ``default_duration``.
        """
        data = data or {}
        if not isinstance(data, dict):
            raise InvalidConfig('Room settings must be an object')
        teams = data.get('teamNames')
        if not isinstance(teams, (list, tuple)) or not teams:
            raise InvalidConfig('At least one team name is required')
        team_names = tuple(str(t).strip() for t in teams)
        if any(not t for t in team_names):
            raise InvalidConfig('Team names cannot be blank')
        if len(set(team_names)) != len(team_names):
            raise InvalidConfig('Team names must be unique')
        try:
            duration = int(data.get('duration'))
        except (TypeError, ValueError):
            duration = default_duration
        if duration <= 0:
            duration = default_duration
        duration = min(duration, max_duration)
        return cls(
            name=str(data.get('name') or data.get('roomName') or ''),
            mode=str(data.get('mode') or data.get('gameType') or ''),
            team_names=team_names,
            duration=duration,
        )

    def to_dict(self):
        return {
            'name': self.name,
            'mode': self.mode,
            'teamNames': list(self.team_names),
            'duration': self.duration,
        }


@dataclass
class Player:
    id: str
    name: str
    team: str

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'team': self.team}


class TurnStatus(str, enum.Enum):
    # Idle is the absence of a turn; "awaiting word" is the requester's
    # options screen and is never stored on the room.
    WORD_REVEALED = 'word_revealed'
    ACTING = 'acting'
    RESOLVED = 'resolved'


@dataclass
class Turn:
    actor: str
    term: object
    category: str
    difficulty: str
    status: TurnStatus = TurnStatus.WORD_REVEALED
    start_time: Optional[float] = None

    def summary(self, actor_name=None, remaining=None):
        """Public view of the turn. Never includes the secret term."""
        return {
            'actor': self.actor,
            'actorName': actor_name,
            'category': self.category,
            'difficulty': self.difficulty,
            'status': self.status.value,
            'remaining': remaining,
        }


@dataclass
class Room:
    code: str
    config: RoomConfig
    players: List[Player] = field(default_factory=list)
    scores: Dict[str, int] = field(default_factory=dict)
    turn: Optional[Turn] = None
    timer: Optional[object] = None
    last_activity: float = 0.0
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def find_player(self, sid) -> Optional[Player]:
        for p in self.players:
            if p.id == sid:
                return p
        return None

    def touch(self, now):
        self.last_activity = now

    def lobby_payload(self):
        return {
            'players': [p.to_dict() for p in self.players],
            'config': self.config.to_dict(),
            'scores': dict(self.scores),
        }

    def to_dict(self):
        payload = self.lobby_payload()
        payload['roomCode'] = self.code
        turn = self.turn
        if turn is None:
            payload['turn'] = None
        else:
            actor = self.find_player(turn.actor)
            remaining = self.timer.remaining if self.timer is not None else None
            payload['turn'] = turn.summary(actor.name if actor else None, remaining)
        return payload


def generate_room_code(length=4, rng=random):
    return ''.join(rng.choices(CODE_ALPHABET, k=length))


class RoomRegistry:
    """The only place rooms are created, looked up and torn down."""

    def __init__(self, code_length: int = 4, clock: Callable[[], float] = time.monotonic):
        self.code_length = code_length
        self.clock = clock
        self._rooms: Dict[str, Room] = {}
        self._sid_to_code: Dict[str, str] = {}
        self._lock = threading.Lock()

    def configure(self, code_length=4, clock=time.monotonic):
        self.code_length = int(code_length)
        self.clock = clock

    def create_room(self, config: RoomConfig) -> Room:
        # Retry on collision; the code space is small but never exhausted in practice
        with self._lock:
            while True:
                code = generate_room_code(self.code_length)
                if code not in self._rooms:
                    break
            room = Room(code=code, config=config, scores={t: 0 for t in config.team_names})
            room.touch(self.clock())
            self._rooms[code] = room
        logger.info(f"[room-create] room={code} teams={list(config.team_names)} duration={config.duration}s")
        return room

    def get(self, code) -> Optional[Room]:
        if not isinstance(code, str):
            return None
        return self._rooms.get(code)

    def lookup_room(self, code) -> Room:
        room = self.get(code)
        if room is None:
            raise RoomNotFound()
        return room

    def join_room(self, code, sid, player_name, team_name) -> Player:
        room = self.lookup_room(code)
        # The team set is fixed at creation
        if not isinstance(team_name, str) or team_name not in room.scores:
            raise InvalidTeam(f'Unknown team "{team_name}"')
        # A connection sits in at most one room; rejoining replaces the old entry
        self._detach(sid)
        with room.lock:
            player = Player(id=sid, name=str(player_name or 'Player'), team=team_name)
            room.players.append(player)
            room.touch(self.clock())
        with self._lock:
            self._sid_to_code[sid] = room.code
        logger.info(f"[room-join] room={room.code} player={player.name} team={team_name}")
        return player

    def room_of(self, sid) -> Optional[Room]:
        code = self._sid_to_code.get(sid)
        return self._rooms.get(code) if code else None

    def leave(self, sid) -> Optional[Room]:
        """Drop the player behind ``sid`` from its room. Returns that room, if any."""
        return self._detach(sid)

    def _detach(self, sid) -> Optional[Room]:
        with self._lock:
            code = self._sid_to_code.pop(sid, None)
        room = self._rooms.get(code) if code else None
        if room is None:
            return None
        with room.lock:
            room.players = [p for p in room.players if p.id != sid]
            room.touch(self.clock())
        logger.info(f"[room-leave] room={room.code} sid={sid} remaining={len(room.players)}")
        return room

    def remove(self, code) -> Optional[Room]:
        with self._lock:
            room = self._rooms.pop(code, None)
            if room is not None:
                for p in room.players:
                    self._sid_to_code.pop(p.id, None)
        if room is not None and room.timer is not None:
            room.timer.cancel()
        return room

    def sweep_idle(self, max_idle: float) -> List[str]:
        """Remove empty rooms untouched for ``max_idle`` seconds."""
        now = self.clock()
        expired = [
            code for code, room in list(self._rooms.items())
            if not room.players and room.turn is None and now - room.last_activity >= max_idle
        ]
        for code in expired:
            self.remove(code)
        if expired:
            logger.info(f"[room-sweep] removed={expired}")
        return expired

    def __iter__(self) -> Iterator[Room]:
        return iter(list(self._rooms.values()))

    def __len__(self):
        return len(self._rooms)

    def clear(self):
        for code in list(self._rooms):
            self.remove(code)
        self._sid_to_code.clear()

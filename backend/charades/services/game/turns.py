import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .broadcast import RecordingBroadcaster, SocketIOBroadcaster
from .errors import NoEligibleWords, NotInRoom, StaleAction, TurnInProgress
from .rooms import Room, Turn, TurnStatus
from .scoring import Difficulty, score_turn
from .timer import TurnTimer
from .words import WordProvider

logger = logging.getLogger(__name__)

UNKNOWN_TEAM = 'Unknown'


@dataclass
class TurnOutcome:
    success: bool
    word: str
    score: int = 0
    team: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self):
        payload = {'success': self.success, 'word': self.word}
        if self.success:
            payload['score'] = self.score
            payload['team'] = self.team
        if self.reason:
            payload['reason'] = self.reason
        return payload


class TurnStateMachine:
    """Owns the single in-flight turn of each room.

    Every transition runs under the room's lock, so a manual "found" and the
    timer's expiry cannot both resolve the same turn: whichever takes the lock
    first moves the turn out of ``ACTING`` and the other becomes a no-op.
    """

    def __init__(
        self,
        broadcaster=None,
        words=None,
        clock: Callable[[], float] = time.monotonic,
        timer_autostart: bool = False,
        start_task: Optional[Callable] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.broadcaster = broadcaster or RecordingBroadcaster()
        self.words = words or WordProvider()
        self.clock = clock
        self.timer_autostart = timer_autostart
        self._start_task = start_task
        self._sleep = sleep

    def init_app(self, app, socketio, clock=None):
        self.broadcaster = SocketIOBroadcaster(socketio)
        self.words = WordProvider()
        self.clock = clock or time.monotonic
        self.timer_autostart = bool(app.config.get('TURN_TIMER_AUTOSTART', True))
        self._start_task = socketio.start_background_task
        self._sleep = socketio.sleep

    def request_turn_setup(self, room: Room, sid: str) -> None:
        self.broadcaster.to_sid(sid, 'show_turn_options', {
            'categories': self.words.categories(),
            'difficulties': self.words.difficulties(),
        })

    def select_word(self, room: Room, sid: str, category: str, difficulty: str) -> Turn:
        if room.find_player(sid) is None:
            raise NotInRoom()
        try:
            difficulty = Difficulty(difficulty).value
        except ValueError:
            raise NoEligibleWords()
        with room.lock:
            current = room.turn
            if current is not None and current.status != TurnStatus.RESOLVED:
                # The actor may re-roll their own word until they start acting
                if not (current.actor == sid and current.status == TurnStatus.WORD_REVEALED):
                    raise TurnInProgress()
            term = self.words.select_term(category, difficulty)
            if term is None:
                raise NoEligibleWords()
            turn = Turn(actor=sid, term=term, category=category, difficulty=difficulty)
            room.turn = turn
            room.touch(self.clock())
            logger.info(f"[turn-reveal] room={room.code} actor={sid} category={category} difficulty={difficulty}")
            self.broadcaster.to_room(room.code, 'gamer_getting_ready', None, skip_sid=sid)
            self.broadcaster.to_sid(sid, 'receive_word', term.to_dict())
        return turn

    def begin_acting(self, room: Room, sid: str) -> Turn:
        with room.lock:
            turn = room.turn
            if turn is None or turn.status != TurnStatus.WORD_REVEALED:
                raise StaleAction()
            turn.status = TurnStatus.ACTING
            turn.start_time = self.clock()
            duration = room.config.duration
            room.touch(turn.start_time)
            self.broadcaster.to_room(room.code, 'game_started', {'duration': duration})
            if room.timer is not None:
                room.timer.cancel()
            room.timer = TurnTimer(
                duration,
                on_expire=lambda: self.handle_timeout(room, turn),
                on_tick=lambda remaining: self._broadcast_tick(room, turn, remaining),
                start_task=self._start_task if self.timer_autostart else None,
                sleep=self._sleep,
                label=f"room={room.code}",
            )
            logger.info(f"[turn-start] room={room.code} actor={turn.actor} duration={duration}s")
            room.timer.start()
        return turn

    def resolve_found(self, room: Room, sid: str) -> TurnOutcome:
        with room.lock:
            turn = room.turn
            if turn is None or turn.status != TurnStatus.ACTING:
                raise StaleAction()
            self._stop_timer(room)
            total = room.config.duration
            time_taken = self.clock() - turn.start_time
            time_remaining = max(0, total - time_taken)
            points = score_turn(turn.difficulty, time_remaining, total)
            player = room.find_player(sid)
            if player is not None:
                room.scores[player.team] += points
            outcome = TurnOutcome(
                success=True,
                word=turn.term.word,
                score=points,
                team=player.team if player else UNKNOWN_TEAM,
            )
            logger.info(
                f"[turn-found] room={room.code} by={sid} team={outcome.team} score={points} remaining={time_remaining:.1f}s"
            )
            self._finish(room, turn, outcome)
        return outcome

    def handle_timeout(self, room: Room, turn: Turn) -> Optional[TurnOutcome]:
        """Timer expiry. A no-op when ``turn`` already left ``ACTING``."""
        with room.lock:
            if room.turn is not turn or turn.status != TurnStatus.ACTING:
                logger.info(f"[turn-timeout-skip] room={room.code} turn already resolved")
                return None
            room.timer = None
            outcome = TurnOutcome(success=False, word=turn.term.word)
            logger.info(f"[turn-timeout] room={room.code} actor={turn.actor}")
            self._finish(room, turn, outcome)
        return outcome

    def abandon_turn(self, room: Room, sid: str) -> Optional[TurnOutcome]:
        """End the turn of an actor who left the room."""
        with room.lock:
            turn = room.turn
            if turn is None or turn.actor != sid:
                return None
            self._stop_timer(room)
            outcome = TurnOutcome(success=False, word=turn.term.word, reason='actor_left')
            logger.info(f"[turn-abandon] room={room.code} actor={sid}")
            self._finish(room, turn, outcome)
        return outcome

    def snapshot_for_joiner(self, room: Room, sid: str) -> None:
        with room.lock:
            turn = room.turn
            if turn is None or turn.status != TurnStatus.ACTING:
                return
            actor = room.find_player(turn.actor)
            remaining = room.timer.remaining if room.timer is not None else None
            self.broadcaster.to_sid(sid, 'game_in_progress', turn.summary(actor.name if actor else None, remaining))

    def _broadcast_tick(self, room: Room, turn: Turn, remaining: int) -> None:
        with room.lock:
            if room.turn is not turn or turn.status != TurnStatus.ACTING:
                return
            self.broadcaster.to_room(room.code, 'timer_tick', {'remaining': remaining})

    def _stop_timer(self, room: Room) -> None:
        if room.timer is not None:
            room.timer.cancel()
            room.timer = None

    def _finish(self, room: Room, turn: Turn, outcome: TurnOutcome) -> None:
        turn.status = TurnStatus.RESOLVED
        room.turn = None
        room.touch(self.clock())
        self.broadcaster.to_room(room.code, 'turn_ended', outcome.to_dict())
        self.broadcaster.to_room(room.code, 'update_scores', dict(room.scores))

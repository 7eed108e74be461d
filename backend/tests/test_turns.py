import pytest

from charades.services.game import (
    NoEligibleWords,
    NotInRoom,
    RoomConfig,
    RoomRegistry,
    StaleAction,
    TurnInProgress,
    TurnStateMachine,
    TurnStatus,
)
from charades.services.game.broadcast import RecordingBroadcaster
from charades.services.game.words import ANY_CATEGORY, Term
from conftest import FakeClock


class FakeWords:
    def __init__(self, terms):
        self.terms = terms

    def select_term(self, category, difficulty):
        for t in self.terms:
            if t.difficulty == difficulty and (category == ANY_CATEGORY or t.category == category):
                return t
        return None

    def categories(self):
        return sorted({t.category for t in self.terms})

    def difficulties(self):
        return ['Easy', 'Medium', 'Hard']


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def machine(broadcaster, clock):
    words = FakeWords([Term('Titanic', 'Movie', 'Easy'), Term('Rap God', 'Song', 'Hard')])
    return TurnStateMachine(broadcaster=broadcaster, words=words, clock=clock)


@pytest.fixture()
def room(clock):
    registry = RoomRegistry(clock=clock)
    room = registry.create_room(RoomConfig.from_payload({'teamNames': ['Red', 'Blue'], 'duration': 60}))
    registry.join_room(room.code, 'actor', 'Pat', 'Red')
    registry.join_room(room.code, 'guesser', 'Sam', 'Blue')
    return room


def names(broadcaster):
    return [s[2] for s in broadcaster.sent]


def start_turn(machine, room, broadcaster, category='Movie', difficulty='Easy'):
    machine.select_word(room, 'actor', category, difficulty)
    machine.begin_acting(room, 'actor')
    broadcaster.clear()
    return room.turn


def test_turn_setup_only_answers_the_requester(machine, room, broadcaster):
    machine.request_turn_setup(room, 'guesser')
    assert broadcaster.sent == [
        ('sid', 'guesser', 'show_turn_options', {'categories': ['Movie', 'Song'], 'difficulties': ['Easy', 'Medium', 'Hard']}, None),
    ]
    assert room.turn is None


def test_select_word_reveals_privately(machine, room, broadcaster):
    turn = machine.select_word(room, 'actor', 'Movie', 'Easy')
    assert turn.status == TurnStatus.WORD_REVEALED
    assert room.turn is turn
    assert broadcaster.sent == [
        ('room', room.code, 'gamer_getting_ready', None, 'actor'),
        ('sid', 'actor', 'receive_word', {'word': 'Titanic', 'category': 'Movie', 'difficulty': 'Easy'}, None),
    ]


def test_any_category_matches_everything(machine, room):
    turn = machine.select_word(room, 'actor', ANY_CATEGORY, 'Hard')
    assert turn.term.word == 'Rap God'


def test_no_matching_words_leaves_turn_unset(machine, room, broadcaster):
    with pytest.raises(NoEligibleWords):
        machine.select_word(room, 'actor', 'Movie', 'Hard')
    with pytest.raises(NoEligibleWords):
        machine.select_word(room, 'actor', 'Movie', 'Impossible')
    assert room.turn is None
    assert broadcaster.sent == []


def test_begin_acting_without_revealed_word_is_ignored(machine, room, broadcaster):
    with pytest.raises(StaleAction):
        machine.begin_acting(room, 'actor')
    assert room.timer is None
    assert broadcaster.sent == []


def test_begin_acting_starts_timer_and_broadcasts_duration(machine, room, broadcaster, clock):
    machine.select_word(room, 'actor', 'Movie', 'Easy')
    broadcaster.clear()
    turn = machine.begin_acting(room, 'actor')
    assert turn.status == TurnStatus.ACTING
    assert turn.start_time == clock()
    assert room.timer is not None and room.timer.remaining == 60
    assert broadcaster.sent == [('room', room.code, 'game_started', {'duration': 60}, None)]
    with pytest.raises(StaleAction):
        machine.begin_acting(room, 'actor')


def test_found_halfway_scores_for_resolvers_team(machine, room, broadcaster, clock):
    start_turn(machine, room, broadcaster)
    timer = room.timer
    clock.advance(30)
    outcome = machine.resolve_found(room, 'actor')
    assert outcome.score == 45
    assert outcome.team == 'Red'
    assert room.scores == {'Red': 45, 'Blue': 0}
    assert room.turn is None and room.timer is None
    assert timer.cancelled
    assert broadcaster.sent == [
        ('room', room.code, 'turn_ended', {'success': True, 'word': 'Titanic', 'score': 45, 'team': 'Red'}, None),
        ('room', room.code, 'update_scores', {'Red': 45, 'Blue': 0}, None),
    ]


def test_found_after_deadline_scores_half(machine, room, broadcaster, clock):
    start_turn(machine, room, broadcaster)
    clock.advance(90)
    assert machine.resolve_found(room, 'guesser').score == 30
    assert room.scores == {'Red': 0, 'Blue': 30}


def test_unknown_resolver_resolves_without_scoring(machine, room, broadcaster, clock):
    start_turn(machine, room, broadcaster)
    clock.advance(10)
    outcome = machine.resolve_found(room, 'spectator')
    assert outcome.team == 'Unknown'
    assert room.scores == {'Red': 0, 'Blue': 0}
    assert room.turn is None


def test_timer_expiry_resolves_as_failure_once(machine, room, broadcaster):
    start_turn(machine, room, broadcaster)
    timer = room.timer
    for _ in range(60):
        timer.tick()
    for _ in range(5):
        timer.tick()
    ended = [s[3] for s in broadcaster.sent if s[2] == 'turn_ended']
    assert ended == [{'success': False, 'word': 'Titanic'}]
    assert names(broadcaster).count('update_scores') == 1
    assert names(broadcaster).count('timer_tick') == 59
    assert room.scores == {'Red': 0, 'Blue': 0}
    assert room.turn is None and room.timer is None


def test_found_after_timeout_is_a_no_op(machine, room, broadcaster, clock):
    start_turn(machine, room, broadcaster)
    timer = room.timer
    for _ in range(60):
        timer.tick()
    broadcaster.clear()
    clock.advance(61)
    with pytest.raises(StaleAction):
        machine.resolve_found(room, 'actor')
    assert broadcaster.sent == []
    assert room.scores == {'Red': 0, 'Blue': 0}


def test_late_expiry_after_found_is_a_no_op(machine, room, broadcaster, clock):
    turn = start_turn(machine, room, broadcaster)
    timer = room.timer
    clock.advance(59.5)
    machine.resolve_found(room, 'actor')
    broadcaster.clear()
    # The timer is cancelled, and an expiry that was already in flight changes nothing
    assert timer.tick() is False
    assert machine.handle_timeout(room, turn) is None
    assert broadcaster.sent == []
    assert room.scores['Red'] == 30


def test_second_turn_request_while_acting_is_rejected(machine, room, broadcaster):
    start_turn(machine, room, broadcaster)
    with pytest.raises(TurnInProgress):
        machine.select_word(room, 'guesser', 'Song', 'Hard')
    with pytest.raises(TurnInProgress):
        machine.select_word(room, 'actor', 'Song', 'Hard')
    assert room.turn.term.word == 'Titanic'


def test_only_the_actor_may_reroll_a_revealed_word(machine, room):
    machine.select_word(room, 'actor', 'Movie', 'Easy')
    with pytest.raises(TurnInProgress):
        machine.select_word(room, 'guesser', 'Song', 'Hard')
    turn = machine.select_word(room, 'actor', 'Song', 'Hard')
    assert room.turn is turn
    assert turn.term.word == 'Rap God'


def test_new_turn_allowed_after_resolution(machine, room, broadcaster, clock):
    start_turn(machine, room, broadcaster)
    machine.resolve_found(room, 'actor')
    turn = machine.select_word(room, 'guesser', 'Song', 'Hard')
    assert turn.actor == 'guesser'


def test_actor_leaving_mid_turn_abandons_it(machine, room, broadcaster):
    start_turn(machine, room, broadcaster)
    timer = room.timer
    assert machine.abandon_turn(room, 'guesser') is None
    outcome = machine.abandon_turn(room, 'actor')
    assert outcome.to_dict() == {'success': False, 'word': 'Titanic', 'reason': 'actor_left'}
    assert timer.cancelled
    assert room.turn is None
    assert names(broadcaster) == ['turn_ended', 'update_scores']


def test_actor_leaving_before_acting_ends_turn_for_everyone(machine, room, broadcaster):
    machine.select_word(room, 'actor', 'Movie', 'Easy')
    broadcaster.clear()
    outcome = machine.abandon_turn(room, 'actor')
    assert outcome.to_dict() == {'success': False, 'word': 'Titanic', 'reason': 'actor_left'}
    assert room.turn is None
    assert broadcaster.sent == [
        ('room', room.code, 'turn_ended', {'success': False, 'word': 'Titanic', 'reason': 'actor_left'}, None),
        ('room', room.code, 'update_scores', {'Red': 0, 'Blue': 0}, None),
    ]


def test_outsider_cannot_take_a_turn(machine, room, broadcaster):
    with pytest.raises(NotInRoom):
        machine.select_word(room, 'outsider', 'Movie', 'Easy')
    assert room.turn is None
    assert broadcaster.sent == []
    assert machine.select_word(room, 'actor', 'Movie', 'Easy').actor == 'actor'


def test_tick_in_flight_after_found_is_not_broadcast(machine, room, broadcaster, clock):
    start_turn(machine, room, broadcaster)
    timer = room.timer
    clock.advance(10)
    machine.resolve_found(room, 'actor')
    broadcaster.clear()
    # A tick callback that was already past the timer's lock when the turn resolved
    timer._on_tick(49)
    assert broadcaster.sent == []


def test_joiner_snapshot_hides_the_term(machine, room, broadcaster):
    machine.snapshot_for_joiner(room, 'late')
    assert broadcaster.sent == []
    start_turn(machine, room, broadcaster)
    room.timer.tick()
    broadcaster.clear()
    machine.snapshot_for_joiner(room, 'late')
    [(kind, target, event, payload, _)] = broadcaster.sent
    assert (kind, target, event) == ('sid', 'late', 'game_in_progress')
    assert payload['actorName'] == 'Pat'
    assert payload['remaining'] == 59
    assert payload['status'] == 'acting'
    assert 'Titanic' not in str(payload)

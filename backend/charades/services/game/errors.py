class GameError(Exception):
    """Recoverable failure reported back to the requesting connection only."""

    code = 'game_error'
    message = 'Something went wrong'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {'code': self.code, 'message': self.message}


class RoomNotFound(GameError):
    code = 'room_not_found'
    message = 'Room not found!'


class NoEligibleWords(GameError):
    code = 'no_eligible_words'
    message = 'No words found for these settings! Add more in Admin.'


class TurnInProgress(GameError):
    code = 'turn_in_progress'
    message = 'Another turn is already in progress'


class InvalidTeam(GameError):
    code = 'invalid_team'
    message = 'That team does not exist in this room'


class InvalidConfig(GameError):
    code = 'invalid_config'
    message = 'Invalid room settings'


class StaleAction(GameError):
    """The action refers to a turn or state that is no longer current."""

    code = 'stale_action'
    message = 'That action no longer applies'


class NotInRoom(GameError):
    code = 'not_in_room'
    message = 'Join the room before taking a turn'


class InvalidPayload(GameError):
    code = 'invalid_payload'
    message = 'Malformed request'

from flask import Blueprint, jsonify
from charades.services.game import registry

rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:room_code>', methods=['GET'])
def get_room_state(room_code):
    """Public snapshot of a room. The secret term is never included."""
    room = registry.get(room_code)
    if room is None:
        return jsonify({'error': 'Room not found'}), 404
    with room.lock:
        payload = room.to_dict()
    return jsonify(payload)


@rooms.route('', methods=['GET'])
def list_rooms():
    return jsonify([
        {'roomCode': r.code, 'name': r.config.name, 'players': len(r.players)}
        for r in registry
    ])

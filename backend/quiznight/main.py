from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Quiz Night server!'})


@main.route('/api/rooms/<string:code>', methods=['GET'])
def get_room(code):
    """Public summary of a live room, e.g. for checking a code before joining."""
    room = current_app.extensions['quiz_session'].registry.get_room(code)
    if room is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(room.to_dict())

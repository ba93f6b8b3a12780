import os

from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    # Serve the browser client when its assets are deployed alongside the server
    static_folder = current_app.static_folder
    if static_folder and os.path.isfile(os.path.join(static_folder, 'index.html')):
        return current_app.send_static_file('index.html')
    return jsonify({'message': 'Welcome to the Rondo game server!'})

@main.route('/health')
def health():
    from rondo import socketio_events
    rooms = len(socketio_events.registry) if socketio_events.registry is not None else 0
    return jsonify({'status': 'ok', 'rooms': rooms})

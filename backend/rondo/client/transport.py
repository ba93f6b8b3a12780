import threading
from typing import Any, Dict, Optional

import socketio

from .session import ClientSession


class SocketTransport:
    """Binds a ``ClientSession`` to a python-socketio client.

    Server events are routed to the session's ``on_*`` handlers and a
    background task ticks the session clock once per second. All session
    access goes through one lock since handlers run on the client's threads.
    """

    EVENT_HANDLERS = {
        'roomCreated': 'on_room_created',
        'roomJoined': 'on_room_joined',
        'startGame': 'on_start_game',
        'turnChanged': 'on_turn_changed',
        'playerMove': 'on_player_move',
        'gameOver': 'on_game_over',
        'error': 'on_error',
    }

    def __init__(self, questions: Optional[Dict[str, Any]] = None, lang: str = 'en',
                 namespace: str = '/', client: Optional[socketio.Client] = None,
                 tick_interval: float = 1.0, sync_interval: int = 5):
        self.namespace = namespace
        self.client = client if client is not None else socketio.Client()
        self.tick_interval = tick_interval
        self.lock = threading.RLock()
        self.session = ClientSession(self._send, questions=questions, lang=lang, sync_interval=sync_interval)
        self._ticking = False
        for event, method in self.EVENT_HANDLERS.items():
            self.client.on(event, self._route(method), namespace=self.namespace)

    def _route(self, method: str):
        def handler(data=None):
            with self.lock:
                getattr(self.session, method)(data or {})
        return handler

    def _send(self, event: str, payload: Dict[str, Any]) -> None:
        self.client.emit(event, payload, namespace=self.namespace)

    def _tick_loop(self) -> None:
        while self._ticking:
            self.client.sleep(self.tick_interval)
            with self.lock:
                self.session.tick()

    def connect(self, url: str, **kwargs) -> None:
        self.client.connect(url, namespaces=[self.namespace], **kwargs)
        self._ticking = True
        self.client.start_background_task(self._tick_loop)

    def disconnect(self) -> None:
        self._ticking = False
        self.client.disconnect()

    def create_room(self) -> None:
        self._send('createRoom', {})

    def join_room(self, code: str) -> None:
        self._send('joinRoom', {'room': code})

    def submit_answer(self, text: str) -> Optional[bool]:
        with self.lock:
            return self.session.submit_answer(text)

    def request_skip(self) -> bool:
        with self.lock:
            return self.session.request_skip()

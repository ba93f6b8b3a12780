import string
from collections import deque
from typing import Any, Callable, Dict, List, Optional

from rondo.schemas import PROTOCOL_VERSION
from .answers import is_correct, normalize, question_text

ALPHABET = list(string.ascii_uppercase)

Send = Callable[[str, Dict[str, Any]], None]


class ClientSession:
    """One player's view of a match.

    Server events come in through the ``on_*`` methods; user input through
    ``submit_answer``, ``request_skip`` and the once-a-second ``tick``. The
    letter queue is owned here and never sent to the server.
    """

    def __init__(self, send: Send, questions: Optional[Dict[str, Any]] = None,
                 lang: str = 'en', sync_interval: int = 5):
        self.send = send
        self.questions: Dict[str, Any] = questions or {}
        self.lang = lang
        self.sync_interval = max(1, sync_interval)

        self.room: Optional[str] = None
        self.player_id: Optional[str] = None
        self.player_number: Optional[int] = None
        self.players: List[str] = []
        self.current_turn: Optional[str] = None
        self.timers: Dict[str, int] = {}
        self.turn: Optional[int] = None
        self.started = False
        self.result: Optional[Dict[str, Any]] = None
        self.last_error: Optional[str] = None

        self.queue = deque(ALPHABET)
        self.marks: Dict[str, str] = {}
        self.opponent_moves: List[Dict[str, Any]] = []
        self.score = 0
        self.time_left: Optional[int] = None
        self.current_letter: Optional[str] = None
        self.current_question: Optional[Dict[str, Any]] = None

        self._ticks = 0
        self._yielded = False
        self._timeout_sent = False
        self._finished_sent = False

    # ---- derived state ----

    @property
    def is_over(self) -> bool:
        return self.result is not None

    @property
    def is_my_turn(self) -> bool:
        return self.started and not self.is_over and self.player_id is not None \
            and self.current_turn == self.player_id

    @property
    def can_act(self) -> bool:
        """Whether the answer input and skip button should be enabled."""
        return self.is_my_turn and not self._yielded and self.current_question is not None

    @property
    def question_text(self) -> str:
        return question_text(self.current_question, self.lang)

    def load_questions(self, questions: Dict[str, Any]) -> None:
        self.questions = questions or {}
        if self.is_my_turn and not self._yielded:
            self.load_next_question()

    # ---- server events ----

    def on_room_created(self, data: Dict[str, Any]) -> None:
        self.room = data.get('room')
        self.player_number = data.get('player', 1)
        self.player_id = data.get('playerId', self.player_id)
        self.time_left = data.get('initialTime', self.time_left)

    def on_room_joined(self, data: Dict[str, Any]) -> None:
        self.room = data.get('room', self.room)
        self.players = list(data.get('players') or self.players)
        self.current_turn = data.get('currentTurn', self.current_turn)
        if data.get('playerId'):
            self.player_id = data['playerId']
            self.player_number = data.get('newPlayer', self.player_number)
        if self.time_left is None:
            self.time_left = data.get('initialTime')

    def on_start_game(self, data: Dict[str, Any]) -> None:
        self.room = data.get('room', self.room)
        self.players = list(data.get('players') or [])
        if self.player_id in self.players:
            self.player_number = self.players.index(self.player_id) + 1
        self.started = True
        self._apply_turn(data)

    def on_turn_changed(self, data: Dict[str, Any]) -> None:
        if not self.started or self.is_over:
            return
        self._apply_turn(data)

    def on_player_move(self, data: Dict[str, Any]) -> None:
        if data.get('playerId') != self.player_id:
            self.opponent_moves.append(data)

    def on_game_over(self, data: Dict[str, Any]) -> None:
        self.result = data
        self.timers = dict(data.get('timers') or self.timers)
        self.current_letter = None
        self.current_question = None

    def on_error(self, data: Dict[str, Any]) -> None:
        self.last_error = (data or {}).get('message')

    def _apply_turn(self, data: Dict[str, Any]) -> None:
        previous = self.current_turn
        self.current_turn = data.get('currentTurn')
        self.timers = dict(data.get('timers') or self.timers)
        self.turn = data.get('turn', self.turn)
        if self.player_id in self.timers:
            self.time_left = self.timers[self.player_id]

        if self.is_my_turn:
            if previous != self.current_turn or self._yielded:
                self._yielded = False
                self._timeout_sent = False
                self._ticks = 0
            self.load_next_question()
        else:
            self.current_letter = None
            self.current_question = None

    # ---- local input ----

    def load_next_question(self) -> Optional[str]:
        if not self.queue:
            self.current_letter = None
            self.current_question = None
            self._report_finished()
            return None
        self.current_letter = self.queue[0]
        self.current_question = self.questions.get(self.current_letter)
        return self.current_letter

    def submit_answer(self, text: str) -> Optional[bool]:
        """Check an answer; returns None when the submission was not accepted."""
        if not self.is_my_turn or self._yielded:
            return None
        answer = normalize(text)
        if not answer or self.current_question is None:
            return None

        letter = self.current_letter
        correct = is_correct(answer, self.current_question)
        self.send('playerMove', {
            'v': PROTOCOL_VERSION,
            'room': self.room,
            'playerId': self.player_id,
            'answer': answer[:256],
            'isCorrect': correct,
        })
        if correct:
            self.score += 1
            self.queue.popleft()
            self.marks[letter] = 'correct'
            self.load_next_question()
        else:
            self.marks[letter] = 'incorrect'
            self.queue.rotate(-1)
            self._yield('wrongAnswer')
        return correct

    def request_skip(self) -> bool:
        if not self.is_my_turn or self._yielded:
            return False
        if self.queue:
            self.queue.rotate(-1)
        self._yield('skip')
        return True

    def tick(self) -> None:
        """Advance the local clock by one second while it is our turn."""
        if not self.is_my_turn or self._yielded or self.time_left is None:
            return
        if self.time_left > 0:
            self.time_left -= 1
            self._ticks += 1
            if self._ticks % self.sync_interval == 0:
                self.send('updateTimer', {'v': PROTOCOL_VERSION, 'room': self.room, 'timeLeft': self.time_left})
        if self.time_left <= 0 and not self._timeout_sent:
            self._timeout_sent = True
            self._yield('timeout')

    def _yield(self, action: str) -> None:
        self._yielded = True
        self.current_letter = None
        self.current_question = None
        self.send('playerAction', {
            'v': PROTOCOL_VERSION,
            'room': self.room,
            'action': action,
            'currentTime': max(0, self.time_left or 0),
            'turn': self.turn,
        })

    def _report_finished(self) -> None:
        if not self.started:
            return
        self._yielded = True
        if self._finished_sent:
            return
        self._finished_sent = True
        self.send('playerFinished', {'v': PROTOCOL_VERSION, 'room': self.room})

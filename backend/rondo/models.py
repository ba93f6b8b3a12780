from rondo import db
from datetime import datetime, timezone
import json


def _utcnow():
    return datetime.now(timezone.utc)


class QuestionSet(db.Model):
    """One alphabet wheel: letter -> {question: {lang: text}, answer: {lang: text|list}}."""
    __tablename__ = 'question_set'
    id = db.Column(db.Integer, primary_key=True)
    pool = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(128), nullable=True)
    payload = db.Column(db.Text, nullable=False)

    @property
    def letters(self):
        try:
            return json.loads(self.payload) if self.payload else {}
        except ValueError:
            return {}

    def to_dict(self):
        return {
            'id': self.id,
            'pool': self.pool,
            'name': self.name,
            'questions': self.letters,
        }


class LeaderboardEntry(db.Model):
    __tablename__ = 'leaderboard_entry'
    id = db.Column(db.Integer, primary_key=True)
    room_code = db.Column(db.String(16), nullable=True, index=True)
    player1_score = db.Column(db.Integer, nullable=False, default=0)
    player2_score = db.Column(db.Integer, nullable=False, default=0)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'room': self.room_code,
            'player1Score': self.player1_score,
            'player2Score': self.player2_score,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }

import json
from typing import Any, Dict, List, Optional

from rondo import db
from rondo.models import QuestionSet, LeaderboardEntry


def add_question_set(pool: str, name: Optional[str], letters: Dict[str, Any]) -> QuestionSet:
    qs = QuestionSet(pool=pool, name=name, payload=json.dumps(letters))
    db.session.add(qs)
    db.session.commit()
    return qs


def pick_random_set(pool: str) -> Optional[QuestionSet]:
    """Pick one question set from the pool, or None if the pool is empty."""
    return QuestionSet.query.filter_by(pool=pool).order_by(db.func.random()).first()


def record_result(player1_score: int, player2_score: int, room_code: Optional[str] = None) -> LeaderboardEntry:
    entry = LeaderboardEntry(
        room_code=room_code,
        player1_score=int(player1_score),
        player2_score=int(player2_score),
    )
    db.session.add(entry)
    db.session.commit()
    return entry


def recent_results(limit: int = 20) -> List[LeaderboardEntry]:
    return (
        LeaderboardEntry.query
        .order_by(LeaderboardEntry.timestamp.desc(), LeaderboardEntry.id.desc())
        .limit(limit)
        .all()
    )

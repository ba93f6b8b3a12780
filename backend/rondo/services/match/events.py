"""Wire payloads for server-to-client events (camelCase keys)."""


def room_created(room, sid):
    return {
        'room': room.code,
        'player': 1,
        'playerId': sid,
        'initialTime': room.timers.get(sid, room.initial_time),
    }


def room_joined(room, sid):
    return {
        'room': room.code,
        'players': list(room.players),
        'currentTurn': room.current_turn,
        'newPlayer': room.player_number(sid),
        'playerId': sid,
        'initialTime': room.initial_time,
    }


def start_game(room):
    return {
        'room': room.code,
        'currentTurn': room.current_turn,
        'timers': dict(room.timers),
        'players': list(room.players),
        'turn': room.turn,
    }


def turn_changed(room):
    return {
        'room': room.code,
        'currentTurn': room.current_turn,
        'timers': dict(room.timers),
        'turn': room.turn,
    }


def player_move(room, sid, answer, is_correct):
    return {
        'room': room.code,
        'playerId': sid,
        'answer': answer,
        'isCorrect': is_correct,
    }


def final_scores(room):
    """Scores keyed by seat, so a disconnect does not shift player 2 into seat 1."""
    seats = list(room.seats) + [None] * (2 - len(room.seats))
    return {
        'player1': room.scores.get(seats[0], 0),
        'player2': room.scores.get(seats[1], 0),
    }


def game_over(room):
    scores = final_scores(room)
    if scores['player1'] > scores['player2']:
        winner = 1
    elif scores['player2'] > scores['player1']:
        winner = 2
    else:
        winner = None
    return {
        'room': room.code,
        'scores': scores,
        'timers': dict(room.timers),
        'winner': winner,
    }


def error(exc_or_message, code='bad_request'):
    if isinstance(exc_or_message, Exception):
        return {'message': str(exc_or_message), 'code': getattr(exc_or_message, 'code', code)}
    return {'message': exc_or_message, 'code': code}

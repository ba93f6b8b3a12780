from flask import Blueprint, jsonify, request, current_app
from rondo.services.catalog.store import pick_random_set, record_result, recent_results


catalog = Blueprint('catalog', __name__)

MAX_LEADERBOARD_LIMIT = 100


@catalog.route('/questions/<string:pool>/random', methods=['GET'])
def random_question_set(pool):
    """
    Picks one random question set from the pool, keyed by letter.
    """
    question_set = pick_random_set(pool)
    if not question_set:
        return jsonify({'error': f'No question sets in pool {pool}'}), 404
    return jsonify(question_set.to_dict())


@catalog.route('/leaderboard', methods=['GET'])
def list_leaderboard():
    try:
        limit = int(request.args.get('limit', 20))
    except ValueError:
        return jsonify({'error': 'limit must be an integer'}), 400
    limit = max(1, min(limit, MAX_LEADERBOARD_LIMIT))
    return jsonify([entry.to_dict() for entry in recent_results(limit)])


@catalog.route('/leaderboard', methods=['POST'])
def add_leaderboard_entry():
    """
    Appends a finished match to the leaderboard log.
    """
    data = request.get_json(silent=True) or {}
    try:
        player1_score = int(data.get('player1Score'))
        player2_score = int(data.get('player2Score'))
    except (TypeError, ValueError):
        return jsonify({'error': 'player1Score and player2Score are required integers'}), 400
    if player1_score < 0 or player2_score < 0:
        return jsonify({'error': 'Scores cannot be negative'}), 400

    entry = record_result(player1_score, player2_score, room_code=data.get('room'))
    current_app.logger.info(f"[leaderboard] entry={entry.id} p1={player1_score} p2={player2_score}")
    return jsonify(entry.to_dict()), 201

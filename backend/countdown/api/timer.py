from flask import Blueprint, current_app, jsonify, request


timer = Blueprint('timer', __name__)


def _engine():
    return current_app.extensions['countdown']['engine']


def _limit_arg(default, maximum):
    raw = request.args.get('limit')
    if raw is None:
        return default, None
    try:
        limit = int(raw)
    except ValueError:
        return None, (jsonify({'error': 'limit must be an integer'}), 400)
    if limit <= 0:
        return None, (jsonify({'error': 'limit must be positive'}), 400)
    return min(limit, maximum), None


@timer.route('/state', methods=['GET'])
def get_state():
    return jsonify(_engine().to_dict())


@timer.route('/graph', methods=['GET'])
def get_graph():
    keep = int(current_app.config.get('GRAPH_MAX_SAMPLES', 120))
    limit, error = _limit_arg(keep, keep)
    if error:
        return error
    samples = _engine().store.graph_samples(limit)
    return jsonify([s.to_dict() for s in samples])


@timer.route('/history', methods=['GET'])
def get_history():
    limit, error = _limit_arg(50, 500)
    if error:
        return error
    return jsonify(_engine().store.recent_contributions(limit))

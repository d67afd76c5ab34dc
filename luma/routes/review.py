from flask import Blueprint, jsonify, request

from luma import get_store, reports
from luma.models import MODULE, SUBJECT, TOPIC, TRAINING

bp = Blueprint('review', __name__, url_prefix='/api/review')

# Narrowest scope wins when several are given.
SCOPE_PARAMS = (('topic', TOPIC), ('module', MODULE), ('training', TRAINING), ('subject', SUBJECT))


@bp.route('/comments', methods=['GET'])
def comments():
    entries = reports.collect_comments(get_store())
    filtered = reports.filter_comments(
        entries,
        search=request.args.get('search'),
        status=request.args.get('status'),
        context=request.args.get('context'),
        author_id=request.args.get('author'),
        priority=request.args.get('priority'),
        owner_id=request.args.get('owner'),
    )
    return jsonify({'comments': filtered, 'stats': reports.review_summary(entries)})


@bp.route('/kanban', methods=['GET'])
def kanban():
    store = get_store()
    scope_kind, scope_id = None, None
    for param, kind in SCOPE_PARAMS:
        if request.args.get(param):
            scope_kind, scope_id = kind, request.args[param]
            break
    board = reports.kanban_board(store, scope_kind, scope_id, tag_id=request.args.get('tag'))
    return jsonify({
        'columns': {state: [u.to_json() for u in units] for state, units in board.items()},
        'tags': [t.to_json() for t in reports.all_tags(store)],
    })

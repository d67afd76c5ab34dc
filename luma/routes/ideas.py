from flask import Blueprint, jsonify, request

from luma import get_ideas
from luma.decorators import auth_required, get_current_user
from luma.errors import MalformedInput
from luma.forms import CommentForm, IdeaForm, IdeaMoveForm, UrlForm, submitted, validated

bp = Blueprint('ideas', __name__, url_prefix='/api/ideas')


def _not_found(what='idea'):
    return jsonify({'error': f'{what} not found'}), 404


def _tags_from_body():
    tags = (request.get_json() or {}).get('tags')
    if tags is None:
        return None
    if not isinstance(tags, list):
        raise MalformedInput({'tags': ['Expected a list']})
    return [str(t).strip() for t in tags if str(t).strip()]


@bp.route('', methods=['GET'])
def list_ideas():
    return jsonify([i.to_json() for i in get_ideas().all()])


@bp.route('/board', methods=['GET'])
def board():
    columns = get_ideas().by_state()
    return jsonify({state: [i.to_json() for i in ideas] for state, ideas in columns.items()})


@bp.route('/<idea_id>', methods=['GET'])
def get_idea(idea_id):
    idea = get_ideas().get(idea_id)
    if idea is None:
        return _not_found()
    return jsonify(idea.to_json())


@bp.route('', methods=['POST'])
@auth_required
def create_idea():
    form = validated(IdeaForm)
    urls = (request.get_json() or {}).get('urls') or []
    if not isinstance(urls, list) or not all(isinstance(u, dict) for u in urls):
        raise MalformedInput({'urls': ['Expected a list of {title, url} objects']})
    idea = get_ideas().create(
        form.title.data,
        get_current_user().snapshot(),
        description=form.description.data,
        tags=_tags_from_body(),
        urls=urls,
    )
    return jsonify(idea.to_json()), 201


@bp.route('/<idea_id>', methods=['PATCH'])
@auth_required
def update_idea(idea_id):
    changes = submitted(validated(IdeaForm, partial=True))
    tags = _tags_from_body()
    if tags is not None:
        changes['tags'] = tags
    idea = get_ideas().update(idea_id, changes)
    if idea is None:
        return _not_found()
    return jsonify(idea.to_json())


@bp.route('/<idea_id>', methods=['DELETE'])
@auth_required
def delete_idea(idea_id):
    if not get_ideas().delete(idea_id):
        return _not_found()
    return jsonify({'success': True})


@bp.route('/<idea_id>/state', methods=['POST'])
@auth_required
def move_idea(idea_id):
    form = validated(IdeaMoveForm)
    idea = get_ideas().move(idea_id, form.state.data)
    if idea is None:
        return _not_found()
    return jsonify(idea.to_json())


@bp.route('/<idea_id>/comments', methods=['POST'])
@auth_required
def add_comment(idea_id):
    form = validated(CommentForm)
    comment = get_ideas().add_comment(idea_id, form.content.data, get_current_user().snapshot())
    if comment is None:
        return _not_found()
    return jsonify(comment.to_json()), 201


@bp.route('/<idea_id>/comments/<comment_id>', methods=['DELETE'])
@auth_required
def delete_comment(idea_id, comment_id):
    if not get_ideas().delete_comment(idea_id, comment_id):
        return _not_found('comment')
    return jsonify({'success': True})


@bp.route('/<idea_id>/urls', methods=['POST'])
@auth_required
def add_url(idea_id):
    form = validated(UrlForm)
    ref = get_ideas().add_url(idea_id, form.title.data or form.url.data, form.url.data)
    if ref is None:
        return _not_found()
    return jsonify(ref.to_json()), 201


@bp.route('/<idea_id>/urls/<url_id>', methods=['DELETE'])
@auth_required
def delete_url(idea_id, url_id):
    if not get_ideas().delete_url(idea_id, url_id):
        return _not_found('url')
    return jsonify({'success': True})

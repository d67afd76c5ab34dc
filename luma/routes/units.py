from flask import Blueprint, jsonify, request

from luma import get_store, media, snippets
from luma import units as unit_ops
from luma.decorators import auth_required, get_current_user
from luma.errors import MalformedInput
from luma.forms import (
    CommentFlagsForm, CommentForm, GoalForm, SnippetForm, StateForm, TagForm, TextForm,
    UnitForm, UrlForm, VoteForm, submitted, validated,
)
from luma.models import UNIT, _parse_datetime

bp = Blueprint('units', __name__, url_prefix='/api/units')

LIST_FIELDS = {'contentTypes': 'content_types', 'customContentTypes': 'custom_content_types'}


def _not_found(what='unit'):
    return jsonify({'error': f'{what} not found'}), 404


def _unit_fields(form):
    data = submitted(form)
    if 'target_date' in data:
        data['target_date'] = _parse_datetime(data['target_date'])
    body = request.get_json(silent=True) or {}
    for json_name, field in LIST_FIELDS.items():
        if json_name in body:
            if not isinstance(body[json_name], list):
                raise MalformedInput({json_name: ['Expected a list']})
            data[field] = [str(v) for v in body[json_name]]
    return data


def _uploaded_file():
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        raise MalformedInput({'file': ['No file uploaded']})
    return upload.read(), upload.filename, upload.mimetype


# -- units ------------------------------------------------------------------

@bp.route('', methods=['GET'])
def list_units():
    store = get_store()
    topic_id = request.args.get('topic')
    units = store.list_by_parent(UNIT, topic_id) if topic_id else store.all(UNIT)
    return jsonify([u.to_json() for u in units])


@bp.route('/<unit_id>', methods=['GET'])
def get_unit(unit_id):
    unit = get_store().get_by_id(UNIT, unit_id)
    if unit is None:
        return _not_found()
    return jsonify(unit.to_json())


@bp.route('', methods=['POST'])
@auth_required
def create_unit():
    unit = get_store().create(UNIT, _unit_fields(validated(UnitForm)))
    return jsonify(unit.to_json()), 201


@bp.route('/<unit_id>', methods=['PATCH'])
@auth_required
def update_unit(unit_id):
    unit = get_store().update(UNIT, unit_id, _unit_fields(validated(UnitForm, partial=True)))
    if unit is None:
        return _not_found()
    return jsonify(unit.to_json())


@bp.route('/<unit_id>', methods=['DELETE'])
@auth_required
def delete_unit(unit_id):
    removed = get_store().delete(UNIT, unit_id)
    if not removed:
        return _not_found()
    return jsonify({'deleted': removed})


@bp.route('/<unit_id>/state', methods=['POST'])
@auth_required
def move_state(unit_id):
    form = validated(StateForm)
    unit = unit_ops.move_to_state(get_store(), unit_id, form.state.data)
    if unit is None:
        return _not_found()
    return jsonify(unit.to_json())


@bp.route('/<unit_id>/topic', methods=['POST'])
@auth_required
def move_topic(unit_id):
    topic_id = (request.get_json() or {}).get('topicId')
    unit = unit_ops.move_to_topic(get_store(), unit_id, topic_id)
    if unit is None:
        return _not_found()
    return jsonify(unit.to_json())


# -- snippets ---------------------------------------------------------------

@bp.route('/<unit_id>/snippets/segment', methods=['POST'])
@auth_required
def segment(unit_id):
    form = validated(TextForm)
    result = snippets.process_text_to_snippets(get_store(), unit_id, form.text.data)
    if result is None:
        return _not_found()
    return jsonify([s.to_json() for s in result])


@bp.route('/<unit_id>/snippets', methods=['POST'])
@auth_required
def add_snippet(unit_id):
    form = validated(SnippetForm)
    snippet = snippets.add_snippet(get_store(), unit_id, form.content.data or '', form.order.data)
    if snippet is None:
        return _not_found()
    return jsonify(snippet.to_json()), 201


@bp.route('/<unit_id>/snippets/<snippet_id>', methods=['PATCH'])
@auth_required
def update_snippet(unit_id, snippet_id):
    changes = submitted(validated(SnippetForm, partial=True))
    snippet = snippets.update_snippet(get_store(), unit_id, snippet_id, changes)
    if snippet is None:
        return _not_found('snippet')
    return jsonify(snippet.to_json())


@bp.route('/<unit_id>/snippets/<snippet_id>', methods=['DELETE'])
@auth_required
def delete_snippet(unit_id, snippet_id):
    if not snippets.delete_snippet(get_store(), unit_id, snippet_id):
        return _not_found('snippet')
    return jsonify({'success': True})


@bp.route('/<unit_id>/snippets/reorder', methods=['POST'])
@auth_required
def reorder_snippets(unit_id):
    ids = (request.get_json() or {}).get('ids')
    if not isinstance(ids, list):
        raise MalformedInput({'ids': ['Expected a list of snippet ids']})
    result = snippets.reorder_snippets(get_store(), unit_id, ids)
    if result is None:
        return _not_found()
    return jsonify([s.to_json() for s in result])


@bp.route('/<unit_id>/snippets/<snippet_id>/vote', methods=['POST'])
@auth_required
def vote(unit_id, snippet_id):
    form = validated(VoteForm)
    snippet = snippets.rate_snippet(get_store(), unit_id, snippet_id,
                                    get_current_user().id, form.is_upvote.data)
    if snippet is None:
        return _not_found('snippet')
    return jsonify(snippet.to_json())


@bp.route('/<unit_id>/snippets/<snippet_id>/comments', methods=['POST'])
@auth_required
def comment_snippet(unit_id, snippet_id):
    form = validated(CommentForm)
    comment = snippets.add_snippet_comment(get_store(), unit_id, snippet_id,
                                           form.content.data, get_current_user().snapshot())
    if comment is None:
        return _not_found('snippet')
    return jsonify(comment.to_json()), 201


# -- comments ---------------------------------------------------------------

@bp.route('/<unit_id>/comments', methods=['POST'])
@auth_required
def add_comment(unit_id):
    form = validated(CommentForm)
    comment = unit_ops.add_comment(get_store(), unit_id, form.content.data,
                                   get_current_user().snapshot(),
                                   context=form.context.data or 'general')
    if comment is None:
        return _not_found()
    return jsonify(comment.to_json()), 201


@bp.route('/<unit_id>/comments/<comment_id>', methods=['PATCH'])
@auth_required
def update_comment(unit_id, comment_id):
    changes = submitted(validated(CommentFlagsForm, partial=True))
    comment = unit_ops.update_comment(get_store(), unit_id, comment_id, changes)
    if comment is None:
        return _not_found('comment')
    return jsonify(comment.to_json())


@bp.route('/<unit_id>/comments/<comment_id>', methods=['DELETE'])
@auth_required
def delete_comment(unit_id, comment_id):
    if not unit_ops.delete_comment(get_store(), unit_id, comment_id):
        return _not_found('comment')
    return jsonify({'success': True})


# -- tags, urls, learning goals ---------------------------------------------

@bp.route('/<unit_id>/tags', methods=['POST'])
@auth_required
def add_tag(unit_id):
    form = validated(TagForm)
    tag = unit_ops.add_tag(get_store(), unit_id, form.label.data, form.color.data or None)
    if tag is None:
        return _not_found()
    return jsonify(tag.to_json()), 201


@bp.route('/<unit_id>/tags/<tag_id>', methods=['PATCH'])
@auth_required
def update_tag(unit_id, tag_id):
    changes = submitted(validated(TagForm, partial=True))
    tag = unit_ops.update_tag(get_store(), unit_id, tag_id,
                              label=changes.get('label'), color=changes.get('color'))
    if tag is None:
        return _not_found('tag')
    return jsonify(tag.to_json())


@bp.route('/<unit_id>/tags/<tag_id>', methods=['DELETE'])
@auth_required
def remove_tag(unit_id, tag_id):
    if not unit_ops.remove_tag(get_store(), unit_id, tag_id):
        return _not_found('tag')
    return jsonify({'success': True})


@bp.route('/<unit_id>/urls', methods=['POST'])
@auth_required
def add_url(unit_id):
    form = validated(UrlForm)
    ref = unit_ops.add_url(get_store(), unit_id, form.title.data or form.url.data, form.url.data)
    if ref is None:
        return _not_found()
    return jsonify(ref.to_json()), 201


@bp.route('/<unit_id>/urls/<url_id>', methods=['DELETE'])
@auth_required
def remove_url(unit_id, url_id):
    if not unit_ops.remove_url(get_store(), unit_id, url_id):
        return _not_found('url')
    return jsonify({'success': True})


@bp.route('/<unit_id>/goals', methods=['POST'])
@auth_required
def add_goal(unit_id):
    form = validated(GoalForm)
    goal = unit_ops.add_learning_goal(get_store(), unit_id, form.text.data)
    if goal is None:
        return _not_found()
    return jsonify(goal.to_json()), 201


@bp.route('/<unit_id>/goals/<goal_id>', methods=['DELETE'])
@auth_required
def remove_goal(unit_id, goal_id):
    if not unit_ops.remove_learning_goal(get_store(), unit_id, goal_id):
        return _not_found('learning goal')
    return jsonify({'success': True})


# -- media ------------------------------------------------------------------

@bp.route('/<unit_id>/images', methods=['POST'])
@auth_required
def upload_image(unit_id):
    image = media.add_image(get_store(), unit_id, *_uploaded_file())
    if image is None:
        return _not_found()
    return jsonify(image.to_json()), 201


@bp.route('/<unit_id>/images/<image_id>', methods=['DELETE'])
@auth_required
def remove_image(unit_id, image_id):
    if not media.remove_image(get_store(), unit_id, image_id):
        return _not_found('image')
    return jsonify({'success': True})


@bp.route('/<unit_id>/video', methods=['PUT'])
@auth_required
def upload_video(unit_id):
    video = media.set_video(get_store(), unit_id, *_uploaded_file())
    if video is None:
        return _not_found()
    return jsonify(video.to_json())


@bp.route('/<unit_id>/video', methods=['DELETE'])
@auth_required
def remove_video(unit_id):
    if not media.clear_video(get_store(), unit_id):
        return _not_found('video')
    return jsonify({'success': True})


@bp.route('/<unit_id>/powerpoint', methods=['PUT'])
@auth_required
def upload_powerpoint(unit_id):
    deck = media.set_powerpoint(get_store(), unit_id, *_uploaded_file())
    if deck is None:
        return _not_found()
    return jsonify(deck.to_json())


@bp.route('/<unit_id>/powerpoint', methods=['DELETE'])
@auth_required
def remove_powerpoint(unit_id):
    if not media.clear_powerpoint(get_store(), unit_id):
        return _not_found('powerpoint')
    return jsonify({'success': True})

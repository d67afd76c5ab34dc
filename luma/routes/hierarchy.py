"""JSON endpoints for subjects, trainings, training modules and topics.

The four levels share one set of handlers, registered once per level under
``/api/<plural>``. Units have their own blueprint in ``luma.routes.units``.
"""

from flask import Blueprint, jsonify, request

from luma import get_store, reports
from luma.decorators import auth_required, get_current_user
from luma.forms import ModuleForm, SubjectForm, TopicForm, TrainingForm, submitted, validated
from luma.models import ENTITY_TYPES, MODULE, SUBJECT, TOPIC, TRAINING

bp = Blueprint('hierarchy', __name__, url_prefix='/api')

LEVELS = {
    SUBJECT: ('subjects', SubjectForm),
    TRAINING: ('trainings', TrainingForm),
    MODULE: ('modules', ModuleForm),
    TOPIC: ('topics', TopicForm),
}


def _not_found(kind):
    return jsonify({'error': f'{kind} not found'}), 404


def _register(kind, plural, form_cls):
    parent_field = ENTITY_TYPES[kind].PARENT_FIELD

    def list_records():
        store = get_store()
        parent = request.args.get('parent')
        if parent and parent_field:
            records = store.list_by_parent(kind, parent)
        else:
            records = store.all(kind)
        return jsonify([r.to_json() for r in records])

    def get_record(record_id):
        record = get_store().get_by_id(kind, record_id)
        if record is None:
            return _not_found(kind)
        return jsonify(record.to_json())

    @auth_required
    def create_record():
        data = submitted(validated(form_cls))
        if kind == TOPIC and not data.get('owner_id'):
            data['owner_id'] = get_current_user().id
        record = get_store().create(kind, data)
        return jsonify(record.to_json()), 201

    @auth_required
    def update_record(record_id):
        changes = submitted(validated(form_cls, partial=True))
        record = get_store().update(kind, record_id, changes)
        if record is None:
            return _not_found(kind)
        return jsonify(record.to_json())

    @auth_required
    def delete_record(record_id):
        removed = get_store().delete(kind, record_id)
        if not removed:
            return _not_found(kind)
        return jsonify({'deleted': removed})

    def record_stats(record_id):
        store = get_store()
        if store.get_by_id(kind, record_id) is None:
            return _not_found(kind)
        return jsonify(reports.node_stats(store, kind, record_id))

    def record_path(record_id):
        store = get_store()
        if store.get_by_id(kind, record_id) is None:
            return _not_found(kind)
        return jsonify({'path': reports.path_of(store, kind, record_id)})

    rule = f'/{plural}'
    bp.add_url_rule(rule, f'list_{kind}', list_records, methods=['GET'])
    bp.add_url_rule(rule, f'create_{kind}', create_record, methods=['POST'])
    bp.add_url_rule(f'{rule}/<record_id>', f'get_{kind}', get_record, methods=['GET'])
    bp.add_url_rule(f'{rule}/<record_id>', f'update_{kind}', update_record, methods=['PATCH'])
    bp.add_url_rule(f'{rule}/<record_id>', f'delete_{kind}', delete_record, methods=['DELETE'])
    bp.add_url_rule(f'{rule}/<record_id>/stats', f'{kind}_stats', record_stats, methods=['GET'])
    bp.add_url_rule(f'{rule}/<record_id>/path', f'{kind}_path', record_path, methods=['GET'])


for _kind, (_plural, _form) in LEVELS.items():
    _register(_kind, _plural, _form)

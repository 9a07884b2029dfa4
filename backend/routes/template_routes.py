import logging

from flask import Blueprint, abort, jsonify, request

from services.template_service import (
    APPLY_ADD, TemplateNotFoundError, apply_template, get_categories, get_template_by_id,
    search_templates,
)
from . import get_entity_list, get_json_body

logger = logging.getLogger(__name__)

templates_bp = Blueprint('templates', __name__)


@templates_bp.route('', methods=['GET'])
def list_templates():
    """
    List templates.

    Query Params:
        category: exact category name (optional)
        tag: case-insensitive substring of any tag (optional)
    """
    templates = search_templates(
        category=request.args.get('category') or None,
        tag=request.args.get('tag') or None,
    )
    return jsonify({'templates': templates}), 200


@templates_bp.route('/categories', methods=['GET'])
def categories():
    return jsonify({'categories': get_categories()}), 200


@templates_bp.route('/<template_id>', methods=['GET'])
def get_template(template_id):
    template = get_template_by_id(template_id)
    if template is None:
        abort(404, description=f"Template {template_id!r} not found")
    return jsonify({'template': template}), 200


@templates_bp.route('/<template_id>/apply', methods=['POST'])
def apply(template_id):
    """
    Apply a template to the current entities.

    Request Body:
        {"current": [...], "mode": "add" | "merge" | "replace"}

    Returns:
        {"entities": [...], "added_count": int}
    """
    data = get_json_body()
    current = get_entity_list(data, 'current', [])
    mode = data.get('mode') or APPLY_ADD
    if not isinstance(mode, str):
        abort(400, description="'mode' must be a string")

    try:
        entities, taken = apply_template(current, template_id, mode)
    except TemplateNotFoundError as e:
        abort(404, description=str(e))
    except ValueError as e:
        abort(400, description=str(e))

    return jsonify({'entities': entities, 'added_count': taken}), 200

import logging

from flask import Blueprint, abort, jsonify, request
from werkzeug.utils import secure_filename

from parsers.dbdiagram_parser import DBDiagramParser
from parsers.entity_source_parser import EntitySourceParser
from parsers.parser_manager import ParserManager
from services.change_detector import (
    calculate_entity_stats, detect_changes, get_entity_change_details,
)
from services.entity_merge import (
    build_overwrite_choices, find_duplicates, merge_entities, validate_entities,
)
from . import get_entity_list, get_flag, get_json_body, get_string

logger = logging.getLogger(__name__)

entities_bp = Blueprint('entities', __name__)


@entities_bp.route('/parse/dbdiagram', methods=['POST'])
def parse_dbdiagram():
    """
    Parse DBDiagram text.

    Request Body:
        {"content": "Table users { ... }"}

    Returns:
        200 {"success": true, "entities": [...], "warnings": [...]}
        400 {"success": false, "error": "EmptyContent|NoTableFound|NoEntitiesParsed", ...}
    """
    data = get_json_body('content')
    result = DBDiagramParser().parse_with_validation(get_string(data, 'content', ''))
    return jsonify(result), (200 if result['success'] else 400)


@entities_bp.route('/parse/source', methods=['POST'])
def parse_source():
    """Parse pasted C# entity classes: {"content": "..."} -> {"entities": [...]}"""
    data = get_json_body('content')
    entities = EntitySourceParser().parse(get_string(data, 'content', ''))
    return jsonify({'entities': entities}), 200


@entities_bp.route('/import', methods=['POST'])
def import_entities():
    """Import an uploaded .dbml/.txt/.cs file (multipart 'file') or {"filename", "content"}."""
    if 'file' in request.files:
        upload = request.files['file']
        filename = secure_filename(upload.filename or '')
        content = upload.read().decode('utf-8', errors='replace')
    else:
        data = get_json_body('content')
        filename = secure_filename(get_string(data, 'filename', ''))
        content = get_string(data, 'content', '')

    result = ParserManager().parse_content(content, filename or None)
    return jsonify(result), (200 if result['success'] else 400)


@entities_bp.route('/changes', methods=['POST'])
def changes():
    """Classify {"current": [...], "original": [...]} into added/modified/removed."""
    data = get_json_body()
    current = get_entity_list(data, 'current')
    original = get_entity_list(data, 'original', [])
    order_sensitive = get_flag(data, 'order_sensitive', True)

    result = detect_changes(current, original, order_sensitive=order_sensitive)
    result['stats'] = calculate_entity_stats(current)
    return jsonify(result), 200


@entities_bp.route('/change-details', methods=['POST'])
def change_details():
    """Property-level diff of one entity against its original or scanned version."""
    data = get_json_body('entity')
    entity = data['entity']
    if not isinstance(entity, dict):
        abort(400, description="'entity' must be an object")

    details = get_entity_change_details(
        entity,
        get_entity_list(data, 'original', []),
        get_entity_list(data, 'scanned', []),
    )
    return jsonify({'changes': details}), 200


@entities_bp.route('/merge', methods=['POST'])
def merge():
    """Upsert {"incoming"} into {"current"}; {"replace": true} replaces outright."""
    data = get_json_body()
    merged = merge_entities(
        get_entity_list(data, 'current', []),
        get_entity_list(data, 'incoming'),
        replace=get_flag(data, 'replace'),
    )
    return jsonify({'entities': merged}), 200


@entities_bp.route('/duplicates', methods=['POST'])
def duplicates():
    """Incoming entities that collide with existing names, plus initial overwrite choices."""
    data = get_json_body()
    incoming = get_entity_list(data, 'incoming')
    found = find_duplicates(incoming, get_entity_list(data, 'existing', []))
    choices = build_overwrite_choices(incoming, found)

    return jsonify({
        'duplicates': found,
        'overwrite_choices': {name: choice.value for name, choice in choices.items()},
    }), 200


@entities_bp.route('/validate', methods=['POST'])
def validate():
    """Name-policy errors keyed by entity index."""
    data = get_json_body()
    errors = validate_entities(get_entity_list(data, 'entities'))
    return jsonify({
        'valid': not errors,
        'errors': {str(index): messages for index, messages in errors.items()},
    }), 200

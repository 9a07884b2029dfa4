import logging

from flask import Blueprint, abort, current_app, jsonify

from services.cli_service import NocSharpCliService
from services.command_factory import generate_project_commands, generate_script
from services.entity_merge import OverwriteChoice
from services.project_host import LocalProjectHost
from services.project_manager import ExecutionMode, ProjectManager
from . import get_entity_list, get_flag, get_json_body, get_project_host, get_string

logger = logging.getLogger(__name__)

projects_bp = Blueprint('projects', __name__)


def _project_manager():
    return ProjectManager(
        get_project_host(),
        entities_subdir=current_app.config['ENTITIES_SUBDIR'],
        mode=ExecutionMode.coerce(current_app.config['EXECUTION_MODE']),
    )


def _execution_mode(data):
    try:
        return ExecutionMode.coerce(data['mode']) if data.get('mode') else None
    except ValueError as e:
        abort(400, description=str(e))


def _overwrite_choices(data):
    raw = data.get('overwrite_choices') or {}
    if not isinstance(raw, dict):
        abort(400, description="'overwrite_choices' must be an object")
    try:
        return {name: OverwriteChoice.coerce(value) for name, value in raw.items()}
    except ValueError as e:
        abort(400, description=str(e))


def _cli_service():
    service = current_app.extensions.get('nocsharp_cli')
    if service is None:
        host = current_app.config.get('PROJECT_HOST')
        # the version check uses CLI_CHECK_TIMEOUT, never COMMAND_TIMEOUT
        if host is None or isinstance(host, LocalProjectHost):
            host = LocalProjectHost(timeout=current_app.config['CLI_CHECK_TIMEOUT'])
        service = NocSharpCliService(host, cache_seconds=current_app.config['CLI_CHECK_CACHE_SECONDS'])
        current_app.extensions['nocsharp_cli'] = service
    return service


@projects_bp.route('/commands', methods=['POST'])
def commands():
    """
    Generate the nocsharp commands for a project.

    Request Body:
        {
            "project_name": "Blog",
            "directory_path": "/home/me/src",
            "entities": [...],
            "is_existing_project": false,
            "overwrite_choices": {"User": "keep"}  // or legacy booleans
        }
    """
    data = get_json_body('directory_path')
    is_existing = get_flag(data, 'is_existing_project')
    project_name = get_string(data, 'project_name', '')
    if not is_existing and not project_name.strip():
        abort(400, description='project_name is required for a new project')

    entities = get_entity_list(data, 'entities')
    result = generate_project_commands(
        project_name,
        entities,
        get_string(data, 'directory_path', ''),
        is_existing_project=is_existing,
        overwrite_choices=_overwrite_choices(data),
    )
    result['script'] = generate_script(entities, project_name, is_existing)
    return jsonify(result), 200


@projects_bp.route('/scan', methods=['POST'])
def scan():
    """Scan an existing project's entity files."""
    data = get_json_body('project_path')
    result = _project_manager().load_project_entities(get_string(data, 'project_path', ''))
    return jsonify(result), (200 if result['success'] else 404)


@projects_bp.route('/existing-entities', methods=['POST'])
def existing_entities():
    """Which of the given entities already have a generated file."""
    data = get_json_body('directory_path')
    result = _project_manager().find_existing_entities(
        get_string(data, 'directory_path', ''), get_entity_list(data, 'entities'))
    return jsonify(result), 200


@projects_bp.route('/execute', methods=['POST'])
def execute():
    """Run commands sequentially: {"commands": [...], "mode": "continue"|"abort"}"""
    data = get_json_body('commands')
    commands = data['commands']
    if not isinstance(commands, list) or not all(isinstance(c, str) for c in commands):
        abort(400, description="'commands' must be a list of strings")

    result = _project_manager().execute_commands(commands, _execution_mode(data))
    return jsonify(result), 200


@projects_bp.route('/update', methods=['POST'])
def update():
    """Regenerate only entities added or modified since the original scan."""
    data = get_json_body('directory_path')
    result = _project_manager().update_modified_entities(
        get_string(data, 'directory_path', ''),
        get_entity_list(data, 'current'),
        get_entity_list(data, 'original', []),
        _execution_mode(data),
    )
    return jsonify(result), 200


@projects_bp.route('/cli-status', methods=['GET'])
def cli_status():
    """Is nocsharp installed? Cached for CLI_CHECK_CACHE_SECONDS."""
    service = _cli_service()
    result = dict(service.check_availability())
    if not result['is_available']:
        result['instructions'] = service.get_installation_instructions()
    return jsonify(result), 200


@projects_bp.route('/default-directory', methods=['GET'])
def default_directory():
    return jsonify({'directory_path': get_project_host().choose_directory()}), 200

from flask import abort, current_app, request


def init_routes(app):
    """Initialize all routes"""
    from .entity_routes import entities_bp
    from .project_routes import projects_bp
    from .template_routes import templates_bp

    app.register_blueprint(entities_bp, url_prefix='/api/entities')
    app.register_blueprint(projects_bp, url_prefix='/api/projects')
    app.register_blueprint(templates_bp, url_prefix='/api/templates')


def get_json_body(*required):
    """Return the JSON request body, aborting with 400 when it is missing or incomplete."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description='Request body must be a JSON object')
    missing = [key for key in required if key not in data]
    if missing:
        abort(400, description=f"Missing field(s): {', '.join(missing)}")
    return data


def get_entity_list(data, key, default=None):
    """data[key] as a list of entity dicts; 400 when it has the wrong shape."""
    entities = data.get(key, default)
    if entities is None:
        abort(400, description=f"Missing field: {key}")
    if not isinstance(entities, list) or not all(isinstance(e, dict) for e in entities):
        abort(400, description=f"'{key}' must be a list of entity objects")
    return entities


def get_project_host():
    """Host injected via app.config['PROJECT_HOST'], else the local machine."""
    host = current_app.config.get('PROJECT_HOST')
    if host is None:
        from services.project_host import LocalProjectHost
        host = LocalProjectHost(
            default_directory=current_app.config.get('PROJECTS_ROOT'),
            timeout=current_app.config.get('COMMAND_TIMEOUT'),
        )
        current_app.config['PROJECT_HOST'] = host
    return host


def get_string(data, key, default=None):
    """data[key] as a string (None becomes default); 400 for any other type."""
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        abort(400, description=f"'{key}' must be a string")
    return value


_TRUE_STRINGS = {'true', '1', 'yes'}
_FALSE_STRINGS = {'false', '0', 'no'}


def get_flag(data, key, default=False):
    """data[key] as a bool. Accepts JSON booleans and 'true'/'false' style strings."""
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
        return value.strip().lower() in _TRUE_STRINGS
    abort(400, description=f"'{key}' must be a boolean")

import logging

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import Config
from parsers.parser_manager import UnsupportedFormatError

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config.from_object(Config)

# Initialize extensions
CORS(app)

# Error handlers
@app.errorhandler(HTTPException)
def handle_http_error(error):
    return jsonify({'error': error.description}), error.code

@app.errorhandler(UnsupportedFormatError)
def handle_unsupported_format(error):
    return jsonify({'error': str(error)}), 400

@app.errorhandler(Exception)
def handle_error(error):
    logger.exception("Unhandled error: %s", error)
    return jsonify({
        'error': str(error),
        'error_type': type(error).__name__,
    }), 500

# Register routes
from routes import init_routes
init_routes(app)

if __name__ == '__main__':
    # Disable reloader to avoid Windows-specific issues with file handles
    app.run(debug=True, host='127.0.0.1', port=5000, use_reloader=False)

import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 10 * 1024 * 1024))  # 10MB max upload
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Project layout
    PROJECTS_ROOT = os.environ.get('PROJECTS_ROOT') or os.path.expanduser('~')
    ENTITIES_SUBDIR = os.environ.get('ENTITIES_SUBDIR', 'Domain/Entities')

    # nocsharp command execution
    COMMAND_TIMEOUT = float(os.environ.get('COMMAND_TIMEOUT', 300))
    EXECUTION_MODE = os.environ.get('EXECUTION_MODE', 'continue')  # 'continue' or 'abort'
    CLI_CHECK_CACHE_SECONDS = float(os.environ.get('CLI_CHECK_CACHE_SECONDS', 30))
    CLI_CHECK_TIMEOUT = float(os.environ.get('CLI_CHECK_TIMEOUT', 5))

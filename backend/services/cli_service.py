import logging
import time
from typing import Dict, List, Optional

from services.project_host import BaseProjectHost, HostCommandError

logger = logging.getLogger(__name__)


class NocSharpCliService:
    """Checks whether the nocsharp CLI is installed, with a short-lived cache"""

    VERSION_COMMAND = 'nocsharp --version'
    HELP_COMMAND = 'nocsharp --help'

    INSTALLATION_INSTRUCTIONS = {
        'windows': [
            'Download the nocsharp CLI from the official repository',
            'Extract to a folder (e.g., C:\\Tools\\nocsharp)',
            'Add the folder to your system PATH environment variable',
            'Restart command prompt and test with: nocsharp --version',
        ],
        'linux': [
            'Download the nocsharp CLI binary',
            'Make it executable: chmod +x nocsharp',
            'Move to a PATH directory: sudo mv nocsharp /usr/local/bin/',
            'Test with: nocsharp --version',
        ],
        'macos': [
            'Download the nocsharp CLI binary',
            'Make it executable: chmod +x nocsharp',
            'Move to a PATH directory: sudo mv nocsharp /usr/local/bin/',
            'Test with: nocsharp --version',
        ],
    }

    def __init__(self, host: BaseProjectHost, cache_seconds: float = 30, clock=time.monotonic):
        self.host = host
        self.cache_seconds = cache_seconds
        self._clock = clock
        self._cached: Optional[Dict] = None
        self._cached_at = 0.0

    def check_availability(self, use_cache: bool = True) -> Dict:
        """
        Run ``nocsharp --version``.

        Returns:
            {'is_available': bool, 'version': str or None, 'error': str or None}
        """
        if use_cache and self._cached and (self._clock() - self._cached_at) < self.cache_seconds:
            return self._cached

        try:
            output = self.host.execute_shell_command(self.VERSION_COMMAND)
            result = {'is_available': True, 'version': output.strip(), 'error': None}
        except HostCommandError as e:
            logger.info("nocsharp CLI not available: %s", e)
            result = {'is_available': False, 'version': None, 'error': self.parse_error(e)}

        self._cached = result
        self._cached_at = self._clock()
        return result

    def is_available(self) -> bool:
        """Quick check via ``nocsharp --help``, uncached"""
        try:
            self.host.execute_shell_command(self.HELP_COMMAND)
            return True
        except HostCommandError:
            return False

    def clear_cache(self):
        self._cached = None
        self._cached_at = 0.0

    @staticmethod
    def parse_error(error: Exception) -> str:
        """Turn a command failure into a message a user can act on"""
        message = str(error)
        if not message:
            return 'Unknown error occurred while checking nocsharp CLI.'
        if 'not found' in message or 'not recognized' in message:
            return 'nocsharp command not found. Please install nocsharp CLI.'
        if 'timed out' in message:
            return 'Command timed out. The system may be slow or nocsharp is not responding.'
        if 'ENOENT' in message:
            return 'nocsharp command not found in system PATH.'
        return message

    def get_installation_instructions(self) -> Dict[str, List[str]]:
        return {
            **self.INSTALLATION_INSTRUCTIONS,
            'general': [
                'Ensure nocsharp CLI is installed on your system',
                'Add nocsharp to your system PATH',
                'Restart your terminal/command prompt',
                'Verify installation with: nocsharp --version',
            ],
        }

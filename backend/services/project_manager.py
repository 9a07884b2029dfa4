"""
Project-level operations: sequential command execution, scanning an
existing project and regenerating only what changed.
"""

import logging
import os
from enum import Enum
from typing import Dict, List

from parsers.entity_source_parser import EntitySourceParser, ENTITY_FILE_SUFFIX
from services.change_detector import detect_changes
from services.command_factory import generate_commands
from services.entity_merge import build_overwrite_choices
from services.project_host import BaseProjectHost, HostCommandError

logger = logging.getLogger(__name__)


class ExecutionMode(Enum):
    """Policy when a command fails."""

    CONTINUE_ON_ERROR = 'continue'
    ABORT_ON_ERROR = 'abort'

    @classmethod
    def coerce(cls, value) -> 'ExecutionMode':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid execution mode: {value!r}") from None


class ProjectManager:
    """Runs generated commands and reads project state through a host."""

    def __init__(self, host: BaseProjectHost, entities_subdir: str = 'Domain/Entities',
                 mode: ExecutionMode = ExecutionMode.CONTINUE_ON_ERROR):
        self.host = host
        self.entities_subdir = entities_subdir
        self.mode = mode

    # -----------------------------------------------------------------------
    # Command execution
    # -----------------------------------------------------------------------

    def execute_commands(self, commands: List[str], mode: ExecutionMode = None) -> Dict:
        """Execute commands one at a time, in order.

        Returns:
            {'success': bool, 'commands_executed': int, 'results': [...],
             'errors': [...]} where each result is
            {'command', 'success', 'output', 'error'}.
        """
        mode = ExecutionMode.coerce(mode) if mode is not None else self.mode
        results: List[Dict] = []
        errors: List[str] = []
        executed = 0

        for command in commands:
            try:
                output = self.host.execute_shell_command(command)
            except HostCommandError as e:
                logger.warning("Command failed: %s (%s)", command, e)
                results.append({'command': command, 'success': False, 'output': e.output, 'error': str(e)})
                errors.append(str(e))
                if mode is ExecutionMode.ABORT_ON_ERROR:
                    break
                continue

            executed += 1
            results.append({'command': command, 'success': True, 'output': output, 'error': None})

        logger.info("Executed %d/%d commands (%s)", executed, len(commands), mode.value)
        return {
            'success': not errors,
            'commands_executed': executed,
            'results': results,
            'errors': errors,
        }

    def update_modified_entities(self, directory_path: str, current: List[Dict],
                                 original: List[Dict], mode: ExecutionMode = None) -> Dict:
        """Regenerate entities that are new or differ from the original."""
        changes = detect_changes(current, original)
        changed = changes['added_entities'] + changes['modified_entities']
        # keep the caller's ordering
        changed_names = {e.get('name') for e in changed}
        changed = [e for e in current if e.get('name') in changed_names]

        if not changed:
            return {'success': True, 'commands_executed': 0, 'results': [], 'errors': []}

        commands = [
            f'cd "{directory_path}" && {command}'
            for command in generate_commands(changed, is_existing_project=True, overwrite_choices={})
        ]
        return self.execute_commands(commands, mode)

    # -----------------------------------------------------------------------
    # Project state
    # -----------------------------------------------------------------------

    def load_project_entities(self, project_path: str) -> Dict:
        """Scan an existing project. {'success', 'entities', 'errors'}"""
        return EntitySourceParser().scan_project(project_path, self.host, self.entities_subdir)

    def entity_file_path(self, project_path: str, entity_name: str) -> str:
        name = entity_name[:1].upper() + entity_name[1:]
        parts = self.entities_subdir.replace('\\', '/').split('/')
        return os.path.join(project_path, *parts, f"{name}{ENTITY_FILE_SUFFIX}")

    def find_existing_entities(self, project_path: str, entities: List[Dict]) -> Dict:
        """Entities whose generated file already exists, with initial choices.

        Returns:
            {'existing_entities': [...], 'overwrite_choices': {name: 'keep'|'overwrite'}}
        """
        existing = [
            e for e in entities
            if e.get('name') and self.host.file_exists(self.entity_file_path(project_path, e['name']))
        ]
        choices = build_overwrite_choices(entities, existing)
        return {
            'existing_entities': existing,
            'overwrite_choices': {name: choice.value for name, choice in choices.items()},
        }

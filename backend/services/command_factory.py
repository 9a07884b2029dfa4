"""
Command Factory - serialises entities into nocsharp CLI invocations.

    nocsharp new "<Project>"
    nocsharp s "<Entity>" Name:string "Tags:List<Tag>" [--baseSkip]

Names are assumed valid (see entity_merge.validate_entity); the only
escaping applied is quoting of generic field tokens.
"""

import re
from typing import Dict, List, Optional, Tuple

from parsers.base import is_collection
from services.entity_merge import resolve_overwrite_choices

CLI = 'nocsharp'
BASE_SKIP_FLAG = '--baseSkip'

# name:Type  /  name:Collection<Type>, optionally quoted
_RE_FIELD_TOKEN = re.compile(r'^"?(\w+):(?:(\w+)<(\w+)>|(\w+))"?$')


def join_paths(*paths: str) -> str:
    """Join path segments with '/', normalising Windows separators."""
    return '/'.join(paths).replace('\\', '/')


def format_field(prop: Dict) -> str:
    """Render one property as a CLI field token."""
    type_str = prop['type']
    if is_collection(prop):
        type_str = f"{prop['collection_type'].strip()}<{prop['type']}>"

    token = f"{prop['name']}:{type_str}"
    if '<' in type_str and '>' in type_str:
        return f'"{token}"'
    return token


def parse_field_token(token: str) -> Optional[Tuple[str, str, str]]:
    """Inverse of format_field: (name, type, collection_type), or None."""
    m = _RE_FIELD_TOKEN.match(token)
    if not m:
        return None
    name, collection_type, element_type, scalar_type = m.groups()
    if collection_type:
        return name, element_type, collection_type
    return name, scalar_type, ''


def build_entity_command(entity: Dict) -> str:
    parts = [CLI, 's', f'"{entity["name"]}"']
    parts.extend(format_field(p) for p in entity.get('properties') or [])
    if entity.get('base_skip'):
        parts.append(BASE_SKIP_FLAG)
    return ' '.join(parts)


def generate_commands(entities: List[Dict], is_existing_project: bool = False,
                      overwrite_choices: Dict = None) -> List[str]:
    """One ``nocsharp s`` line per entity, in input order.

    In an existing project entities the user chose to keep are skipped.
    """
    if is_existing_project:
        entities = resolve_overwrite_choices(entities, overwrite_choices or {})
    return [build_entity_command(e) for e in entities]


def generate_project_commands(project_name: str, entities: List[Dict], directory_path: str,
                              is_existing_project: bool = False,
                              overwrite_choices: Dict = None) -> Dict:
    """Commands runnable from any working directory.

    Returns:
        {'project_command': str or None, 'entity_commands': [...],
         'all_commands': [...]}. The project command always comes first.
    """
    commands: List[str] = []
    project_command = None

    if not is_existing_project and project_name:
        project_command = f'cd "{directory_path}" && {CLI} new "{project_name}"'
        commands.append(project_command)

    entity_commands = generate_commands(entities, is_existing_project, overwrite_choices)

    project_path = directory_path if is_existing_project else join_paths(directory_path, project_name)
    prefixed = [
        f'cd "{project_path}" && {command}' if command.startswith(f'{CLI} s') else command
        for command in entity_commands
    ]
    commands.extend(prefixed)

    return {
        'project_command': project_command,
        'entity_commands': prefixed,
        'all_commands': commands,
    }


def generate_script(entities: List[Dict], project_name: str,
                    is_existing_project: bool = False) -> str:
    """A shell script body that creates the project and its entities."""
    commands: List[str] = []
    if not is_existing_project:
        commands.append(f'{CLI} new "{project_name}"')
        commands.append(f'cd "{project_name}"')

    commands.extend(generate_commands(entities, is_existing_project, {}))
    return '\n'.join(commands)

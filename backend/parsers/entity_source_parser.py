"""
Entity Source Parser - Recover entities from generated C# entity classes.

Regex-based and deliberately lossy: it understands the shape nocsharp
writes (``public class XEntity : BaseEntity { ctor(s); auto-properties }``)
and silently ignores anything else. Used both when scanning an existing
project's Domain/Entities folder and for pasted code.
"""

import logging
import os
import re
from typing import Dict, List, Optional, Tuple

from .base import BaseEntityParser, make_entity, make_property, strip_comments_only
from .type_mapper import map_source_type

logger = logging.getLogger(__name__)

ENTITY_SUFFIX = 'Entity'
ENTITY_FILE_SUFFIX = 'Entity.cs'

# Declared on BaseEntity, never user data
INHERITED_PROPERTIES = frozenset({'Id', 'CreatedAt', 'UpdatedAt'})

# ---------------------------------------------------------------------------
# Compiled regex patterns
# ---------------------------------------------------------------------------

# Class header: public class PostsEntity : BaseEntity {
_RE_ENTITY_CLASS = re.compile(
    r'public\s+(?:partial\s+)?class\s+(\w+)Entity\s*'
    r':\s*[\w.<>,\s]+?\s*\{'
)

# Constructor signature: public PostsEntity(string title, Guid UsersEntityID)
_RE_CONSTRUCTOR = re.compile(r'public\s+\w+Entity\s*\([^)]*\)')

# Any class declaration; ends the body of the entity class before it
_RE_ANY_CLASS = re.compile(r'\b(?:public|internal|private|protected)\s+(?:\w+\s+)*class\s+\w+')

# Auto-property: public [virtual] Type Name { get; set; } [= init;]
_RE_PROPERTY = re.compile(
    r'public\s+'
    r'(?:virtual\s+)?'
    r'(\w+(?:<[\w,\s]+>)?(?:\[\])?\??)\s+'   # type: T, T?, T[], Coll<T>
    r'(\w+)\s*'                               # property name
    r'\{\s*get\s*;\s*set\s*;\s*\}'
    r'(?:\s*=\s*[^;]+;)?'                     # optional initializer
)

# Collection wrappers, checked in priority order
_COLLECTION_PATTERNS = [
    ('ICollection', 'ICollection<', re.compile(r'ICollection<(\w+)>')),
    ('List', 'List<', re.compile(r'List<(\w+)>')),
    ('IEnumerable', 'IEnumerable<', re.compile(r'IEnumerable<(\w+)>')),
]


def _strip_entity_suffix(name: str) -> str:
    if name.endswith(ENTITY_SUFFIX):
        return name[:-len(ENTITY_SUFFIX)]
    return name


def _split_collection(raw_type: str) -> Tuple[str, str]:
    """Return (collection_type, element_type) for a raw C# type token."""
    for collection_type, marker, pattern in _COLLECTION_PATTERNS:
        if marker in raw_type:
            m = pattern.search(raw_type)
            return collection_type, (m.group(1) if m else 'string')
    if raw_type.endswith('[]'):
        return 'Array', raw_type[:-2]
    return 'none', raw_type.rstrip('?')


def parse_properties(class_body: str) -> List[Dict]:
    """Extract property dicts from a class body.

    Navigation inference on types ending in ``Entity``:
      - collections keep the related entity's bare name
      - scalars named ``...Id``/``...ID`` are foreign keys and become Guid
      - other scalars are navigation properties (bare entity name)
    """
    properties: List[Dict] = []

    for m in _RE_PROPERTY.finditer(class_body):
        raw_type, name = m.group(1), m.group(2)

        if name in INHERITED_PROPERTIES:
            continue

        collection_type, base_type = _split_collection(raw_type)

        if base_type.endswith(ENTITY_SUFFIX):
            if collection_type == 'none' and (name.endswith('ID') or name.endswith('Id')):
                base_type = 'Guid'
            else:
                base_type = _strip_entity_suffix(base_type)

        properties.append(make_property(name, map_source_type(base_type), collection_type))

    return properties


def parse_entities_from_source(content: str) -> List[Dict]:
    """Extract every ``public class XEntity : Base { ... }`` as an entity.

    A class body runs until the next class declaration of any kind (another
    entity, a DTO or a nested class) or end of text. Only the part after the
    last constructor signature is read for properties. Classes yielding no
    properties are dropped.
    """
    entities: List[Dict] = []
    if not content:
        return entities

    text = strip_comments_only(content)

    for header in _RE_ENTITY_CLASS.finditer(text):
        next_class = _RE_ANY_CLASS.search(text, header.end())
        body_end = next_class.start() if next_class else len(text)
        body = text[header.end():body_end]

        properties_section = _RE_CONSTRUCTOR.split(body)[-1]
        properties = parse_properties(properties_section)

        if not properties:
            logger.debug("Class %sEntity has no properties; skipped", header.group(1))
            continue

        entities.append(make_entity(header.group(1), properties))

    return entities


class EntitySourceParser(BaseEntityParser):
    """Parse nocsharp-generated C# entity files into entity dicts."""

    FILE_EXTENSIONS = ['.cs']

    def parse(self, content: str) -> List[Dict]:
        return parse_entities_from_source(content)

    def parse_properties(self, class_body: str) -> List[Dict]:
        return parse_properties(class_body)

    def scan_project(self, project_path: str, host,
                     entities_subdir: str = 'Domain/Entities') -> Dict:
        """Scan ``<project>/<entities_subdir>`` for ``*Entity.cs`` files.

        File access goes through ``host`` (a BaseProjectHost), so the scan
        runs the same against the local disk or a test double.

        Returns:
            {'success': bool, 'entities': [...], 'errors': [...]}
        """
        entities_dir = os.path.join(project_path, *entities_subdir.replace('\\', '/').split('/'))
        errors: List[str] = []

        try:
            files = host.list_files(entities_dir)
        except OSError as e:
            logger.warning("Cannot list %s: %s", entities_dir, e)
            return {'success': False, 'entities': [], 'errors': [str(e)]}

        entities: List[Dict] = []
        for fpath in sorted(f for f in files if os.path.basename(f).endswith(ENTITY_FILE_SUFFIX)):
            content = self._read(host, fpath, errors)
            if content is None:
                continue
            for entity in parse_entities_from_source(content):
                entity['file_path'] = fpath
                entity['is_existing'] = True
                entities.append(entity)

        logger.info("Scanned %s: %d entities, %d errors", entities_dir, len(entities), len(errors))
        return {'success': True, 'entities': entities, 'errors': errors}

    @staticmethod
    def _read(host, fpath: str, errors: List[str]) -> Optional[str]:
        try:
            return host.read_text_file(fpath)
        except OSError as e:
            logger.warning("Cannot read %s: %s", fpath, e)
            errors.append(f"{os.path.basename(fpath)}: {e}")
            return None

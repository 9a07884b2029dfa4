"""
DBDiagram Parser - Extract entities from DBML-like schema text.

Uses line-by-line parsing with a two-state machine (outside / inside a
Table block). Only the ``Table name { field type [attrs] }`` subset of DBML
is understood; everything else is skipped without error.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from .base import BaseEntityParser, make_entity, make_property
from .type_mapper import map_dbdiagram_type

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Compiled regex patterns
# ---------------------------------------------------------------------------

# Block opener: Table users {  /  table users  /  Table public.users as U {
_RE_TABLE_BLOCK = re.compile(r'^table\s+([\w.]+)', re.IGNORECASE)

# Anywhere in the document, used by validation only
_RE_TABLE_ANYWHERE = re.compile(r'table\s+\w+', re.IGNORECASE)

# Field line inside a table:
#   title varchar(255) [not null, note: 'x']
_RE_FIELD = re.compile(
    r'^(\w+)\s+'                  # field name
    r'(\w+(?:\([^)]+\))?)\s*'     # type, optional (size/precision)
    r'(?:\[([^\]]*)\])?'          # optional [attributes]
)

# Parenthesised size/precision suffix: varchar(255), decimal(10,2)
_RE_TYPE_ARGS = re.compile(r'\(.*\)')

_COMMENT_PREFIXES = ('//', '/*')

_OUTSIDE_TABLE = 'outside_table'
_INSIDE_TABLE = 'inside_table'


class DBDiagramError:
    """Validation failure codes returned by parse_with_validation()."""

    EMPTY_CONTENT = 'EmptyContent'
    NO_TABLE_FOUND = 'NoTableFound'
    NO_ENTITIES_PARSED = 'NoEntitiesParsed'

    MESSAGES = {
        EMPTY_CONTENT: 'File content is empty',
        NO_TABLE_FOUND: 'No table definition found in DBDiagram format',
        NO_ENTITIES_PARSED: 'No entities found in file. Check the DBDiagram format.',
    }


class DBDiagramParser(BaseEntityParser):
    """Parse DBDiagram (.dbml) text into entity dicts."""

    FILE_EXTENSIONS = ['.dbml', '.txt']

    def parse(self, content: str) -> List[Dict]:
        """Parse DBDiagram content and return the closed Table blocks."""
        entities, _ = self._parse_content(content)
        return entities

    def parse_with_validation(self, content: str) -> Dict:
        """Validate and parse content.

        Returns:
            {'success': True, 'entities': [...], 'warnings': [...]} or
            {'success': False, 'error': <DBDiagramError code>, 'message': str,
             'warnings': [...]}
        """
        error = self.validate_content(content)
        if error:
            return self._failure(error, [])

        entities, warnings = self._parse_content(content)
        if not entities:
            return self._failure(DBDiagramError.NO_ENTITIES_PARSED, warnings)

        return {'success': True, 'entities': entities, 'warnings': warnings}

    @staticmethod
    def validate_content(content: str) -> Optional[str]:
        """Return a DBDiagramError code, or None when content looks parseable."""
        if not content or not content.strip():
            return DBDiagramError.EMPTY_CONTENT
        if not _RE_TABLE_ANYWHERE.search(content):
            return DBDiagramError.NO_TABLE_FOUND
        return None

    # ------------------------------------------------------------------
    # Internal parsing
    # ------------------------------------------------------------------

    def _parse_content(self, content: str) -> Tuple[List[Dict], List[str]]:
        """Scan content once. Returns (entities, warnings)."""
        entities: List[Dict] = []
        warnings: List[str] = []

        state = _OUTSIDE_TABLE
        current: Optional[Dict] = None
        opened_at = 0

        for line_no, raw_line in enumerate((content or '').splitlines(), start=1):
            line = raw_line.strip()

            # --- table opener ---
            m = _RE_TABLE_BLOCK.match(line)
            # inside a table only a braced "table x {" opens a new one;
            # otherwise it is a column named "table"
            if m and (state != _INSIDE_TABLE or line.endswith('{')):
                if state == _INSIDE_TABLE:
                    warnings.append(self._unterminated(current['name'], opened_at))
                # schema-qualified names keep the table part
                name = m.group(1).split('.')[-1]
                current = make_entity(name)
                opened_at = line_no
                state = _INSIDE_TABLE
                continue

            if state != _INSIDE_TABLE:
                continue

            # --- table close ---
            if line == '}':
                entities.append(current)
                current = None
                state = _OUTSIDE_TABLE
                continue

            if not line or line.startswith(_COMMENT_PREFIXES):
                continue

            field = self._parse_field(line)
            if field:
                current['properties'].append(
                    make_property(field['name'], field['type'], '')
                )

        if state == _INSIDE_TABLE:
            warnings.append(self._unterminated(current['name'], opened_at))

        return entities, warnings

    @staticmethod
    def _parse_field(line: str) -> Optional[Dict]:
        """Parse one column line. Returns None for anything that isn't a column.

        The nullable flag is recovered for completeness only; the entity
        model carries name/type/collection_type.
        """
        m = _RE_FIELD.match(line)
        if not m:
            return None

        name, raw_type, attributes = m.group(1), m.group(2), m.group(3) or ''
        base_type = _RE_TYPE_ARGS.sub('', raw_type).lower()

        is_primary_key = 'pk' in attributes or 'primary key' in attributes
        not_null = 'not null' in attributes

        # Primary keys are always generated as auto-increment ints
        type_ = 'int' if is_primary_key else map_dbdiagram_type(base_type)

        return {
            'name': name,
            'type': type_,
            'nullable': not (not_null or is_primary_key),
            'primary_key': is_primary_key,
        }

    @staticmethod
    def _unterminated(name: str, line_no: int) -> str:
        logger.warning("Table '%s' opened on line %d is never closed; dropped", name, line_no)
        return f"Table '{name}' (line {line_no}) is not closed with '}}' and was skipped"

    @staticmethod
    def _failure(code: str, warnings: List[str]) -> Dict:
        return {
            'success': False,
            'error': code,
            'message': DBDiagramError.MESSAGES[code],
            'warnings': warnings,
        }

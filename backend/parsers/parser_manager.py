"""
Parser Manager — detects the input format and routes to the right parser.

Supports: DBDiagram/DBML text (.dbml, .txt) and nocsharp C# entity files (.cs).
"""

import logging
import re
from typing import Dict, Optional

from .base import read_file_safe

logger = logging.getLogger(__name__)

FORMAT_DBDIAGRAM = 'dbdiagram'
FORMAT_ENTITY_SOURCE = 'entity_source'

# Content sniffing, used when the filename says nothing
_RE_SNIFF_CSHARP = re.compile(r'public\s+(?:partial\s+)?class\s+\w+Entity\b')
_RE_SNIFF_DBML = re.compile(r'^\s*table\s+\w+', re.IGNORECASE | re.MULTILINE)


class UnsupportedFormatError(Exception):
    """Raised when the input matches no known entity source format."""
    pass


class ParserManager:
    """Manages format detection and routing to the entity parsers."""

    # -----------------------------------------------------------------------
    # Format detection
    # -----------------------------------------------------------------------

    def detect_format(self, filename: Optional[str] = None, content: str = '') -> str:
        """Detect the input format from the file extension, then the content.

        Raises:
            UnsupportedFormatError: neither the name nor the text is recognised.
        """
        from .dbdiagram_parser import DBDiagramParser
        from .entity_source_parser import EntitySourceParser

        if filename:
            if EntitySourceParser.handles(filename):
                return FORMAT_ENTITY_SOURCE
            if DBDiagramParser.handles(filename):
                return FORMAT_DBDIAGRAM

        if content and _RE_SNIFF_CSHARP.search(content):
            return FORMAT_ENTITY_SOURCE
        if content and _RE_SNIFF_DBML.search(content):
            return FORMAT_DBDIAGRAM

        source = repr(filename) if filename else 'content'
        raise UnsupportedFormatError(
            f"Unrecognised entity source {source}. "
            "Supported: DBDiagram (.dbml, .txt), C# entity classes (.cs)")

    # -----------------------------------------------------------------------
    # Parsing
    # -----------------------------------------------------------------------

    def parse_content(self, content: str, filename: Optional[str] = None) -> Dict:
        """Parse text of either format.

        Returns:
            {'format': str, 'success': bool, 'entities': [...], ...}. DBDiagram
            input carries its validation fields (error/message/warnings).
        """
        fmt = self.detect_format(filename, content)
        parser = self._get_parser(fmt)

        if fmt == FORMAT_DBDIAGRAM:
            result = parser.parse_with_validation(content)
        else:
            entities = parser.parse(content)
            result = {'success': True, 'entities': entities}

        logger.info("Parsed %s as %s: %d entities",
                    filename or '<content>', fmt, len(result.get('entities', [])))
        return {'format': fmt, **result}

    def parse_file(self, file_path: str) -> Dict:
        """Read file_path and parse it according to its format."""
        content = read_file_safe(file_path)
        if content is None:
            raise UnsupportedFormatError(f"Cannot read {file_path}")
        return self.parse_content(content, file_path)

    def _get_parser(self, fmt: str):
        """Return the parser instance for a format key."""
        if fmt == FORMAT_DBDIAGRAM:
            from .dbdiagram_parser import DBDiagramParser
            return DBDiagramParser()
        if fmt == FORMAT_ENTITY_SOURCE:
            from .entity_source_parser import EntitySourceParser
            return EntitySourceParser()

        raise UnsupportedFormatError(f"No parser available for format {fmt!r}")

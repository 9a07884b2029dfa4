"""
Base classes and shared utilities for the entity parsers.

Provides the entity/property dict constructors, file reading, comment
stripping and the common parser interface used by the DBDiagram and
C# entity-source parsers.
"""

import logging
import re
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


# Sentinel name of the generator's common base class. Never diffed or counted.
BASE_ENTITY_NAME = 'BaseEntity'

# collection_type values meaning "scalar"
SCALAR_COLLECTION_TYPES = ('', 'none')


# ---------------------------------------------------------------------------
# Entity model constructors
# ---------------------------------------------------------------------------

def make_property(name: str, type_: str, collection_type: str = '') -> Dict:
    """Build a property dict: {'name', 'type', 'collection_type'}."""
    return {
        'name': name,
        'type': type_,
        'collection_type': collection_type,
    }


def make_entity(name: str, properties: List[Dict] = None,
                base_skip: bool = False, file_path: str = None,
                is_existing: bool = None) -> Dict:
    """Build an entity dict.

    ``file_path`` and ``is_existing`` are provenance markers and are only
    included when given, so entities built by the text parsers compare
    equal to hand-built ones.
    """
    entity = {
        'name': name,
        'properties': list(properties or []),
        'base_skip': base_skip,
    }
    if file_path is not None:
        entity['file_path'] = file_path
    if is_existing is not None:
        entity['is_existing'] = is_existing
    return entity


def is_collection(prop: Dict) -> bool:
    """True when the property wraps its type in a collection."""
    collection_type = (prop.get('collection_type') or '').strip()
    return collection_type not in SCALAR_COLLECTION_TYPES


# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------

def read_file_safe(file_path: str, encoding: str = 'utf-8') -> Optional[str]:
    """Read a file, returning content or None on error.

    Tries utf-8 first (stripping a BOM, which Visual Studio likes to write),
    falls back to latin-1.
    """
    for enc in [encoding, 'latin-1']:
        try:
            with open(file_path, 'r', encoding=enc) as f:
                content = f.read()
            return content.lstrip('\ufeff')
        except UnicodeDecodeError:
            continue
        except (PermissionError, OSError) as e:
            logger.warning("Cannot read %s: %s", file_path, e)
            return None
    return None


# ---------------------------------------------------------------------------
# Comment stripping
# ---------------------------------------------------------------------------

# C-family (C#): comments plus string literals, so that literals containing
# "//" are not mistaken for comments.
_RE_C_FAMILY = re.compile(
    r'//[^\n]*'              # single-line comments
    r'|/\*.*?\*/'            # multi-line comments
    r"|'(?:\\.|[^'\\])*'"    # char literals
    r'|"(?:\\.|[^"\\])*"',   # string literals
    re.DOTALL,
)

_STRING_STARTERS = frozenset({"'", '"'})


def _replace_comments_keep_strings(match):
    """Replace comments with whitespace but preserve string literals intact."""
    text = match.group(0)
    if text[0] in _STRING_STARTERS:
        return text
    return re.sub(r'[^\n]', ' ', text)


def strip_comments_only(content: str) -> str:
    """Blank out C# comments, keeping string literals and line positions."""
    return _RE_C_FAMILY.sub(_replace_comments_keep_strings, content)


# ---------------------------------------------------------------------------
# Base parser class
# ---------------------------------------------------------------------------

class BaseEntityParser:
    """Base class for parsers that turn text into entity dicts."""

    FILE_EXTENSIONS: List[str] = []

    def parse(self, content: str) -> List[Dict]:
        """Parse text and return a list of entity dicts.

        Subclasses must override this method.
        """
        raise NotImplementedError

    def parse_file(self, file_path: str) -> List[Dict]:
        """Read file_path and parse it. Unreadable files yield no entities."""
        content = read_file_safe(file_path)
        if not content:
            return []
        return self.parse(content)

    @classmethod
    def handles(cls, filename: str) -> bool:
        """True when filename carries one of this parser's extensions."""
        lower = filename.lower()
        return any(lower.endswith(ext.lower()) for ext in cls.FILE_EXTENSIONS)

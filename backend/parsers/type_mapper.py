"""
Type mapping from source-schema primitive names to the C# type vocabulary
understood by the nocsharp generator.

Two tables with deliberately different behaviour:
  - DBML tokens are lower-cased and unknown tokens default to ``string``.
  - C# tokens are matched exact-case and unknown tokens pass through, so
    navigation properties keep the related entity's name.
"""

from typing import Dict, List

# ---------------------------------------------------------------------------
# DBML type to C# type mapping
# ---------------------------------------------------------------------------

_DBML_TYPE_MAP = {
    'int': 'int',
    'integer': 'int',
    'bigint': 'long',
    'varchar': 'string',
    'text': 'string',
    'char': 'string',
    'boolean': 'bool',
    'bool': 'bool',
    'decimal': 'decimal',
    'float': 'float',
    'double': 'double',
    'datetime': 'DateTime',
    'timestamp': 'DateTime',
    'date': 'DateTime',
    'time': 'TimeSpan',
    'uuid': 'Guid',
    'json': 'string',
    'jsonb': 'string',
}

DEFAULT_DBML_TYPE = 'string'

# ---------------------------------------------------------------------------
# C# source type mapping (exact case)
# ---------------------------------------------------------------------------

_SOURCE_TYPE_MAP = {
    'string': 'string',
    'int': 'int',
    'Guid': 'Guid',
    'DateTime': 'DateTime',
    'decimal': 'decimal',
    'bool': 'bool',
    'double': 'double',
    'float': 'float',
    'long': 'long',
}

# Scalar types offered when editing a property
CSHARP_TYPES = [
    'bool', 'byte', 'char', 'DateTime', 'decimal', 'double', 'dynamic', 'float', 'Guid',
    'int', 'long', 'object', 'sbyte', 'short', 'string', 'TimeSpan', 'uint', 'ulong', 'ushort',
]

# Collection wrappers the generator accepts
COLLECTION_TYPES = ['none', 'List', 'ICollection', 'IEnumerable', 'Array']


def map_dbdiagram_type(token: str) -> str:
    """Map a DBML column type (size suffix already removed) to a C# type."""
    return _DBML_TYPE_MAP.get((token or '').strip().lower(), DEFAULT_DBML_TYPE)


def map_source_type(token: str) -> str:
    """Map a C# type token; unknown names (related entities) pass through."""
    return _SOURCE_TYPE_MAP.get(token, token)


def get_type_options(entities: List[Dict], entity_index: int) -> List[str]:
    """Types selectable for a property of entities[entity_index].

    Scalar types first, then every named entity declared before it.
    """
    previous = [e.get('name', '') for e in entities[:entity_index]]
    return CSHARP_TYPES + [name for name in previous if name]

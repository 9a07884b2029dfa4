from .base import BASE_ENTITY_NAME, make_entity, make_property
from .type_mapper import map_dbdiagram_type, map_source_type, get_type_options
from .dbdiagram_parser import DBDiagramParser, DBDiagramError
from .entity_source_parser import EntitySourceParser, parse_entities_from_source, parse_properties
from .parser_manager import ParserManager, UnsupportedFormatError

__all__ = [
    'BASE_ENTITY_NAME', 'make_entity', 'make_property',
    'map_dbdiagram_type', 'map_source_type', 'get_type_options',
    'DBDiagramParser', 'DBDiagramError',
    'EntitySourceParser', 'parse_entities_from_source', 'parse_properties',
    'ParserManager', 'UnsupportedFormatError',
]

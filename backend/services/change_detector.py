"""Change detection between the live entity set and a scanned baseline."""

import logging
from collections import Counter
from typing import Dict, List, Optional

from parsers.base import BASE_ENTITY_NAME

logger = logging.getLogger(__name__)


def filter_non_base_entities(entities: List[Dict]) -> List[Dict]:
    """Drop the BaseEntity sentinel."""
    return [e for e in entities if e.get('name') != BASE_ENTITY_NAME]


def _property_key(prop: Dict):
    return (prop.get('name'), prop.get('type'), prop.get('collection_type') or '')


def entities_equal(a: Dict, b: Dict, order_sensitive: bool = True) -> bool:
    """Structural equality over name, properties and base_skip.

    Every change-detection path compares through here. With the default
    ``order_sensitive=True`` a reordering of otherwise identical properties
    counts as a modification.
    """
    if a.get('name') != b.get('name'):
        return False
    if bool(a.get('base_skip')) != bool(b.get('base_skip')):
        return False

    props_a = [_property_key(p) for p in a.get('properties') or []]
    props_b = [_property_key(p) for p in b.get('properties') or []]
    if order_sensitive:
        return props_a == props_b
    return Counter(props_a) == Counter(props_b)


def _find_by_name(entities: List[Dict], name: str) -> Optional[Dict]:
    return next((e for e in entities if e.get('name') == name), None)


def detect_changes(current: List[Dict], original: List[Dict],
                   order_sensitive: bool = True) -> Dict:
    """Classify current entities against the original set.

    Returns:
        {'has_changes', 'modified_count', 'added_entities',
         'modified_entities', 'removed_entities'}
    """
    current = filter_non_base_entities(current)
    original = filter_non_base_entities(original)

    added: List[Dict] = []
    modified: List[Dict] = []
    removed: List[Dict] = []

    for entity in current:
        reference = _find_by_name(original, entity.get('name'))
        if reference is None:
            added.append(entity)
        elif not entities_equal(entity, reference, order_sensitive):
            modified.append(entity)

    current_names = {e.get('name') for e in current}
    for entity in original:
        if entity.get('name') not in current_names:
            removed.append(entity)

    modified_count = len(added) + len(modified) + len(removed)
    logger.debug("Changes: %d added, %d modified, %d removed",
                 len(added), len(modified), len(removed))

    return {
        'has_changes': modified_count > 0,
        'modified_count': modified_count,
        'added_entities': added,
        'modified_entities': modified,
        'removed_entities': removed,
    }


def get_modified_entities(current: List[Dict], original: List[Dict],
                          scanned: List[Dict] = None) -> List[Dict]:
    """Entities that differ from their original, or from the scan when no original exists."""
    scanned = scanned or []
    result = []
    for entity in filter_non_base_entities(current):
        reference = (_find_by_name(original, entity.get('name'))
                     or _find_by_name(scanned, entity.get('name')))
        if reference is not None and not entities_equal(entity, reference):
            result.append(entity)
    return result


def get_entity_change_details(entity: Dict, original: List[Dict],
                              scanned: List[Dict] = None) -> List[Dict]:
    """Per-property diff for display.

    The reference is the same-named original entity, falling back to the
    scanned baseline. No reference means no details.
    """
    name = entity.get('name')
    reference = _find_by_name(original or [], name) or _find_by_name(scanned or [], name)
    if reference is None:
        return []

    changes: List[Dict] = []
    current_props = entity.get('properties') or []
    reference_props = reference.get('properties') or []

    for prop in current_props:
        ref_prop = next((p for p in reference_props if p.get('name') == prop.get('name')), None)
        if ref_prop is None:
            changes.append({'type': 'added', 'property': prop['name'],
                            'detail': f"Type: {prop.get('type')}"})
        elif _property_key(prop) != _property_key(ref_prop):
            changes.append({'type': 'modified', 'property': prop['name'],
                            'detail': f"{_describe_type(ref_prop)} → {_describe_type(prop)}"})

    current_names = {p.get('name') for p in current_props}
    for prop in reference_props:
        if prop.get('name') not in current_names:
            changes.append({'type': 'removed', 'property': prop['name'],
                            'detail': f"Type: {prop.get('type')}"})

    return changes


def _describe_type(prop: Dict) -> str:
    collection_type = prop.get('collection_type') or ''
    if collection_type and collection_type != 'none':
        return f"{collection_type}<{prop.get('type')}>"
    return prop.get('type') or ''


def compare_entity_lists(list1: List[Dict], list2: List[Dict]) -> bool:
    """True when both lists hold structurally equal entities in the same order."""
    if len(list1) != len(list2):
        return False
    return all(entities_equal(a, b) for a, b in zip(list1, list2))


def calculate_entity_stats(entities: List[Dict]) -> Dict:
    """Counts over the non-base entities."""
    filtered = filter_non_base_entities(entities)
    total_entities = len(filtered)
    total_properties = sum(len(e.get('properties') or []) for e in filtered)
    average = round(total_properties / total_entities, 1) if total_entities else 0

    return {
        'total_entities': total_entities,
        'total_properties': total_properties,
        'average_properties_per_entity': average,
    }

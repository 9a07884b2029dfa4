"""
Merge / reconciliation of entity collections.

Name-keyed upsert, duplicate detection against already-known entities,
and resolution of the user's per-entity overwrite choices.
"""

import logging
import re
from enum import Enum
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)

_RE_VALID_NAME = re.compile(r'^[A-Za-z][A-Za-z0-9]*$')


class OverwriteChoice(Enum):
    """What to do with an entity whose name collides with an existing one."""

    KEEP = 'keep'
    OVERWRITE = 'overwrite'
    UNSPECIFIED = 'unspecified'

    @classmethod
    def coerce(cls, value) -> 'OverwriteChoice':
        """Accept enum members, legacy booleans, strings or None."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.UNSPECIFIED
        if isinstance(value, bool):
            return cls.OVERWRITE if value else cls.KEEP
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid overwrite choice: {value!r}") from None


def _normalize_name(name: str) -> str:
    return (name or '').strip().lower()


def merge_entities(current: List[Dict], incoming: List[Dict], replace: bool = False) -> List[Dict]:
    """Merge incoming entities into current.

    ``replace=True`` returns incoming as-is. Otherwise same-named entities
    are shallow-merged (incoming keys win) at their existing position and
    new names are appended in incoming order. Inputs are not mutated.
    """
    if replace:
        return list(incoming)

    merged = [dict(e) for e in current]
    index_by_name = {e.get('name'): i for i, e in enumerate(merged)}

    for entity in incoming:
        idx = index_by_name.get(entity.get('name'))
        if idx is not None:
            merged[idx] = {**merged[idx], **entity}
        else:
            index_by_name[entity.get('name')] = len(merged)
            merged.append(dict(entity))

    return merged


def add_entities(current: List[Dict], incoming: List[Dict]) -> Tuple[List[Dict], int]:
    """Append only entities whose exact name is not present yet.

    Returns (merged, number_added).
    """
    names = {e.get('name') for e in current}
    added = []
    for entity in incoming:
        if entity.get('name') not in names:
            names.add(entity.get('name'))
            added.append(entity)
    return list(current) + added, len(added)


def find_duplicates(incoming: List[Dict], existing: List[Dict]) -> List[Dict]:
    """Incoming entities whose name matches an existing one (case/space-insensitive)."""
    existing_names = {_normalize_name(e.get('name')) for e in existing if _normalize_name(e.get('name'))}
    duplicates = [
        e for e in incoming
        if _normalize_name(e.get('name')) and _normalize_name(e.get('name')) in existing_names
    ]
    if duplicates:
        logger.info("Duplicates found: %s", [e.get('name') for e in duplicates])
    return duplicates


def build_overwrite_choices(entities: List[Dict], duplicates: List[Dict]) -> Dict[str, OverwriteChoice]:
    """Initial choices: keep what already exists, overwrite everything else."""
    duplicate_names = {e.get('name') for e in duplicates}
    return {
        e.get('name'): OverwriteChoice.KEEP if e.get('name') in duplicate_names else OverwriteChoice.OVERWRITE
        for e in entities
    }


def resolve_overwrite_choices(entities: List[Dict], choices: Dict) -> List[Dict]:
    """Entities that should be (re)generated: everything not marked KEEP."""
    return [
        e for e in entities
        if OverwriteChoice.coerce(choices.get(e.get('name'))) is not OverwriteChoice.KEEP
    ]


def duplicate_entity(entity: Dict) -> Dict:
    """Copy of entity named ``<name>_Copy`` with copied properties."""
    return {
        'name': f"{entity.get('name', '')}_Copy",
        'properties': [dict(p) for p in entity.get('properties') or []],
    }


# ---------------------------------------------------------------------------
# Name policy (checked by callers before command generation)
# ---------------------------------------------------------------------------

def validate_entity(entity: Dict) -> List[str]:
    """Return human-readable errors for an entity and its property names."""
    errors: List[str] = []
    name = entity.get('name') or ''

    if not name.strip():
        errors.append('Entity name is required')
    elif not _RE_VALID_NAME.match(name):
        errors.append('Entity name must start with a letter and contain only letters and numbers')

    for index, prop in enumerate(entity.get('properties') or [], start=1):
        prop_name = prop.get('name') or ''
        if not prop_name.strip():
            errors.append(f'Property {index} name is required')
        elif not _RE_VALID_NAME.match(prop_name):
            errors.append(
                f'Property {index} name must start with a letter and contain only letters and numbers')

    return errors


def validate_entities(entities: List[Dict]) -> Dict[int, List[str]]:
    """Map entity index to its validation errors; valid entities are omitted."""
    result = {}
    for index, entity in enumerate(entities):
        errors = validate_entity(entity)
        if errors:
            result[index] = errors
    return result

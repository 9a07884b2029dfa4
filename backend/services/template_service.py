"""
Catalog of predefined entity sets a new project can start from.

Fields are written in the CLI token form (``Name:string``,
``Tags:List<string>``) and expanded into property dicts once at import.
"""

import copy
import logging
from typing import Dict, List, Optional, Tuple

from parsers.base import make_entity, make_property
from services.command_factory import parse_field_token
from services.entity_merge import add_entities, merge_entities

logger = logging.getLogger(__name__)

APPLY_ADD = 'add'
APPLY_MERGE = 'merge'
APPLY_REPLACE = 'replace'
APPLY_MODES = (APPLY_ADD, APPLY_MERGE, APPLY_REPLACE)


class TemplateNotFoundError(Exception):
    """Raised when a template id is not in the catalog."""
    pass


def _entity(name: str, *fields: str) -> Dict:
    properties = [make_property(*parse_field_token(field)) for field in fields]
    return make_entity(name, properties)


def _template(template_id, name, description, category, icon, tags, entities) -> Dict:
    return {
        'id': template_id,
        'name': name,
        'description': description,
        'category': category,
        'icon': icon,
        'tags': list(tags),
        'entities': list(entities),
    }


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

_TEMPLATES = [
    _template(
        '1', 'E-commerce Basic',
        'Basic entities for an e-commerce system with users, products, and orders',
        'E-commerce', 'ShoppingCartOutlined', ['e-commerce', 'basic', 'web'],
        [
            _entity('User', 'Name:string', 'Email:string', 'Password:string', 'CreatedAt:DateTime'),
            _entity('Product', 'Name:string', 'Description:string', 'Price:decimal', 'Stock:int'),
            _entity('Order', 'UserId:int', 'Total:decimal', 'Status:string', 'CreatedAt:DateTime'),
        ],
    ),
    _template(
        '2', 'Blog System',
        'Complete blog system with authors, posts, comments, and categories',
        'Content Management', 'EditOutlined', ['blog', 'cms', 'content'],
        [
            _entity('Author', 'Name:string', 'Email:string', 'Bio:string', 'AvatarUrl:string'),
            _entity('Post', 'Title:string', 'Content:string', 'AuthorId:int', 'PublishedAt:DateTime',
                    'Tags:List<string>'),
            _entity('Comment', 'Content:string', 'PostId:int', 'AuthorName:string', 'CreatedAt:DateTime'),
        ],
    ),
    _template(
        '3', 'Financial Management',
        'Financial system with accounts, transactions, and budgets',
        'Finance', 'DollarOutlined', ['finance', 'accounting', 'budget'],
        [
            _entity('Account', 'Name:string', 'AccountNumber:string', 'Balance:decimal',
                    'AccountType:string', 'CreatedAt:DateTime'),
            _entity('Transaction', 'Amount:decimal', 'Description:string', 'AccountId:int',
                    'CategoryId:int', 'TransactionDate:DateTime', 'Type:string'),
            _entity('Category', 'Name:string', 'Description:string', 'Color:string'),
            _entity('Budget', 'Name:string', 'Amount:decimal', 'CategoryId:int',
                    'StartDate:DateTime', 'EndDate:DateTime'),
        ],
    ),
    _template(
        '4', 'Task Management',
        'Project and task management system with teams and assignments',
        'Project Management', 'ProjectOutlined', ['project', 'task', 'team', 'management'],
        [
            _entity('Project', 'Name:string', 'Description:string', 'StartDate:DateTime',
                    'EndDate:DateTime', 'Status:string'),
            _entity('Task', 'Title:string', 'Description:string', 'ProjectId:int', 'AssignedToId:int',
                    'Priority:string', 'Status:string', 'DueDate:DateTime'),
            _entity('Team', 'Name:string', 'Description:string', 'LeaderId:int'),
            _entity('Member', 'Name:string', 'Email:string', 'Role:string', 'TeamId:int'),
        ],
    ),
    _template(
        '5', 'Learning Management',
        'Educational platform with courses, students, and assessments',
        'Education', 'BookOutlined', ['education', 'learning', 'course', 'student'],
        [
            _entity('Course', 'Title:string', 'Description:string', 'InstructorId:int', 'Duration:int',
                    'Price:decimal', 'CreatedAt:DateTime'),
            _entity('Student', 'Name:string', 'Email:string', 'EnrollmentDate:DateTime', 'Level:string'),
            _entity('Enrollment', 'StudentId:int', 'CourseId:int', 'EnrolledAt:DateTime',
                    'Progress:decimal', 'CompletedAt:DateTime'),
            _entity('Assessment', 'Title:string', 'CourseId:int', 'StudentId:int', 'Score:decimal',
                    'MaxScore:decimal', 'CompletedAt:DateTime'),
        ],
    ),
    _template(
        '6', 'Inventory Management',
        'Warehouse and inventory control system with suppliers and stock tracking',
        'Logistics', 'ContainerOutlined', ['inventory', 'warehouse', 'logistics', 'supply-chain'],
        [
            _entity('Warehouse', 'Name:string', 'Address:string', 'Capacity:int', 'ManagerId:int'),
            _entity('Item', 'Name:string', 'SKU:string', 'Description:string', 'UnitPrice:decimal',
                    'Weight:decimal', 'CategoryId:int'),
            _entity('Stock', 'ItemId:int', 'WarehouseId:int', 'Quantity:int', 'MinimumLevel:int',
                    'LastUpdated:DateTime'),
            _entity('Supplier', 'Name:string', 'ContactEmail:string', 'Phone:string', 'Address:string',
                    'Rating:decimal'),
            _entity('PurchaseOrder', 'OrderNumber:string', 'SupplierId:int', 'TotalAmount:decimal',
                    'Status:string', 'OrderDate:DateTime', 'ExpectedDelivery:DateTime'),
        ],
    ),
    _template(
        '7', 'Healthcare Management',
        'Healthcare system with patients, doctors, appointments, and medical records',
        'Healthcare', 'HeartOutlined', ['healthcare', 'medical', 'patient', 'doctor'],
        [
            _entity('Patient', 'Name:string', 'Email:string', 'Phone:string', 'DateOfBirth:DateTime',
                    'Address:string', 'EmergencyContact:string'),
            _entity('Doctor', 'Name:string', 'Email:string', 'Phone:string', 'Specialty:string',
                    'LicenseNumber:string', 'DepartmentId:int'),
            _entity('Appointment', 'PatientId:int', 'DoctorId:int', 'ScheduledAt:DateTime', 'Duration:int',
                    'Status:string', 'Notes:string'),
            _entity('MedicalRecord', 'PatientId:int', 'DoctorId:int', 'Diagnosis:string',
                    'Treatment:string', 'Prescription:string', 'RecordDate:DateTime'),
        ],
    ),
]


# ---------------------------------------------------------------------------
# Queries (callers always get copies)
# ---------------------------------------------------------------------------

def get_all_templates() -> List[Dict]:
    return copy.deepcopy(_TEMPLATES)


def get_template_by_id(template_id: str) -> Optional[Dict]:
    template = next((t for t in _TEMPLATES if t['id'] == str(template_id)), None)
    return copy.deepcopy(template) if template else None


def get_templates_by_category(category: str) -> List[Dict]:
    """Exact category match."""
    return copy.deepcopy([t for t in _TEMPLATES if t['category'] == category])


def get_templates_by_tag(tag: str) -> List[Dict]:
    """Templates with any tag containing ``tag``, case-insensitive."""
    needle = (tag or '').lower()
    return copy.deepcopy([
        t for t in _TEMPLATES
        if any(needle in existing.lower() for existing in t['tags'])
    ])


def get_categories() -> List[str]:
    """Distinct categories in catalog order."""
    return list(dict.fromkeys(t['category'] for t in _TEMPLATES))


def search_templates(category: str = None, tag: str = None) -> List[Dict]:
    """Both filters are optional and combine with AND."""
    templates = get_templates_by_category(category) if category else get_all_templates()
    if tag:
        needle = tag.lower()
        templates = [t for t in templates if any(needle in existing.lower() for existing in t['tags'])]
    return templates


def apply_template(current: List[Dict], template_id: str, mode: str = APPLY_ADD) -> Tuple[List[Dict], int]:
    """Bring a template's entities into ``current``.

    Modes:
        add      append only entities whose name is not present yet
        merge    upsert by name (template entities win)
        replace  the template's entities alone

    Returns (entities, number of template entities taken).

    Raises:
        TemplateNotFoundError: unknown template id.
        ValueError: unknown mode.
    """
    template = get_template_by_id(template_id)
    if template is None:
        raise TemplateNotFoundError(f"Template {template_id!r} not found")

    incoming = template['entities']
    if mode == APPLY_ADD:
        entities, taken = add_entities(current, incoming)
    elif mode == APPLY_MERGE:
        entities, taken = merge_entities(current, incoming), len(incoming)
    elif mode == APPLY_REPLACE:
        entities, taken = merge_entities(current, incoming, replace=True), len(incoming)
    else:
        raise ValueError(f"Invalid apply mode: {mode!r}. Expected one of {', '.join(APPLY_MODES)}")

    logger.info("Applied template %s (%s) in %s mode: %d entities",
                template['id'], template['name'], mode, taken)
    return entities, taken

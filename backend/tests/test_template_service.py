import pytest

from parsers.base import make_entity, make_property
from services.template_service import (
    TemplateNotFoundError, apply_template, get_all_templates, get_categories, get_template_by_id,
    get_templates_by_category, get_templates_by_tag, search_templates,
)


def test_get_all_templates():
    templates = get_all_templates()

    assert [t['id'] for t in templates] == ['1', '2', '3', '4', '5', '6', '7']
    assert all(t['entities'] for t in templates)


def test_get_all_templates_returns_copies():
    """Test callers cannot change the catalog"""
    get_all_templates()[0]['entities'].clear()
    assert get_all_templates()[0]['entities']


def test_get_template_by_id():
    template = get_template_by_id('2')

    assert template['name'] == 'Blog System'
    assert [e['name'] for e in template['entities']] == ['Author', 'Post', 'Comment']
    assert get_template_by_id('99') is None


def test_template_fields_expand_to_properties():
    """Test catalog field tokens become property dicts"""
    post = get_template_by_id('2')['entities'][1]

    assert post['properties'][0] == make_property('Title', 'string', '')
    assert post['properties'][-1] == make_property('Tags', 'string', 'List')
    assert post['base_skip'] is False


def test_get_templates_by_category():
    assert [t['id'] for t in get_templates_by_category('Finance')] == ['3']
    assert get_templates_by_category('finance') == []


def test_get_templates_by_tag_is_substring_and_case_insensitive():
    assert [t['id'] for t in get_templates_by_tag('SUPPLY')] == ['6']
    assert [t['id'] for t in get_templates_by_tag('manage')] == ['4']


def test_get_categories():
    categories = get_categories()

    assert categories[:2] == ['E-commerce', 'Content Management']
    assert len(categories) == len(set(categories)) == 7


def test_search_templates_combines_filters():
    assert len(search_templates()) == 7
    assert [t['id'] for t in search_templates(category='Content Management', tag='blog')] == ['2']
    assert search_templates(category='Finance', tag='blog') == []


def test_apply_template_add_skips_existing_names():
    current = [make_entity('Author', [make_property('Handle', 'string')])]

    entities, taken = apply_template(current, '2', 'add')

    assert [e['name'] for e in entities] == ['Author', 'Post', 'Comment']
    assert entities[0]['properties'] == [make_property('Handle', 'string')]
    assert taken == 2


def test_apply_template_merge_overwrites_same_names():
    current = [make_entity('Author', [make_property('Handle', 'string')]), make_entity('Tag')]

    entities, taken = apply_template(current, '2', 'merge')

    assert [e['name'] for e in entities] == ['Author', 'Tag', 'Post', 'Comment']
    assert entities[0]['properties'][0]['name'] == 'Name'
    assert taken == 3


def test_apply_template_replace():
    entities, taken = apply_template([make_entity('Tag')], '3', 'replace')

    assert [e['name'] for e in entities] == ['Account', 'Transaction', 'Category', 'Budget']
    assert taken == 4


def test_apply_template_errors():
    with pytest.raises(TemplateNotFoundError):
        apply_template([], '99')
    with pytest.raises(ValueError):
        apply_template([], '1', 'append')

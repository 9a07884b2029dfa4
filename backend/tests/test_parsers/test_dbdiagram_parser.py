import os

import pytest

from parsers.dbdiagram_parser import DBDiagramError, DBDiagramParser

FIXTURE = os.path.join(os.path.dirname(__file__), '..', 'fixtures', 'dbdiagram', 'blog.dbml')


def _props(entity):
    return [(p['name'], p['type'], p['collection_type']) for p in entity['properties']]


def test_parse_single_table():
    """Test parsing a minimal table with a primary key"""
    entities = DBDiagramParser().parse("Table users {\n  id integer [pk]\n  title varchar(255)\n}")

    assert len(entities) == 1
    assert entities[0]['name'] == 'users'
    assert entities[0]['base_skip'] is False
    assert _props(entities[0]) == [('id', 'int', ''), ('title', 'string', '')]


def test_parse_fixture_file():
    """Test parsing a dbdiagram.io export with refs and comments"""
    entities = DBDiagramParser().parse_file(FIXTURE)

    assert [e['name'] for e in entities] == ['users', 'posts', 'follows']

    users = entities[0]
    assert _props(users) == [
        ('id', 'int', ''),
        ('username', 'string', ''),
        ('email', 'string', ''),
        ('is_active', 'bool', ''),
        ('created_at', 'DateTime', ''),
    ]

    posts = entities[1]
    types = {p['name']: p['type'] for p in posts['properties']}
    assert types['id'] == 'int'
    assert types['title'] == 'string'
    assert types['rating'] == 'decimal'
    # enum-typed column falls back to string
    assert types['status'] == 'string'
    assert len(posts['properties']) == 7


def test_table_keyword_case_insensitive():
    """Test TABLE / table / Table all open a block"""
    content = "TABLE a {\n x int\n}\ntable b {\n y bigint\n}"
    entities = DBDiagramParser().parse(content)

    assert [e['name'] for e in entities] == ['a', 'b']
    assert entities[1]['properties'][0]['type'] == 'long'


def test_primary_key_forces_int():
    """Test pk columns become int regardless of declared type"""
    content = "Table t {\n  uid uuid [primary key]\n  ref uuid\n}"
    entities = DBDiagramParser().parse(content)

    assert _props(entities[0]) == [('uid', 'int', ''), ('ref', 'Guid', '')]


def test_comments_and_blank_lines_skipped():
    """Test comment lines inside a table produce no properties"""
    content = "Table t {\n\n  // a comment\n  /* block */\n  name varchar\n}"
    entities = DBDiagramParser().parse(content)

    assert _props(entities[0]) == [('name', 'string', '')]


def test_unmatched_lines_ignored():
    """Test lines that are not column definitions are skipped"""
    content = "Table t {\n  Note: 'table note'\n  name text\n}"
    entities = DBDiagramParser().parse(content)

    assert _props(entities[0]) == [('name', 'string', '')]


def test_table_with_no_fields():
    """Test an empty table is still an entity"""
    entities = DBDiagramParser().parse("Table empty {\n}")

    assert entities == [{'name': 'empty', 'properties': [], 'base_skip': False}]


def test_unterminated_table_dropped():
    """Test a table without a closing brace is dropped"""
    content = "Table a {\n  x int\nTable b {\n  y int\n}\nTable c {\n  z int\n"
    parser = DBDiagramParser()

    assert [e['name'] for e in parser.parse(content)] == ['b']

    result = parser.parse_with_validation(content)
    assert result['success'] is True
    assert len(result['warnings']) == 2
    assert "'a'" in result['warnings'][0]
    assert "'c'" in result['warnings'][1]


class TestValidation:

    def test_empty_content(self):
        result = DBDiagramParser().parse_with_validation('   \n  ')
        assert result['success'] is False
        assert result['error'] == DBDiagramError.EMPTY_CONTENT
        assert result['message'] == 'File content is empty'

    def test_no_table(self):
        result = DBDiagramParser().parse_with_validation('Ref: a.id > b.id')
        assert result['success'] is False
        assert result['error'] == DBDiagramError.NO_TABLE_FOUND

    def test_table_keyword_but_nothing_parsed(self):
        """'table x' mid-line passes the sniff but opens no block"""
        result = DBDiagramParser().parse_with_validation('// see table users')
        assert result['success'] is False
        assert result['error'] == DBDiagramError.NO_ENTITIES_PARSED

    def test_success(self):
        result = DBDiagramParser().parse_with_validation("Table users {\n id int\n}")
        assert result['success'] is True
        assert result['warnings'] == []
        assert result['entities'][0]['name'] == 'users'

    @pytest.mark.parametrize('content, expected', [
        ('', DBDiagramError.EMPTY_CONTENT),
        (None, DBDiagramError.EMPTY_CONTENT),
        ('Enum status { a }', DBDiagramError.NO_TABLE_FOUND),
        ('Table x {', None),
    ])
    def test_validate_content(self, content, expected):
        assert DBDiagramParser.validate_content(content) == expected


def test_parse_post_table():
    content = "Table Post {\n id int [pk]\n title varchar(255) [not null]\n}"
    assert DBDiagramParser().parse(content) == [{
        'name': 'Post',
        'properties': [
            {'name': 'id', 'type': 'int', 'collection_type': ''},
            {'name': 'title', 'type': 'string', 'collection_type': ''},
        ],
        'base_skip': False,
    }]


@pytest.mark.parametrize('count', [1, 2, 5])
def test_one_entity_per_closed_table(count):
    content = '\n'.join(f"Table t{i} {{\n  id int\n  label text\n}}" for i in range(count))
    assert len(DBDiagramParser().parse(content)) == count


def test_schema_qualified_table_name():
    """Test Table schema.name keeps the table part"""
    entities = DBDiagramParser().parse("Table public.users {\n  id int\n}")

    assert [e['name'] for e in entities] == ['users']


def test_column_named_table_stays_in_block():
    """Test a 'table' column does not start a new table"""
    content = "Table seats {\n  table varchar\n  number int\n}"
    result = DBDiagramParser().parse_with_validation(content)

    assert result['success'] is True
    assert result['warnings'] == []
    assert [e['name'] for e in result['entities']] == ['seats']
    assert _props(result['entities'][0]) == [('table', 'string', ''), ('number', 'int', '')]


def test_braced_table_inside_table_still_opens():
    content = "Table a {\n  x int\nTable b {\n  y int\n}"
    result = DBDiagramParser().parse_with_validation(content)

    assert [e['name'] for e in result['entities']] == ['b']
    assert len(result['warnings']) == 1

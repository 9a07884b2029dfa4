import os

import pytest

from parsers.base import make_entity, make_property
from services.project_manager import ExecutionMode, ProjectManager

from conftest import FakeHost, PROJECT_FIXTURE


class TestExecuteCommands:

    def test_all_succeed(self):
        host = FakeHost(outputs={'b': 'built'})
        result = ProjectManager(host).execute_commands(['a', 'b'])

        assert host.executed == ['a', 'b']
        assert result['success'] is True
        assert result['commands_executed'] == 2
        assert result['errors'] == []
        assert result['results'][1] == {'command': 'b', 'success': True, 'output': 'built', 'error': None}

    def test_continue_on_error(self):
        """Test a failure is recorded and the remaining commands still run"""
        host = FakeHost(failing={'b'})
        result = ProjectManager(host).execute_commands(['a', 'b', 'c'])

        assert host.executed == ['a', 'b', 'c']
        assert result['success'] is False
        assert result['commands_executed'] == 2
        assert result['errors'] == ["'b' failed"]
        assert result['results'][1]['success'] is False
        assert result['results'][1]['output'] == 'boom'

    def test_abort_on_error(self):
        """Test abort mode stops at the first failure"""
        host = FakeHost(failing={'b'})
        result = ProjectManager(host).execute_commands(['a', 'b', 'c'], 'abort')

        assert host.executed == ['a', 'b']
        assert result['commands_executed'] == 1
        assert len(result['results']) == 2

    def test_default_mode_from_constructor(self):
        host = FakeHost(failing={'a'})
        manager = ProjectManager(host, mode=ExecutionMode.ABORT_ON_ERROR)
        manager.execute_commands(['a', 'b'])

        assert host.executed == ['a']

    def test_empty(self):
        result = ProjectManager(FakeHost()).execute_commands([])
        assert result == {'success': True, 'commands_executed': 0, 'results': [], 'errors': []}

    def test_invalid_mode(self):
        with pytest.raises(ValueError):
            ProjectManager(FakeHost()).execute_commands(['a'], 'sometimes')


def test_update_modified_entities():
    """Test only added and modified entities are regenerated, in current order"""
    original = [
        make_entity('User', [make_property('name', 'string')]),
        make_entity('Post', [make_property('title', 'string')]),
    ]
    current = [
        make_entity('Tag', [make_property('label', 'string')]),
        make_entity('User', [make_property('name', 'string')]),
        make_entity('Post', [make_property('title', 'string'), make_property('body', 'string')]),
    ]
    host = FakeHost()

    result = ProjectManager(host).update_modified_entities('/src/Blog', current, original)

    assert result['success'] is True
    assert host.executed == [
        'cd "/src/Blog" && nocsharp s "Tag" label:string',
        'cd "/src/Blog" && nocsharp s "Post" title:string body:string',
    ]


def test_update_modified_entities_nothing_changed():
    entities = [make_entity('User', [make_property('name', 'string')])]
    host = FakeHost()

    result = ProjectManager(host).update_modified_entities('/src/Blog', entities, entities)

    assert result['commands_executed'] == 0
    assert host.executed == []


def test_load_project_entities(local_host):
    result = ProjectManager(local_host).load_project_entities(PROJECT_FIXTURE)

    assert result['success'] is True
    assert [e['name'] for e in result['entities']] == ['Follows', 'Posts', 'Users']


def test_entity_file_path():
    manager = ProjectManager(FakeHost(), entities_subdir='Domain\\Entities')
    assert manager.entity_file_path('/src/Blog', 'user') == os.path.join(
        '/src/Blog', 'Domain', 'Entities', 'UserEntity.cs')


def test_find_existing_entities(local_host):
    """Test entities with a generated file start as 'keep'"""
    entities = [make_entity('Users'), make_entity('posts'), make_entity('Comments')]

    result = ProjectManager(local_host).find_existing_entities(PROJECT_FIXTURE, entities)

    assert [e['name'] for e in result['existing_entities']] == ['Users', 'posts']
    assert result['overwrite_choices'] == {'Users': 'keep', 'posts': 'keep', 'Comments': 'overwrite'}


def test_find_existing_entities_missing_directory(tmp_path, local_host):
    result = ProjectManager(local_host).find_existing_entities(str(tmp_path), [make_entity('Users')])

    assert result['existing_entities'] == []
    assert result['overwrite_choices'] == {'Users': 'overwrite'}

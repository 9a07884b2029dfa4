import os

import pytest

from services.project_host import BaseProjectHost, HostCommandError, HostIOError, LocalProjectHost

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), 'fixtures')
PROJECT_FIXTURE = os.path.join(FIXTURES_DIR, 'nocsharp_project')


class FakeHost(BaseProjectHost):
    """Records commands; files come from an in-memory {path: content} map."""

    def __init__(self, files=None, failing=(), outputs=None, directory='/projects'):
        self.files = dict(files or {})
        self.failing = set(failing)
        self.outputs = dict(outputs or {})
        self.directory = directory
        self.executed = []

    def execute_shell_command(self, command):
        self.executed.append(command)
        if command in self.failing:
            raise HostCommandError(f"'{command}' failed", returncode=1, output='boom')
        return self.outputs.get(command, 'ok')

    def list_files(self, directory):
        prefix = directory.rstrip('/\\') + os.sep
        matches = [p for p in self.files if p.startswith(prefix) and os.sep not in p[len(prefix):]]
        if not matches:
            raise HostIOError(f"Cannot list {directory}")
        return sorted(matches)

    def read_text_file(self, path):
        if path not in self.files or self.files[path] is None:
            raise HostIOError(f"Cannot read {path}")
        return self.files[path]

    def choose_directory(self):
        return self.directory


@pytest.fixture
def fake_host():
    """Fresh FakeHost with no files"""
    return FakeHost()


@pytest.fixture
def local_host():
    """LocalProjectHost reading the fixtures directory"""
    return LocalProjectHost(default_directory=FIXTURES_DIR, timeout=30)


@pytest.fixture
def client(fake_host):
    """Create test client backed by the fake host"""
    from app import app
    app.config['TESTING'] = True
    app.config['PROJECT_HOST'] = fake_host
    app.extensions.pop('nocsharp_cli', None)
    with app.test_client() as client:
        yield client
    app.config.pop('PROJECT_HOST', None)
    app.extensions.pop('nocsharp_cli', None)

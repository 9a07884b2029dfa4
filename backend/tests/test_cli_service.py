import pytest

from services.cli_service import NocSharpCliService
from services.project_host import HostCommandError

from conftest import FakeHost


class Clock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


def test_check_availability_installed(clock):
    host = FakeHost(outputs={'nocsharp --version': '1.4.2\n'})
    service = NocSharpCliService(host, clock=clock)

    assert service.check_availability() == {'is_available': True, 'version': '1.4.2', 'error': None}


def test_check_availability_missing(clock):
    host = FakeHost(failing={'nocsharp --version'})
    result = NocSharpCliService(host, clock=clock).check_availability()

    assert result['is_available'] is False
    assert result['version'] is None
    assert result['error']


def test_check_availability_cached(clock):
    """Test the result is reused within the cache window"""
    host = FakeHost()
    service = NocSharpCliService(host, cache_seconds=30, clock=clock)

    service.check_availability()
    clock.now += 10
    service.check_availability()
    assert len(host.executed) == 1

    clock.now += 25
    service.check_availability()
    assert len(host.executed) == 2

    service.check_availability(use_cache=False)
    assert len(host.executed) == 3

    service.clear_cache()
    service.check_availability()
    assert len(host.executed) == 4


def test_is_available(clock):
    assert NocSharpCliService(FakeHost(), clock=clock).is_available() is True
    assert NocSharpCliService(FakeHost(failing={'nocsharp --help'}), clock=clock).is_available() is False


@pytest.mark.parametrize('message, expected', [
    ('/bin/sh: 1: nocsharp: not found', 'nocsharp command not found. Please install nocsharp CLI.'),
    ("'nocsharp' is not recognized as an internal or external command",
     'nocsharp command not found. Please install nocsharp CLI.'),
    ('Command timed out: nocsharp --version',
     'Command timed out. The system may be slow or nocsharp is not responding.'),
    ('spawn nocsharp ENOENT', 'nocsharp command not found in system PATH.'),
    ('segfault', 'segfault'),
    ('', 'Unknown error occurred while checking nocsharp CLI.'),
])
def test_parse_error(message, expected):
    assert NocSharpCliService.parse_error(HostCommandError(message)) == expected


def test_installation_instructions():
    instructions = NocSharpCliService(FakeHost()).get_installation_instructions()
    assert set(instructions) == {'windows', 'linux', 'macos', 'general'}

from .project_host import BaseProjectHost, LocalProjectHost, HostCommandError, HostIOError
from .entity_merge import OverwriteChoice
from .project_manager import ProjectManager, ExecutionMode
from .cli_service import NocSharpCliService

__all__ = [
    'BaseProjectHost', 'LocalProjectHost', 'HostCommandError', 'HostIOError',
    'OverwriteChoice', 'ProjectManager', 'ExecutionMode', 'NocSharpCliService',
]

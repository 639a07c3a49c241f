"""Error types raised by the LXC driver and its collaborators."""
from typing import List, Optional, Sequence


class LxcPilotError(Exception):
    """Base class for every lxcpilot failure."""
    pass


class ContainerNotFound(LxcPilotError):
    """Raised when a container name is not known to lxc-ls."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Container '{name}' not found")


class ContainerNameMissing(LxcPilotError):
    """Raised when a command needs a container name and none is set."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot run '{operation}' without a container name")


class ExecuteError(LxcPilotError):
    """Raised when an external command fails or returns unexpected output.

    Attributes:
        command: Argument list that was executed
        exit_code: Process exit status (None if the command never ran)
        stdout: Captured standard output
        stderr: Captured standard error
    """

    def __init__(
        self,
        command: Sequence[str],
        exit_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
        message: Optional[str] = None,
    ):
        self.command: List[str] = list(command)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr

        if message is None:
            message = f"Command failed: {' '.join(self.command)}"
            if exit_code is not None:
                message += f" (exit code {exit_code})"
            if stderr:
                message += f": {stderr.strip()}"
        super().__init__(message)


class StateTransitionError(LxcPilotError):
    """Raised when a container does not reach the requested state."""

    def __init__(self, name: str, target, actual):
        self.name = name
        self.target = target
        self.actual = actual
        super().__init__(
            f"Container '{name}' did not reach state {target.value} (currently {actual.value})"
        )


class SharedFolderCreateFailed(LxcPilotError):
    """Raised when a guest directory for a shared folder cannot be created."""

    def __init__(self, path: str):
        self.path = str(path)
        super().__init__(f"Failed to create shared folder path inside the container: {self.path}")


class ConfigurationError(LxcPilotError):
    """Raised when a required path or setting cannot be resolved."""
    pass


class TemplatesPathNotFound(ConfigurationError):
    """Raised when none of the LXC template directories exist."""

    def __init__(self, candidates: Sequence[str]):
        self.candidates = list(candidates)
        super().__init__(
            "Unable to identify lxc templates path (looked in: "
            + ", ".join(self.candidates) + ")"
        )


class RootfsNotConfigured(ConfigurationError):
    """Raised when a container config has no rootfs entry."""

    def __init__(self, config_path, key: str):
        self.config_path = str(config_path)
        self.key = key
        super().__init__(f"No '{key}' entry found in {self.config_path}")

"""Domain errors for kubedeployer."""

from typing import List, Optional


class DeployerError(RuntimeError):
    """Raised when the deployment cannot continue safely."""


class ConfigError(DeployerError):
    """Raised when the configuration file cannot be used."""


class MissingToolError(DeployerError):
    """Raised when a required executable is not available on PATH."""

    def __init__(self, tool: str, message: Optional[str] = None):
        self.tool = tool
        super().__init__(message or f"{tool} is not installed or not in PATH")


class CommandFailedError(DeployerError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, cmd: List[str], returncode: int, message: str):
        self.cmd = cmd
        self.returncode = returncode
        super().__init__(message)


class CommandTimeoutError(CommandFailedError):
    """Raised when an external command exceeds its time budget."""


class HealthCheckError(DeployerError):
    """Raised when the deployed service does not answer its health endpoint."""

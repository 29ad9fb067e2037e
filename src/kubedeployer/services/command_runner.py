"""Subprocess execution service for kubedeployer."""

import subprocess
from typing import List, Optional

from kubedeployer.errors import (
    CommandFailedError,
    CommandTimeoutError,
    DeployerError,
    MissingToolError,
)


class CommandRunner:
    """Runs external commands with consistent error handling."""

    def __init__(self, logger, default_timeout: Optional[float] = None, dry_run: bool = False):
        self.logger = logger
        self.default_timeout = default_timeout
        self.dry_run = dry_run

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        timeout: Optional[float] = None,
        input_text: Optional[str] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)

        if self.dry_run:
            self.logger.info("[dry-run] %s", cmd_str)
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        self.logger.debug("Executing: %s", cmd_str)
        effective_timeout = timeout if timeout is not None else self.default_timeout

        try:
            result = subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                input=input_text,
                timeout=effective_timeout,
            )
        except FileNotFoundError as exc:
            raise MissingToolError(
                cmd[0],
                f"Required command not found: {cmd[0]}. Please install it and try again.",
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(
                cmd,
                -1,
                f"Command timed out after {effective_timeout}s: {cmd_str}",
            ) from exc
        except OSError as exc:
            raise DeployerError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"

        if check:
            raise CommandFailedError(cmd, result.returncode, message)

        self.logger.warning(message)
        return result

    def pipe(
        self,
        producer: List[str],
        consumer: List[str],
        timeout: Optional[float] = None,
    ) -> subprocess.CompletedProcess:
        """Feeds the stdout of ``producer`` into the stdin of ``consumer``."""
        produced = self.run(producer, capture_output=True, timeout=timeout)
        return self.run(
            consumer,
            capture_output=True,
            timeout=timeout,
            input_text=produced.stdout,
        )

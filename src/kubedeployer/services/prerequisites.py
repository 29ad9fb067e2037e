"""Toolchain presence checks for kubedeployer."""

import shutil
from typing import Callable, Iterable, List, Optional

from kubedeployer.errors import MissingToolError


class PrerequisiteService:
    """Verifies the executables the pipeline shells out to."""

    def __init__(self, logger, which: Callable[[str], Optional[str]] = shutil.which):
        self.logger = logger
        self.which = which

    def check(self, required: Iterable[str], optional: Iterable[str] = ()) -> List[str]:
        """Returns the optional tools that are missing.

        A missing required tool raises immediately, before any optional
        tool is looked at.
        """
        self.logger.info("Checking prerequisites...")

        for tool in required:
            path = self.which(tool)
            if path is None:
                raise MissingToolError(tool)
            self.logger.debug("Found %s at %s", tool, path)

        missing_optional = []
        for tool in optional:
            if self.which(tool) is None:
                self.logger.warning("%s is not installed, some features may not work", tool)
                missing_optional.append(tool)

        self.logger.info("Prerequisites check completed")
        return missing_optional

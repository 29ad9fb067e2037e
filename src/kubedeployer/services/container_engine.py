"""Docker image build and publish helpers."""

from typing import Callable


class ContainerEngineService:
    """Wraps the docker CLI calls used by the pipeline."""

    def __init__(self, logger, run_cmd: Callable, engine: str = "docker"):
        self.logger = logger
        self.run_cmd = run_cmd
        self.engine = engine

    def build(self, tag: str, dockerfile: str, context: str):
        self.logger.info("Building Docker image...")
        self.run_cmd([self.engine, "build", "-t", tag, "-f", dockerfile, context])
        self.logger.info("Docker image built successfully: %s", tag)

    def push(self, tag: str):
        self.logger.info("Pushing Docker image to registry...")
        self.run_cmd([self.engine, "push", tag])
        self.logger.info("Docker image pushed successfully")

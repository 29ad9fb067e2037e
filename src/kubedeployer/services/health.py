"""Post-deployment health probing."""

import time
from typing import Callable, Optional

import requests

from kubedeployer.errors import HealthCheckError


class HealthCheckService:
    """Waits for the service to settle and checks its health endpoint."""

    def __init__(
        self,
        logger,
        requests_module=requests,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.logger = logger
        self.requests = requests_module
        self.sleep = sleep

    def build_url(self, address: Optional[str], fallback_address: str, path: str) -> str:
        host = address or fallback_address
        if not path.startswith("/"):
            path = f"/{path}"
        return f"http://{host}{path}"

    def check(
        self,
        url: str,
        settle_seconds: float,
        timeout: float,
        retries: int = 0,
        backoff_seconds: float = 0.0,
    ):
        self.logger.info("Waiting for service to be ready...")
        if settle_seconds > 0:
            self.sleep(settle_seconds)

        max_attempts = max(1, retries + 1)
        last_error: Optional[str] = None

        for attempt in range(1, max_attempts + 1):
            try:
                response = self.requests.get(url, timeout=timeout)
                response.raise_for_status()
            except self.requests.RequestException as exc:
                last_error = str(exc)
            else:
                self.logger.info("Health check passed")
                return

            if attempt < max_attempts:
                self.logger.warning(
                    "Health check failed on attempt %s/%s. Retrying in %.1fs: %s",
                    attempt,
                    max_attempts,
                    backoff_seconds,
                    last_error,
                )
                self.sleep(backoff_seconds)

        raise HealthCheckError(f"Health check failed for {url}: {last_error}")

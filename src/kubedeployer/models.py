"""Shared domain models for kubedeployer."""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from . import constants


@dataclass(frozen=True)
class DeploymentSettings:
    """Static deployment parameters, overridable from config or CLI."""

    registry: str = constants.DEFAULT_REGISTRY
    image_name: str = constants.DEFAULT_IMAGE_NAME
    app_name: str = constants.DEFAULT_APP_NAME
    namespace_prefix: str = constants.NAMESPACE_PREFIX
    dockerfile: str = constants.DOCKERFILE_PATH
    build_context: str = constants.BUILD_CONTEXT
    manifests_root: str = constants.MANIFESTS_ROOT
    rollout_timeout_seconds: int = constants.ROLLOUT_TIMEOUT_SECONDS
    health_settle_seconds: float = constants.HEALTH_SETTLE_SECONDS
    health_path: str = constants.HEALTH_PATH
    health_fallback_address: str = constants.HEALTH_FALLBACK_ADDRESS
    health_timeout_seconds: float = constants.HEALTH_TIMEOUT_SECONDS
    health_retries: int = constants.HEALTH_RETRIES
    health_retry_backoff_seconds: float = constants.HEALTH_RETRY_BACKOFF_SECONDS
    service_port: int = constants.SERVICE_PORT
    smoke_test_image: str = constants.SMOKE_TEST_IMAGE
    replica_sets_to_keep: int = constants.REPLICA_SETS_TO_KEEP
    required_tools: Tuple[str, ...] = constants.REQUIRED_TOOLS
    optional_tools: Tuple[str, ...] = constants.OPTIONAL_TOOLS


@dataclass(frozen=True)
class DeploymentRequest:
    """Identifiers of a single deployment run.

    Built once per run through :meth:`create`; every step receives the same
    instance, so ``namespace`` and ``full_image_name`` are never re-derived.
    """

    environment: str
    version: str
    namespace: str
    full_image_name: str
    run_id: str

    @classmethod
    def create(
        cls,
        environment: str = constants.DEFAULT_ENVIRONMENT,
        version: str = constants.DEFAULT_VERSION,
        settings: Optional[DeploymentSettings] = None,
        run_id: Optional[str] = None,
    ) -> "DeploymentRequest":
        settings = settings or DeploymentSettings()
        return cls(
            environment=environment,
            version=version,
            namespace=f"{settings.namespace_prefix}{environment}",
            full_image_name=f"{settings.registry}/{settings.image_name}:{version}",
            run_id=run_id or uuid.uuid4().hex[:8],
        )


@dataclass(frozen=True)
class StepResult:
    name: str
    success: bool
    error: Optional[str] = None
    duration_seconds: float = 0.0


class NotificationStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class NotificationEvent:
    status: NotificationStatus
    message: str


class PipelineState(str, Enum):
    IDLE = "idle"
    CHECKING_PREREQS = "checking_prereqs"
    BUILDING = "building"
    PUSHING = "pushing"
    DEPLOYING = "deploying"
    HEALTH_CHECKING = "health_checking"
    SMOKE_TESTING = "smoke_testing"
    CLEANING_UP = "cleaning_up"
    NOTIFIED_SUCCESS = "notified_success"
    NOTIFIED_FAILURE = "notified_failure"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class ReplicaSetInfo:
    name: str
    created_at: str

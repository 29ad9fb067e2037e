"""Built-in deployment defaults."""

DEFAULT_ENVIRONMENT = "staging"
DEFAULT_VERSION = "latest"

DEFAULT_REGISTRY = "your-registry.com"
DEFAULT_IMAGE_NAME = "test-automation"
DEFAULT_APP_NAME = "test-automation"
NAMESPACE_PREFIX = "test-automation-"

DOCKERFILE_PATH = "docker/Dockerfile"
BUILD_CONTEXT = "."
MANIFESTS_ROOT = "kubernetes"

ROLLOUT_TIMEOUT_SECONDS = 300
# Extra wall-clock time granted to kubectl on top of its own --timeout.
ROLLOUT_TIMEOUT_GRACE_SECONDS = 30

HEALTH_SETTLE_SECONDS = 30
HEALTH_PATH = "/health"
HEALTH_FALLBACK_ADDRESS = "localhost:8080"
HEALTH_TIMEOUT_SECONDS = 10
HEALTH_RETRIES = 0
HEALTH_RETRY_BACKOFF_SECONDS = 5.0

SERVICE_PORT = 8080
SMOKE_TEST_IMAGE = "curlimages/curl"

REPLICA_SETS_TO_KEEP = 3

REQUIRED_TOOLS = ("kubectl", "docker")
OPTIONAL_TOOLS = ("helm",)

NOTIFICATION_TIMEOUT_SECONDS = 10
DEFAULT_CONFIG_FILE = ".kubedeployer.yml"

"""Actionable error catalog for kubedeployer."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "check_prerequisites": {
        "what": "Prerequisites check failed: {reason}",
        "next": "Install docker and kubectl and make sure both are on PATH.",
    },
    "build_image": {
        "what": "Failed to build Docker image {image}.",
        "next": "Run the build locally with `docker build` and inspect the Dockerfile output.",
    },
    "push_image": {
        "what": "Failed to push Docker image {image}.",
        "next": "Check `docker login` credentials for the registry and network access, then retry.",
    },
    "deploy": {
        "what": "Deployment to namespace {namespace} failed.",
        "next": "Inspect `kubectl rollout status` and pod events in the namespace.",
    },
    "health_check": {
        "what": "Health check failed for {namespace}.",
        "next": "Check the service endpoint and container logs with `kubectl logs`.",
    },
    "smoke_test": {
        "what": "Smoke tests failed in namespace {namespace}.",
        "next": "Verify the service DNS name and port from inside the cluster.",
    },
    "cleanup": {
        "what": "Cleanup of old replica sets in {namespace} failed.",
        "next": "Remove stale replica sets manually with `kubectl delete replicaset`.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"

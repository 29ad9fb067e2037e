"""Kubernetes operations performed through kubectl."""

import json
from typing import Callable, List, Optional

from kubedeployer.errors import DeployerError
from kubedeployer.models import ReplicaSetInfo


class ClusterService:
    """Issues the kubectl commands of a deployment run."""

    def __init__(self, logger, run_cmd: Callable, pipe_cmd: Callable, kubectl: str = "kubectl"):
        self.logger = logger
        self.run_cmd = run_cmd
        self.pipe_cmd = pipe_cmd
        self.kubectl = kubectl

    def ensure_namespace(self, namespace: str):
        # Rendering the manifest client-side and applying it keeps re-runs idempotent.
        self.pipe_cmd(
            [self.kubectl, "create", "namespace", namespace, "--dry-run=client", "-o", "yaml"],
            [self.kubectl, "apply", "-f", "-"],
        )

    def apply_manifests(self, path: str, namespace: str):
        self.logger.debug("Applying manifests from %s", path)
        self.run_cmd([self.kubectl, "apply", "-f", path, "-n", namespace])

    def set_image(self, deployment: str, container: str, image: str, namespace: str):
        self.run_cmd(
            [
                self.kubectl,
                "set",
                "image",
                f"deployment/{deployment}",
                f"{container}={image}",
                "-n",
                namespace,
            ]
        )

    def rollout_status(
        self,
        deployment: str,
        namespace: str,
        timeout_seconds: int,
        grace_seconds: float = 0,
    ):
        self.run_cmd(
            [
                self.kubectl,
                "rollout",
                "status",
                f"deployment/{deployment}",
                "-n",
                namespace,
                f"--timeout={timeout_seconds}s",
            ],
            timeout=timeout_seconds + grace_seconds,
        )

    def get_service_ingress_ip(self, service: str, namespace: str) -> Optional[str]:
        result = self.run_cmd(
            [
                self.kubectl,
                "get",
                "service",
                service,
                "-n",
                namespace,
                "-o",
                "jsonpath={.status.loadBalancer.ingress[0].ip}",
            ],
            capture_output=True,
        )
        address = (result.stdout or "").strip()
        return address or None

    def run_smoke_pod(self, pod_name: str, image: str, namespace: str, command: List[str]):
        self.run_cmd(
            [
                self.kubectl,
                "run",
                pod_name,
                f"--image={image}",
                "--rm",
                "-i",
                "--restart=Never",
                "-n",
                namespace,
                "--",
            ]
            + command
        )

    def list_replica_sets(self, namespace: str, selector: str) -> List[ReplicaSetInfo]:
        """Returns replica sets matching ``selector``, oldest first."""
        result = self.run_cmd(
            [
                self.kubectl,
                "get",
                "replicasets",
                "-n",
                namespace,
                "-l",
                selector,
                "--sort-by=.metadata.creationTimestamp",
                "-o",
                "json",
            ],
            capture_output=True,
        )
        raw = (result.stdout or "").strip()
        if not raw:
            return []

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise DeployerError(f"Could not parse replica set listing: {exc}") from exc

        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise DeployerError("Replica set listing has no 'items' list.")

        replica_sets = []
        for item in items:
            metadata = item.get("metadata") if isinstance(item, dict) else None
            if not isinstance(metadata, dict):
                self.logger.debug("Skipping replica set entry without metadata: %r", item)
                continue
            name = metadata.get("name")
            if not isinstance(name, str) or not name:
                continue
            created_at = metadata.get("creationTimestamp")
            replica_sets.append(
                ReplicaSetInfo(
                    name=name,
                    created_at=created_at if isinstance(created_at, str) else "",
                )
            )

        return sorted(replica_sets, key=lambda rs: rs.created_at)

    def delete_replica_sets(self, names: List[str], namespace: str):
        if not names:
            return
        self.run_cmd([self.kubectl, "delete", "replicaset", "-n", namespace] + list(names))

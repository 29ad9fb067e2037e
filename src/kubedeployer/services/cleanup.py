"""Old replica set pruning."""

from typing import List, Sequence

from kubedeployer.models import ReplicaSetInfo


def select_stale_replica_sets(replica_sets: Sequence[ReplicaSetInfo], keep: int) -> List[str]:
    """Names of everything but the ``keep`` most recently created replica sets."""
    if isinstance(keep, bool) or not isinstance(keep, int) or keep < 0:
        raise ValueError(f"keep must be a non-negative integer, got {keep!r}")

    ordered = sorted(replica_sets, key=lambda rs: rs.created_at)
    stale_count = max(0, len(ordered) - keep)
    return [rs.name for rs in ordered[:stale_count]]


class CleanupService:
    """Keeps only the newest replica sets of an application."""

    def __init__(self, logger, cluster_service):
        self.logger = logger
        self.cluster = cluster_service

    def prune_replica_sets(self, namespace: str, app_name: str, keep: int) -> List[str]:
        self.logger.info("Cleaning up old deployments...")

        replica_sets = self.cluster.list_replica_sets(namespace, f"app={app_name}")
        stale = select_stale_replica_sets(replica_sets, keep)
        if stale:
            self.logger.debug("Deleting replica sets: %s", ", ".join(stale))
            self.cluster.delete_replica_sets(stale, namespace)
        else:
            self.logger.debug(
                "Found %s replica set(s), nothing to prune (keeping %s).",
                len(replica_sets),
                keep,
            )

        self.logger.info("Cleanup completed")
        return stale

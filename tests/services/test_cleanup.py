import pytest

from kubedeployer.models import ReplicaSetInfo
from kubedeployer.services.cleanup import CleanupService, select_stale_replica_sets


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def debug(self, *_args, **_kwargs):
        return None


def _replica_sets(count):
    return [ReplicaSetInfo(name=f"rs-{i}", created_at=f"2026-01-{i + 1:02d}T00:00:00Z") for i in range(count)]


def test_select_stale_keeps_three_newest():
    stale = select_stale_replica_sets(list(reversed(_replica_sets(5))), keep=3)

    assert stale == ["rs-0", "rs-1"]


@pytest.mark.parametrize("count", [0, 1, 3])
def test_select_stale_with_three_or_fewer_deletes_nothing(count):
    assert select_stale_replica_sets(_replica_sets(count), keep=3) == []


def test_select_stale_rejects_negative_keep():
    with pytest.raises(ValueError):
        select_stale_replica_sets(_replica_sets(2), keep=-1)


class FakeCluster:
    def __init__(self, replica_sets):
        self.replica_sets = replica_sets
        self.selectors = []
        self.deleted = []

    def list_replica_sets(self, namespace, selector):
        self.selectors.append((namespace, selector))
        return self.replica_sets

    def delete_replica_sets(self, names, namespace):
        self.deleted.append((names, namespace))


def test_prune_deletes_stale_replica_sets():
    cluster = FakeCluster(_replica_sets(4))
    service = CleanupService(logger=DummyLogger(), cluster_service=cluster)

    assert service.prune_replica_sets("ns", "test-automation", keep=3) == ["rs-0"]
    assert cluster.selectors == [("ns", "app=test-automation")]
    assert cluster.deleted == [(["rs-0"], "ns")]


def test_prune_without_stale_replica_sets_issues_no_delete():
    cluster = FakeCluster(_replica_sets(2))
    service = CleanupService(logger=DummyLogger(), cluster_service=cluster)

    assert service.prune_replica_sets("ns", "test-automation", keep=3) == []
    assert cluster.deleted == []


@pytest.mark.parametrize("keep", ["3", 2.5, True])
def test_select_stale_rejects_non_integer_keep(keep):
    with pytest.raises(ValueError, match="non-negative integer"):
        select_stale_replica_sets(_replica_sets(4), keep=keep)

"""Health check of the etcd cluster running on the machines."""

import logging

from kola_tests.cluster import errors
from kola_tests.cluster import machine as machine_mod

LOGGER = logging.getLogger(__name__)

HEALTH_CMD = "etcdctl cluster-health"


def get_cluster_health(machine: machine_mod.Machine, expected_members: int) -> None:
    """Check that etcd reports a healthy cluster with the expected number of members.

    Every healthy member is reported as "member <id> is healthy: got healthy result from <url>",
    and the summary line is "cluster is healthy".

    Raises:
        ClusterHealthError: when the cluster is not (yet) healthy.
    """
    try:
        output = machine.ssh(HEALTH_CMD).decode(errors="replace")
    except errors.CommandError as err:
        msg = f"Failed to run `{HEALTH_CMD}`: {err}"
        raise errors.ClusterHealthError(msg) from err

    # "healthy" is there twice for every member and once for the whole cluster
    expected_count = expected_members * 2 + 1
    healthy_count = output.count("healthy")
    if healthy_count != expected_count or "cluster is healthy" not in output:
        msg = (
            f"Unexpected `{HEALTH_CMD}` output, expected {expected_members} healthy members: "
            f"{output.strip()}"
        )
        raise errors.ClusterHealthError(msg)

    LOGGER.debug("etcd cluster with %s members is healthy", expected_members)

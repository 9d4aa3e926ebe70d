# profiler.py

"""Cluster VM profiling and host profile calculation."""

import logging
import math
from typing import Iterable, List, Optional, Sequence

from .exceptions import EmptyClusterError, InvalidInputError
from .models import (
    AverageProfile, HostProfile, HostResources, Megabytes, ResourceTotals, VmResources
)
from .utils import bytes_to_megabytes

logger = logging.getLogger(__name__)

def _is_valid_quantity(value) -> bool:
    return math.isfinite(value) and value >= 0

def _check_vm(host: HostResources, vm: VmResources) -> None:
    for field in ("cpus", "cpu_speed", "memory_mb"):
        if not _is_valid_quantity(getattr(vm, field)):
            raise InvalidInputError(
                f"VM {vm.name or '<unnamed>'} on host {host.name or '<unnamed>'} "
                f"has invalid {field}: {getattr(vm, field)}"
            )

def _check_host(host: HostResources) -> None:
    for field in ("cpus", "speed", "cpu_overprovisioning",
                  "total_memory_bytes", "memory_overprovisioning"):
        if not _is_valid_quantity(getattr(host, field)):
            raise InvalidInputError(
                f"Host {host.name or '<unnamed>'} has invalid {field}: {getattr(host, field)}"
            )

def aggregate(hosts: Iterable[HostResources]) -> ResourceTotals:
    """
    Sum the resources of every VM running on the given hosts.

    Args:
        hosts: Hosts of one cluster, each carrying its VM list

    Returns:
        ResourceTotals with the VM count and the cpu, cpu speed and memory sums

    Raises:
        InvalidInputError: if a VM reports a negative or non-finite quantity
    """
    number_of_instances = 0
    total_cpus = 0
    total_cpu_speed = 0.0
    total_memory_mb = 0.0

    for host in hosts:
        for vm in host.vms:
            _check_vm(host, vm)
            number_of_instances += 1
            total_cpus += vm.cpus
            total_cpu_speed += vm.cpu_speed
            total_memory_mb += vm.memory_mb

    logger.debug(f"Aggregated {number_of_instances} VMs: {total_cpus} CPUs, "
                 f"{total_cpu_speed} MHz, {total_memory_mb} MB")
    return ResourceTotals(
        number_of_instances=number_of_instances,
        total_cpus=total_cpus,
        total_cpu_speed=total_cpu_speed,
        total_memory_mb=Megabytes(total_memory_mb),
    )

def derive_averages(totals: ResourceTotals) -> AverageProfile:
    """
    Calculate the average cpu count, cpu speed and memory of a cluster's VMs.

    Raises:
        EmptyClusterError: if the totals cover no VM at all
    """
    count = totals.number_of_instances
    if count == 0:
        raise EmptyClusterError("Cannot profile a cluster with no running VMs")

    return AverageProfile(
        number_of_instances=count,
        cpus=totals.total_cpus / count,
        cpu_speed=totals.total_cpu_speed / count,
        memory_mb=Megabytes(totals.total_memory_mb / count),
    )

def profile_host(host: HostResources, average: AverageProfile) -> HostProfile:
    """
    Divide each host resource by the cluster's average VM for that resource.

    CPU speed and memory are inflated by the host's overprovisioning factors
    before the division; memory is converted from bytes to megabytes first.
    The result is the number of average VMs the host could hold per resource.

    Raises:
        InvalidInputError: if the host or the average holds a negative or
            non-finite quantity
        EmptyClusterError: if any average dimension is zero
    """
    _check_host(host)
    for field in ("cpus", "cpu_speed", "memory_mb"):
        if not _is_valid_quantity(getattr(average, field)):
            raise InvalidInputError(
                f"Cluster VM profile has invalid average {field}: {getattr(average, field)}"
            )
        if getattr(average, field) == 0:
            raise EmptyClusterError(f"Cluster VM profile has zero average {field}")

    memory_mb = bytes_to_megabytes(host.total_memory_bytes)
    return HostProfile(
        cpus=host.cpus / average.cpus,
        cpu_speed=(host.speed * host.cpu_overprovisioning) / average.cpu_speed,
        memory=(memory_mb * host.memory_overprovisioning) / average.memory_mb,
        host=host.name,
    )

class HostProfiler:
    """Profiles the hosts of one cluster against the cluster's average VM."""

    def __init__(self, hosts: Sequence[HostResources]):
        self.hosts = list(hosts)
        self._cluster_profile: Optional[AverageProfile] = None

    def cluster_totals(self) -> ResourceTotals:
        return aggregate(self.hosts)

    def cluster_profile(self) -> AverageProfile:
        """Average VM profile of the cluster, computed once."""
        if self._cluster_profile is None:
            self._cluster_profile = derive_averages(self.cluster_totals())
        return self._cluster_profile

    def profile(self, host: HostResources) -> HostProfile:
        return profile_host(host, self.cluster_profile())

    def profile_all(self) -> List[HostProfile]:
        """Profile every host of the cluster."""
        return [self.profile(host) for host in self.hosts]

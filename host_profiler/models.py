# models.py

"""Data models for Host Profiler."""

from typing import NamedTuple, NewType, Sequence

Bytes = NewType("Bytes", float)
Megabytes = NewType("Megabytes", float)

class VmResources(NamedTuple):
    """Resources allocated to one running VM."""
    cpus: int
    cpu_speed: float  # MHz
    memory_mb: Megabytes
    name: str = ""

class HostResources(NamedTuple):
    """Physical capacity of a host and the VMs it currently runs."""
    cpus: int
    speed: float  # MHz
    cpu_overprovisioning: float
    total_memory_bytes: Bytes
    memory_overprovisioning: float
    vms: Sequence[VmResources] = ()
    name: str = ""

class ResourceTotals(NamedTuple):
    """Sums of VM resources over a set of hosts."""
    number_of_instances: int = 0
    total_cpus: int = 0
    total_cpu_speed: float = 0.0
    total_memory_mb: Megabytes = Megabytes(0.0)

    def merge(self, other: "ResourceTotals") -> "ResourceTotals":
        """Field-wise sum of two totals, as if aggregated over both host sets."""
        return ResourceTotals(
            number_of_instances=self.number_of_instances + other.number_of_instances,
            total_cpus=self.total_cpus + other.total_cpus,
            total_cpu_speed=self.total_cpu_speed + other.total_cpu_speed,
            total_memory_mb=Megabytes(self.total_memory_mb + other.total_memory_mb),
        )

class AverageProfile(NamedTuple):
    """Per-instance average VM resources in a cluster."""
    number_of_instances: int
    cpus: float
    cpu_speed: float
    memory_mb: Megabytes

class HostProfile(NamedTuple):
    """Host capacity expressed as multiples of the average VM, per resource."""
    cpus: float
    cpu_speed: float
    memory: float
    host: str = ""

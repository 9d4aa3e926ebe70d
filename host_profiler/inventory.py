# inventory.py

"""Host and VM inventory sources feeding the profiler."""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from .config import (
    CPU_ALLOCATION_RATIO, RAM_ALLOCATION_RATIO, DEFAULT_CPU_SPEED_MHZ,
    PLACEMENT_API_VERSION, VCPU_RESOURCE_CLASS, MEMORY_RESOURCE_CLASS
)
from .exceptions import ConfigurationError, OpenStackError
from .models import Bytes, HostResources, Megabytes, VmResources
from .utils import megabytes_to_bytes

logger = logging.getLogger(__name__)

def _cpu_count(value: Any) -> int:
    count = float(value)
    if not count.is_integer():
        raise ValueError(f"CPU count must be a whole number: {value!r}")
    return int(count)

def _vm_from_dict(data: Dict[str, Any]) -> VmResources:
    return VmResources(
        cpus=_cpu_count(data["cpus"]),
        cpu_speed=float(data["cpu_speed"]),
        memory_mb=Megabytes(float(data["memory_mb"])),
        name=data.get("name", ""),
    )

def _host_from_dict(data: Dict[str, Any]) -> HostResources:
    return HostResources(
        cpus=_cpu_count(data["cpus"]),
        speed=float(data["speed"]),
        cpu_overprovisioning=float(data.get("cpu_overprovisioning", CPU_ALLOCATION_RATIO)),
        total_memory_bytes=Bytes(float(data["total_memory_bytes"])),
        memory_overprovisioning=float(data.get("memory_overprovisioning", RAM_ALLOCATION_RATIO)),
        vms=tuple(_vm_from_dict(vm) for vm in data.get("vms", [])),
        name=data.get("name", ""),
    )

def load_snapshot(path: str) -> List[HostResources]:
    """
    Load a cluster inventory from a JSON snapshot file.

    Args:
        path: Path to a document of the form {"hosts": [...]}

    Returns:
        List of HostResources in file order

    Raises:
        ConfigurationError: if the file cannot be read or is malformed
    """
    try:
        with open(path, encoding="utf-8") as fd:
            document = json.load(fd)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read snapshot {path}: {e}")

    try:
        hosts = [_host_from_dict(host) for host in document["hosts"]]
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Malformed snapshot {path}: {e!r}")

    logger.debug(f"Loaded {len(hosts)} hosts from {path}")
    return hosts

class OpenStackInventory:
    """Builds HostResources from Nova hypervisors, servers and Placement inventories."""

    def __init__(self, conn, cpu_speed_mhz: float = DEFAULT_CPU_SPEED_MHZ):
        self.conn = conn
        self.cpu_speed_mhz = cpu_speed_mhz
        self.flavor_cache: Dict[str, Any] = {}
        self.provider_uuid_cache: Dict[str, str] = {}

    def fetch_hypervisor_details(self) -> List[dict]:
        """Fetch hypervisor details from the compute API."""
        try:
            compute_url = self.conn.endpoint_for('compute')
            response = requests.get(
                f"{compute_url}/os-hypervisors/detail",
                headers={"X-Auth-Token": self.conn.auth_token}
            )
            response.raise_for_status()
            return response.json().get('hypervisors', [])
        except requests.RequestException as e:
            raise OpenStackError(f"Failed to fetch hypervisors: {e}")

    def get_flavor(self, flavor_ref: dict) -> Tuple[int, float]:
        """Return (vcpus, ram in MB) for a server's flavor reference."""
        # Compute microversion 2.47+ embeds the flavor in the server
        try:
            vcpus, ram = flavor_ref['vcpus'], flavor_ref['ram']
        except KeyError:
            vcpus = ram = None
        if vcpus is not None and ram is not None:
            return int(vcpus), float(ram)

        flavor_id = flavor_ref['id']
        if flavor_id not in self.flavor_cache:
            self.flavor_cache[flavor_id] = self.conn.compute.get_flavor(flavor_id)
        flavor = self.flavor_cache[flavor_id]
        return int(flavor.vcpus), float(flavor.ram)

    def get_allocation_ratios(self, hostname: str) -> Tuple[float, float]:
        """
        Read VCPU and MEMORY_MB allocation ratios for a host from Placement.
        Falls back to the configured ratios when Placement has no answer.
        """
        defaults = (CPU_ALLOCATION_RATIO, RAM_ALLOCATION_RATIO)
        headers = {
            "X-Auth-Token": self.conn.auth_token,
            "OpenStack-API-Version": PLACEMENT_API_VERSION
        }

        try:
            placement_url = self.conn.endpoint_for('placement')
            if hostname not in self.provider_uuid_cache:
                response = requests.get(
                    f"{placement_url}/resource_providers",
                    params={"name": hostname},
                    headers=headers
                )
                response.raise_for_status()
                providers = response.json().get('resource_providers', [])

                if not providers:
                    logger.warning(f"No resource provider found for host {hostname}")
                    return defaults

                self.provider_uuid_cache[hostname] = providers[0]['uuid']

            provider_uuid = self.provider_uuid_cache[hostname]
            response = requests.get(
                f"{placement_url}/resource_providers/{provider_uuid}/inventories",
                headers=headers
            )
            response.raise_for_status()
            inventories = response.json().get('inventories', {})

        except requests.RequestException as e:
            logger.warning(f"Error getting allocation ratios for host {hostname}: {e}")
            return defaults

        cpu_ratio = inventories.get(VCPU_RESOURCE_CLASS, {}).get('allocation_ratio', defaults[0])
        ram_ratio = inventories.get(MEMORY_RESOURCE_CLASS, {}).get('allocation_ratio', defaults[1])
        return float(cpu_ratio), float(ram_ratio)

    def get_host_vms(self, hostname: str) -> List[VmResources]:
        """Resources of the ACTIVE VMs running on a host."""
        try:
            servers = list(self.conn.compute.servers(all_projects=True, host=hostname))
        except Exception as e:
            raise OpenStackError(f"Failed to list VMs on host {hostname}: {e}")

        vms = []
        for vm in servers:
            if vm.status.upper() != 'ACTIVE':
                continue
            vcpus, ram = self.get_flavor(vm.flavor)
            vms.append(VmResources(
                cpus=vcpus,
                cpu_speed=self.cpu_speed_mhz,
                memory_mb=Megabytes(ram),
                name=vm.name,
            ))
        return vms

    def get_hosts(self) -> List[HostResources]:
        """Build HostResources for every enabled, up hypervisor."""
        hosts = []
        for hypervisor in self.fetch_hypervisor_details():
            hostname = hypervisor['hypervisor_hostname']
            if hypervisor.get('state') != 'up' or hypervisor.get('status') != 'enabled':
                logger.debug(f"Skipping hypervisor {hostname}")
                continue

            cpu_ratio, ram_ratio = self.get_allocation_ratios(hostname)
            hosts.append(HostResources(
                cpus=hypervisor.get('vcpus', 0),
                speed=self.cpu_speed_mhz,
                cpu_overprovisioning=cpu_ratio,
                total_memory_bytes=megabytes_to_bytes(Megabytes(hypervisor.get('memory_mb', 0))),
                memory_overprovisioning=ram_ratio,
                vms=tuple(self.get_host_vms(hostname)),
                name=hostname,
            ))

        logger.debug(f"Collected {len(hosts)} hosts from OpenStack")
        return hosts

def load_inventory(snapshot: Optional[str] = None, conn=None,
                   cpu_speed_mhz: float = DEFAULT_CPU_SPEED_MHZ) -> List[HostResources]:
    """Load hosts from a snapshot file if given, otherwise from OpenStack."""
    if snapshot:
        return load_snapshot(snapshot)
    if conn is None:
        raise ConfigurationError("Either a snapshot file or an OpenStack connection is required")
    return OpenStackInventory(conn, cpu_speed_mhz=cpu_speed_mhz).get_hosts()

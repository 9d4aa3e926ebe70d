import json
from unittest.mock import Mock, patch

import pytest
import requests

from host_profiler.config import CPU_ALLOCATION_RATIO, RAM_ALLOCATION_RATIO
from host_profiler.exceptions import ConfigurationError, InvalidInputError, OpenStackError
from host_profiler.inventory import OpenStackInventory, load_inventory, load_snapshot
from host_profiler.models import HostResources, VmResources
from host_profiler.profiler import aggregate


SNAPSHOT = {
    "hosts": [
        {
            "name": "compute-1",
            "cpus": 16,
            "speed": 2400,
            "cpu_overprovisioning": 4.0,
            "total_memory_bytes": 64000000000,
            "memory_overprovisioning": 1.0,
            "vms": [{"name": "web-1", "cpus": 2, "cpu_speed": 2400, "memory_mb": 4096}],
        },
        {
            "name": "compute-2",
            "cpus": 8,
            "speed": 2400,
            "total_memory_bytes": 32000000000,
        },
    ]
}


def write_snapshot(tmp_path, document):
    path = tmp_path / "cluster.json"
    path.write_text(json.dumps(document))
    return str(path)


def test_load_snapshot(tmp_path):
    hosts = load_snapshot(write_snapshot(tmp_path, SNAPSHOT))

    assert hosts[0] == HostResources(
        cpus=16, speed=2400, cpu_overprovisioning=4.0, total_memory_bytes=64000000000,
        memory_overprovisioning=1.0,
        vms=(VmResources(cpus=2, cpu_speed=2400, memory_mb=4096, name="web-1"),),
        name="compute-1",
    )


def test_load_snapshot_defaults_overprovisioning(tmp_path):
    host = load_snapshot(write_snapshot(tmp_path, SNAPSHOT))[1]

    assert host.cpu_overprovisioning == CPU_ALLOCATION_RATIO
    assert host.memory_overprovisioning == RAM_ALLOCATION_RATIO
    assert host.vms == ()


def test_load_snapshot_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_snapshot(str(tmp_path / "missing.json"))


@pytest.mark.parametrize("document", [
    {},
    {"hosts": [{"name": "no-cpus"}]},
    {"hosts": [{"cpus": "many"}]},
    {"hosts": [{"cpus": 2.5, "speed": 2000, "total_memory_bytes": 1}]},
    {"hosts": [{"cpus": 4, "speed": 2000, "total_memory_bytes": 1,
                "vms": [{"cpus": -0.5, "cpu_speed": 2000, "memory_mb": 512}]}]},
    {"hosts": [{"cpus": 4, "speed": 2000, "total_memory_bytes": 1,
                "vms": [{"cpus": 2.9, "cpu_speed": 2000, "memory_mb": 512}]}]},
])
def test_load_snapshot_malformed(tmp_path, document):
    with pytest.raises(ConfigurationError):
        load_snapshot(write_snapshot(tmp_path, document))


def test_load_inventory_needs_a_source():
    with pytest.raises(ConfigurationError):
        load_inventory()


def make_response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def make_server(name, status="ACTIVE", flavor=None):
    server = Mock()
    server.name = name
    server.status = status
    server.flavor = flavor if flavor is not None else {"id": "m1.small"}
    return server


@pytest.fixture
def conn():
    conn = Mock()
    conn.auth_token = "token"
    conn.endpoint_for.side_effect = lambda service: f"http://{service}"
    conn.compute.get_flavor.return_value = Mock(vcpus=2, ram=4096)
    conn.compute.servers.return_value = [
        make_server("vm-1"),
        make_server("vm-2", flavor={"vcpus": 4, "ram": 8192}),
        make_server("vm-3", status="SHUTOFF"),
    ]
    return conn


def placement_responses(url, params=None, headers=None):
    if params:
        url += "?" + "&".join(f"{key}={value}" for key, value in params.items())
    routes = {
        "http://compute/os-hypervisors/detail": {
            "hypervisors": [
                {"hypervisor_hostname": "compute-1", "state": "up", "status": "enabled",
                 "vcpus": 32, "memory_mb": 128000},
                {"hypervisor_hostname": "compute-2", "state": "down", "status": "enabled",
                 "vcpus": 32, "memory_mb": 128000},
            ]
        },
        "http://placement/resource_providers?name=compute-1": {
            "resource_providers": [{"uuid": "rp-1"}]
        },
        "http://placement/resource_providers/rp-1/inventories": {
            "inventories": {
                "VCPU": {"allocation_ratio": 16.0},
                "MEMORY_MB": {"allocation_ratio": 1.0},
            }
        },
    }
    return make_response(routes[url])


def test_openstack_inventory_builds_hosts(conn):
    inventory = OpenStackInventory(conn, cpu_speed_mhz=2600)

    with patch("host_profiler.inventory.requests.get", side_effect=placement_responses):
        hosts = inventory.get_hosts()

    assert len(hosts) == 1
    host = hosts[0]
    assert host.name == "compute-1"
    assert host.cpus == 32
    assert host.speed == 2600
    assert host.cpu_overprovisioning == 16.0
    assert host.memory_overprovisioning == 1.0
    assert host.total_memory_bytes == 128000000000
    assert host.vms == (
        VmResources(cpus=2, cpu_speed=2600, memory_mb=4096, name="vm-1"),
        VmResources(cpus=4, cpu_speed=2600, memory_mb=8192, name="vm-2"),
    )
    conn.compute.servers.assert_called_once_with(all_projects=True, host="compute-1")


def test_flavors_are_cached(conn):
    inventory = OpenStackInventory(conn)

    inventory.get_flavor({"id": "m1.small"})
    inventory.get_flavor({"id": "m1.small"})

    conn.compute.get_flavor.assert_called_once_with("m1.small")


def test_allocation_ratios_fall_back_without_provider(conn):
    inventory = OpenStackInventory(conn)

    with patch("host_profiler.inventory.requests.get",
               return_value=make_response({"resource_providers": []})):
        ratios = inventory.get_allocation_ratios("compute-9")

    assert ratios == (CPU_ALLOCATION_RATIO, RAM_ALLOCATION_RATIO)


def test_allocation_ratios_fall_back_on_http_error(conn):
    inventory = OpenStackInventory(conn)

    with patch("host_profiler.inventory.requests.get",
               side_effect=requests.ConnectionError("placement down")):
        ratios = inventory.get_allocation_ratios("compute-1")

    assert ratios == (CPU_ALLOCATION_RATIO, RAM_ALLOCATION_RATIO)


def test_hypervisor_fetch_failure_raises(conn):
    inventory = OpenStackInventory(conn)

    with patch("host_profiler.inventory.requests.get",
               side_effect=requests.ConnectionError("compute down")):
        with pytest.raises(OpenStackError):
            inventory.get_hosts()


def test_server_listing_failure_raises(conn):
    conn.compute.servers.side_effect = RuntimeError("boom")
    inventory = OpenStackInventory(conn)

    with pytest.raises(OpenStackError, match="compute-1"):
        inventory.get_host_vms("compute-1")


def test_load_snapshot_keeps_negative_cpu_counts_for_validation(tmp_path):
    document = {"hosts": [{"cpus": 4.0, "speed": 2000, "total_memory_bytes": 1,
                           "vms": [{"cpus": -2, "cpu_speed": 2000, "memory_mb": 512}]}]}

    hosts = load_snapshot(write_snapshot(tmp_path, document))

    assert hosts[0].cpus == 4
    assert hosts[0].vms[0].cpus == -2
    with pytest.raises(InvalidInputError):
        aggregate(hosts)


def test_placement_lookup_passes_hostname_as_query_param(conn):
    inventory = OpenStackInventory(conn)

    with patch("host_profiler.inventory.requests.get",
               return_value=make_response({"resource_providers": []})) as get:
        inventory.get_allocation_ratios("compute 1&x=y")

    get.assert_called_once_with(
        "http://placement/resource_providers",
        params={"name": "compute 1&x=y"},
        headers={"X-Auth-Token": "token", "OpenStack-API-Version": "placement 1.32"},
    )

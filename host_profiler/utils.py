# utils.py

"""Utility functions for Host Profiler."""

import logging
import os

import openstack
from openstack.connection import Connection

from .config import (
    BYTES_PER_MEGABYTE, REQUIRED_ENV_VARS, LOG_FORMAT, LOG_DATE_FORMAT
)
from .exceptions import ConfigurationError, OpenStackError
from .models import AverageProfile, Bytes, HostProfile, Megabytes

logger = logging.getLogger(__name__)

def setup_logging(verbose: bool = False) -> None:
    """Configure logging with appropriate level and format."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT
    )

def get_openstack_connection() -> Connection:
    """
    Establish connection to OpenStack using environment variables.
    Raises ConfigurationError if required variables are missing.
    """
    missing_vars = [var for var in REQUIRED_ENV_VARS if not os.environ.get(var)]
    if missing_vars:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing_vars)}"
        )

    try:
        return openstack.connect()
    except Exception as e:
        raise OpenStackError(f"Failed to connect to OpenStack: {e}")

def bytes_to_megabytes(value: Bytes) -> Megabytes:
    return Megabytes(value / BYTES_PER_MEGABYTE)

def megabytes_to_bytes(value: Megabytes) -> Bytes:
    return Bytes(value * BYTES_PER_MEGABYTE)

def print_cluster_profile(average: AverageProfile) -> None:
    """Log the average VM footprint of a cluster."""
    logger.info(f"Cluster VM profile ({average.number_of_instances} VMs):")
    logger.info(f"  CPUs:      {average.cpus:.2f}")
    logger.info(f"  CPU speed: {average.cpu_speed:.0f} MHz")
    logger.info(f"  Memory:    {average.memory_mb:.0f} MB")

def print_host_profile(profile: HostProfile) -> None:
    """Log a host profile as average-VM equivalents per resource."""
    logger.info(f"Host: {profile.host or '<unnamed>'}")
    logger.info(f"  CPUs:      {profile.cpus:.2f} average VMs")
    logger.info(f"  CPU speed: {profile.cpu_speed:.2f} average VMs")
    logger.info(f"  Memory:    {profile.memory:.2f} average VMs")

# cli.py

"""Command-line interface for Host Profiler."""

import argparse
import logging
import sys

from .config import DEFAULT_CPU_SPEED_MHZ
from .exceptions import ProfilerError
from .inventory import load_inventory
from .profiler import HostProfiler
from .utils import get_openstack_connection, print_cluster_profile, print_host_profile, setup_logging

logger = logging.getLogger(__name__)

def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Profile hosts against the average VM of their cluster"
    )
    parser.add_argument(
        "--snapshot",
        metavar="FILE",
        help="Read the cluster inventory from a JSON snapshot instead of OpenStack"
    )
    parser.add_argument(
        "--host",
        help="Only show the profile of this host"
    )
    parser.add_argument(
        "--cpu-speed",
        type=float,
        default=DEFAULT_CPU_SPEED_MHZ,
        help=f"CPU clock speed in MHz for OpenStack hosts (default: {DEFAULT_CPU_SPEED_MHZ})"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    return parser.parse_args(argv)

def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        conn = None if args.snapshot else get_openstack_connection()
        hosts = load_inventory(args.snapshot, conn, cpu_speed_mhz=args.cpu_speed)
        profiler = HostProfiler(hosts)

        print_cluster_profile(profiler.cluster_profile())

        if args.host:
            selected = [host for host in hosts if host.name == args.host]
            if not selected:
                raise ProfilerError(f"Unknown host: {args.host}")
        else:
            selected = hosts

        for host in selected:
            logger.info("")
            print_host_profile(profiler.profile(host))
        return 0

    except ProfilerError as e:
        logger.error(f"Profiling error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1

if __name__ == "__main__":
    sys.exit(main())

# config.py

"""Configuration settings for Host Profiler."""

import os

# Unit conversion (decimal megabytes)
BYTES_PER_MEGABYTE = 1000000

# Default overprovisioning factors when the cloud does not report them
CPU_ALLOCATION_RATIO = float(os.getenv("HOST_PROFILER_CPU_ALLOCATION_RATIO", "8.0"))  # 8:1 CPU overcommitment
RAM_ALLOCATION_RATIO = float(os.getenv("HOST_PROFILER_RAM_ALLOCATION_RATIO", "1.5"))  # Memory overcommitment ratio

# Nova does not report clock speed, so hosts and VMs share this value
DEFAULT_CPU_SPEED_MHZ = float(os.getenv("HOST_PROFILER_CPU_SPEED_MHZ", "2000"))

# Placement API
PLACEMENT_API_VERSION = "placement 1.32"
VCPU_RESOURCE_CLASS = "VCPU"
MEMORY_RESOURCE_CLASS = "MEMORY_MB"

# Required OpenStack environment variables
REQUIRED_ENV_VARS = [
    'OS_AUTH_URL',
    'OS_PROJECT_NAME',
    'OS_USERNAME',
    'OS_PASSWORD'
]

# Logging format
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

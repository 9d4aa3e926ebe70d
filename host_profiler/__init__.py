"""Host Profiler: score hosts against the average VM of their cluster."""

from .exceptions import EmptyClusterError, InvalidInputError, ProfilerError
from .models import AverageProfile, HostProfile, HostResources, ResourceTotals, VmResources
from .profiler import HostProfiler, aggregate, derive_averages, profile_host

__version__ = "0.1.0"

# exceptions.py

"""Custom exceptions for Host Profiler."""

class ProfilerError(Exception):
    """Base exception for Host Profiler errors."""
    pass

class EmptyClusterError(ProfilerError, ZeroDivisionError):
    """Exception for profiling against a cluster with no usable VM average."""
    pass

class InvalidInputError(ProfilerError, ValueError):
    """Exception for negative or otherwise impossible resource values."""
    pass

class OpenStackError(ProfilerError):
    """Exception for OpenStack-related errors."""
    pass

class ConfigurationError(ProfilerError):
    """Exception for configuration-related errors."""
    pass

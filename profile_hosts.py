#!/usr/bin/env python3

"""
Host Profiler runner script.
Allows direct execution without installation.
"""

import sys
import os

# Add the package directory to Python path
current_dir = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, current_dir)

try:
    from host_profiler.cli import main
except ImportError as e:
    print(f"Error importing package: {e}")
    print(f"Python path: {sys.path}")
    sys.exit(1)

if __name__ == "__main__":
    sys.exit(main())

# setup.py

from setuptools import setup, find_packages

setup(
    name="host-profiler",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "openstacksdk",
        "requests",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'host-profiles=host_profiler.cli:main',
        ],
    },
    author="Your Name",
    author_email="your.email@example.com",
    description="Profile OpenStack hosts against the average VM of their cluster",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    keywords="openstack virtualization placement consolidation",
    python_requires=">=3.6",
)

"""Setup configuration for the Linkup client."""

from setuptools import setup, find_packages

setup(
    name="linkup-client",
    version="0.1.0",
    description="Python client and CLI for the Linkup search API",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "linkup=linkup.cli:main",
        ],
    },
)

"""Setup for ledgersync feed SDK."""

from setuptools import find_packages, setup

setup(
    name="ledgersync-sdk",
    version="0.1.0",
    description="Ledger core transaction feed client",
    packages=find_packages(exclude=["tests"]),
    install_requires=[
        "requests>=2.31.0",
    ],
    python_requires=">=3.11",
)

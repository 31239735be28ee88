"""Setup script for the Wayfinder package."""

from setuptools import setup, find_packages

setup(
    name="wayfinder",
    version="0.1.0",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "structlog>=23.2",
        "prometheus-client>=0.19",
    ],
    extras_require={
        "test": ["pytest>=7.4"],
    },
    description="Wayfinder - intent routing and response extraction engine for tool-calling agents",
    author="Wayfinder Team",
)

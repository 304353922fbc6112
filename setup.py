"""MiddleForge Package Setup"""

from setuptools import find_packages, setup

setup(
    name="middleforge",
    version="0.1.0",
    description="Connect-style middleware chains for sync and async Python handlers",
    author="MiddleForge Team",
    packages=find_packages(include=["middleforge", "middleforge.*"]),
    python_requires=">=3.10",
    install_requires=[
        "structlog>=23.1.0",
        "opentelemetry-api>=1.20.0",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-asyncio",
            "opentelemetry-sdk>=1.20.0",
        ],
        "observability": [
            "opentelemetry-sdk>=1.20.0",
        ],
        "all": [
            "opentelemetry-sdk>=1.20.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Framework :: AsyncIO",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)

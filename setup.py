"""
Setup Configuration for tmaxfit
===============================

Dependency groups, CLI entry point registration and package data.

Key Features:
- Core scientific stack always installed (JAX/NumPyro sampling, matplotlib plots)
- Development and test tooling as extras (pip install tmaxfit[dev])
- ``tmaxfit`` console script
"""

import sys
from pathlib import Path

from setuptools import find_packages, setup

# Get the directory containing setup.py
HERE = Path(__file__).parent.resolve()


def read_readme():
    """Read README file for long description."""
    readme_path = HERE / "README.md"
    if readme_path.exists():
        return readme_path.read_text(encoding="utf-8")
    return "Bayesian linear regression of daily maximum temperature with NUTS"


def read_version():
    """Read version from package __init__.py."""
    init_path = HERE / "tmaxfit" / "__init__.py"
    if init_path.exists():
        with open(init_path, "r", encoding="utf-8") as f:
            for line in f:
                if line.startswith("__version__"):
                    return line.split("=")[1].strip().strip("\"'")
    return "0.1.0"


INSTALL_REQUIRES = [
    "numpy>=1.24.0",
    "scipy>=1.10.0",
    "pyyaml>=6.0",
    "jax>=0.4.20",
    "jaxlib>=0.4.20",
    "numpyro>=0.13.0",
    "matplotlib>=3.7.0",
]

EXTRAS_REQUIRE = {
    "test": [
        "pytest>=7.0.0",
        "pytest-cov>=4.0.0",
        "hypothesis>=6.0.0",
    ],
    "dev": [
        "pytest>=7.0.0",
        "pytest-cov>=4.0.0",
        "hypothesis>=6.0.0",
        "black>=23.0.0",
        "ruff>=0.1.0",
        "mypy>=1.0.0",
    ],
}

EXTRAS_REQUIRE["all"] = sorted(set(sum(EXTRAS_REQUIRE.values(), [])))

ENTRY_POINTS = {
    "console_scripts": [
        "tmaxfit=tmaxfit.cli.main:main",
    ]
}

PACKAGE_DATA = {
    "tmaxfit": [
        "config/templates/*.yaml",
    ]
}

CLASSIFIERS = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Topic :: Scientific/Engineering :: Atmospheric Science",
    "License :: OSI Approved :: MIT License",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Operating System :: OS Independent",
]

KEYWORDS = [
    "bayesian", "linear regression", "mcmc", "nuts", "numpyro", "jax",
    "climate", "temperature", "ghcn",
]


def check_python_version():
    """Check if Python version is supported."""
    if sys.version_info < (3, 10):
        print("Python 3.10 or higher is required")
        print(f"   Current version: {sys.version}")
        sys.exit(1)


check_python_version()

setup(
    name="tmaxfit",
    version=read_version(),
    description="Bayesian linear regression of daily maximum temperature with NUTS",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    author="tmaxfit Development Team",
    packages=find_packages(exclude=["tests*", "docs*", "examples*"]),
    package_data=PACKAGE_DATA,
    include_package_data=True,
    install_requires=INSTALL_REQUIRES,
    extras_require=EXTRAS_REQUIRE,
    python_requires=">=3.10",
    entry_points=ENTRY_POINTS,
    classifiers=CLASSIFIERS,
    keywords=KEYWORDS,
    license="MIT",
    zip_safe=False,
)

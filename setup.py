"""Setup script for the convrbm library."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
readme_path = Path(__file__).parent / "README.md"
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")
else:
    long_description = "Convolutional Restricted Boltzmann Machines in PyTorch."

# Read version from __init__.py
version_file = Path(__file__).parent / "convrbm" / "__init__.py"
version = "0.1.0"  # Default version
if version_file.exists():
    with open(version_file) as f:
        for line in f:
            if line.startswith("__version__"):
                version = line.split("=")[1].strip().strip('"\'')
                break

setup(
    name="convrbm",
    version=version,
    author="convrbm Contributors",
    author_email="",
    description="Convolutional Restricted Boltzmann Machines in PyTorch",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "docs"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
    ],
    python_requires=">=3.10",
    install_requires=[
        "torch>=2.0.0",
        "numpy>=1.19.0",
        "tqdm>=4.60.0",
        "pydantic>=2.0.0",
        "structlog>=21.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
            "black>=22.0",
            "isort>=5.0",
            "flake8>=4.0",
            "mypy>=0.900",
        ],
        "test": [
            "pytest>=6.0",
        ],
        "yaml": [
            "pyyaml>=5.4",
        ],
    },
    include_package_data=True,
    package_data={
        "convrbm": ["py.typed"],  # For type hints
    },
    zip_safe=False,
)

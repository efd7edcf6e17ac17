#!/usr/bin/env python3
"""
Setup script for the Log Converter CLI application.
"""

from setuptools import setup, find_packages
import os


def read_long_description():
    """Read the long description from README.md if it exists."""
    here = os.path.abspath(os.path.dirname(__file__))
    readme_path = os.path.join(here, 'README.md')
    if os.path.exists(readme_path):
        with open(readme_path, 'r', encoding='utf-8') as f:
            return f.read()
    return "ESS activity log to monthly Excel timesheet converter"


def read_requirements():
    """Read requirements from requirements.txt if it exists."""
    here = os.path.abspath(os.path.dirname(__file__))
    req_path = os.path.join(here, 'requirements.txt')
    if os.path.exists(req_path):
        with open(req_path, 'r', encoding='utf-8') as f:
            return [line.strip() for line in f if line.strip() and not line.startswith('#')]
    return [
        'pandas>=1.3.0',
        'requests>=2.25.0',
        'PyYAML>=5.4.0',
        'openpyxl>=3.0.0',
        'python-dotenv>=0.19.0',
        'fastapi>=0.100.0',
        'pydantic>=2.0',
        'uvicorn>=0.20.0',
    ]


setup(
    name="log-converter",
    version="1.0.0",
    description="ESS activity log to monthly Excel timesheet converter",
    long_description=read_long_description(),
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    include_package_data=True,
    install_requires=read_requirements(),
    extras_require={
        "test": [
            "pytest>=6.0",
            "httpx>=0.24",
        ],
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.12",
            "httpx>=0.24",
            "black>=21.0",
            "flake8>=3.9",
        ],
    },
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "log-converter=log_converter.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Office/Business",
        "Topic :: Utilities",
    ],
    keywords="ess timesheet activity log excel export cli",
    zip_safe=False,
)

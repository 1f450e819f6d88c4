# setup.py
"""
Setup script for colorblind-theme.

This file provides backward compatibility with legacy build tools.
Modern builds should use `pyproject.toml` (PEP 621). This script delegates
to setuptools when needed but does not duplicate configuration.

DO NOT edit dependencies or metadata here — manage them in `pyproject.toml`.
"""

import os
from setuptools import setup

if not os.path.exists("pyproject.toml"):
    raise RuntimeError(
        "❌ This setup.py must be run from the root of the colorblind-theme project.\n"
        "Expected 'pyproject.toml' to be present."
    )

# Metadata, packages and package data come from pyproject.toml
setup()

"""
Setup shim for pip versions without PEP 517 support.

Project metadata and dependencies live in pyproject.toml.
"""

from setuptools import setup

setup()

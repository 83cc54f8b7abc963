"""
capital — config loading and service wiring core

File: src/capital/__init__.py

Purpose
- Package root. Defines package-level metadata and the small public surface.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]

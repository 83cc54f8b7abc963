"""
capital — integration test package

File: tests/integration/__init__.py

Purpose
- Test package marker file for tests that run the CLI end to end.

Functional requirements
- Must not import heavy modules at import time; keep test collection fast.
"""

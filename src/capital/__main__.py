"""Module entrypoint for ``python -m capital``."""

from __future__ import annotations

from capital.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())

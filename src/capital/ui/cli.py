"""Command-line interface router for capital."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar, cast

from capital.analytics.config import AnalyticsConfig
from capital.app import bootstrap, load_all_configs
from capital.config.loader import ConfigLoader, LoadedConfigs, dump_document
from capital.config.modules import module_name
from capital.di.registry import ServiceRegistry
from capital.observability.logging import LoggingConfig, setup_logging, shutdown_logging
from capital.schema.config import SchemaConfig
from capital.settings import AppSettings, load_settings
from capital.transfer.config import TransferConfig
from capital.ui.render import CLIRenderer, create_renderer

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class _Loaded:
    registry: ServiceRegistry
    loader: ConfigLoader
    configs: LoadedConfigs


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router."""

    parser = argparse.ArgumentParser(
        prog="capital",
        description=(
            "capital — economy config loader.\n\n"
            "Common workflows:\n"
            "  capital check               Load config.yml, repair it and summarize\n"
            "  capital dump                Print the effective config document\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--data-dir",
        default=None,
        help="Directory holding config.yml (default: $CAPITAL_DATA_DIR or ./data).",
    )
    common.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: $CAPITAL_LOG_LEVEL or INFO).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show detailed output.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Load every module config and summarize the result",
        description=(
            "Load config.yml through every registered module, repairing or regenerating it,\n"
            "and print what was loaded.\n\n"
            "Examples:\n"
            "  capital check\n"
            "  capital check --data-dir plugin_data/Capital --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    check_parser.add_argument("--json", action="store_true", default=False, help="Emit JSON.")
    check_parser.set_defaults(handler=_cmd_check)

    dump_parser = subparsers.add_parser(
        "dump",
        parents=[common],
        help="Print the effective config document as YAML",
    )
    dump_parser.set_defaults(handler=_cmd_dump)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_check(args: argparse.Namespace) -> int:
    loaded = _load(args)
    loader = loaded.loader
    report = loader.report
    schema_config = _config(loaded.configs, SchemaConfig)
    transfer = _config(loaded.configs, TransferConfig)
    analytics = _config(loaded.configs, AnalyticsConfig)

    payload: dict[str, object] = {
        "command": "check",
        "config_path": str(loader.config_path),
        "modules": [module_name(module) for module in loader.modules],
        "schema_type": schema_config.type_name,
        "transfer_methods": {
            name: {
                "command": method.command,
                "permission": method.permission,
                "src": method.src.kind.value,
                "dest": method.dest.kind.value,
            }
            for name, method in transfer.methods.items()
        },
        "top_list_enabled": analytics.top_list.enabled,
        "regenerated": bool(report and report.regenerated),
        "persisted": bool(report and report.persisted),
        "backup_path": str(report.backup_path) if report and report.backup_path else None,
        "repairs": [
            {"key": repair.key, "message": repair.message} for repair in (report.repairs if report else ())
        ],
    }

    if _flag(args, "json"):
        _emit_json(payload)
        return 0

    renderer = _get_renderer(args)
    renderer.heading("Capital config check")
    renderer.kv("Config file", loader.config_path)
    renderer.kv("Schema type", schema_config.type_name)
    if renderer.verbose:
        renderer.section("Modules:")
        renderer.items([module_name(module) for module in loader.modules])

    rows = [
        (name, method.command, method.permission, method.src.kind.value, method.dest.kind.value)
        for name, method in transfer.methods.items()
    ]
    renderer.table(("method", "command", "permission", "src", "dest"), rows, title="Transfer methods:")

    top_list = analytics.top_list
    renderer.section("Analytics:")
    renderer.kv(
        "  top-list",
        f"enabled={top_list.enabled} refresh={top_list.refresh_seconds}s entries={top_list.max_entries}",
    )

    _render_report(renderer, loader)
    renderer.ok("config loaded")
    return 0


def _cmd_dump(args: argparse.Namespace) -> int:
    loaded = _load(args)
    sys.stdout.write(dump_document(loaded.loader.parser.get_full_config()))
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load(args: argparse.Namespace) -> _Loaded:
    settings = load_settings(
        cli_overrides={
            "data_dir": getattr(args, "data_dir", None),
            "log_level": getattr(args, "log_level", None),
        }
    )
    _check_data_dir(settings)

    handle = setup_logging(
        LoggingConfig(
            level=settings.log_level,
            json_lines=settings.log_json,
            log_file=settings.log_file,
        )
    )
    try:
        registry = bootstrap(settings)
        configs = asyncio.run(load_all_configs(registry))
        loader = registry.get(ConfigLoader)
    finally:
        shutdown_logging(handle)
    return _Loaded(registry=registry, loader=loader, configs=configs)


def _check_data_dir(settings: AppSettings) -> None:
    data_dir = Path(settings.data_dir)
    if data_dir.exists() and not data_dir.is_dir():
        raise CLIError(f"data directory is not a directory: {data_dir}", exit_code=2)


def _config(configs: LoadedConfigs, module: type[T]) -> T:
    config = configs.get(module)
    if not isinstance(config, module):
        raise CLIError(f"config {module_name(module)} was not loaded", exit_code=4)
    return cast("T", config)


def _render_report(renderer: CLIRenderer, loader: ConfigLoader) -> None:
    report = loader.report
    if report is None:
        return
    if report.regenerated:
        renderer.warning(
            f"config.yml could not be parsed and was regenerated; previous file saved to {report.backup_path}"
        )
    elif report.backup_path is not None:
        renderer.warning(f"config.yml was unreadable; previous file saved to {report.backup_path}")
    if report.repairs and not report.fail_safe:
        renderer.section("Repaired values:")
        renderer.items([f"{repair.key}: {repair.message}" for repair in report.repairs])
    if report.persisted:
        renderer.kv("Saved", loader.config_path)


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=_flag(args, "no_color"), verbose=_flag(args, "verbose"))


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "run_cli"]

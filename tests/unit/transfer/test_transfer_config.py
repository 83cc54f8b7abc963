from __future__ import annotations

from pathlib import Path

import pytest

from capital.config.loader import ConfigLoader
from capital.constants import CONFIG_FILE_NAME
from capital.di.registry import ServiceRegistry
from capital.schema.config import SchemaConfig
from capital.schema.currency import CurrencySchema
from capital.schema.registry import TypeRegistry
from capital.transfer.config import TransferConfig


def _loader(data_dir: Path) -> ConfigLoader:
    registry = ServiceRegistry()
    registry.store(TypeRegistry.with_builtins())
    loader = ConfigLoader.open(registry, data_dir, (SchemaConfig, TransferConfig))
    registry.store(loader)
    return loader


@pytest.mark.asyncio
async def test_empty_methods_generate_the_default_commands(tmp_path: Path) -> None:
    transfer = await _loader(tmp_path).load_config(TransferConfig)

    assert list(transfer.methods) == ["pay", "takemoney", "addmoney"]
    assert transfer.by_command("addmoney") is transfer.methods["addmoney"]
    assert transfer.by_command("missing") is None


@pytest.mark.asyncio
async def test_configured_methods_replace_the_defaults(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILE_NAME).write_text(
        "transfer:\n"
        "  methods:\n"
        "    pay:\n"
        "      command: give\n"
        "    bonus:\n"
        "      command: bonus\n"
        "      src:\n"
        "        of: system\n",
        encoding="utf-8",
    )

    transfer = await _loader(tmp_path).load_config(TransferConfig)

    assert list(transfer.methods) == ["pay", "bonus"]
    assert transfer.methods["pay"].command == "give"
    assert transfer.methods["pay"].permission == "capital.transfer.pay"
    assert transfer.by_command("bonus") is transfer.methods["bonus"]
    assert transfer.methods["bonus"].src.kind == "system"


@pytest.mark.asyncio
async def test_targets_are_built_from_the_global_schema(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILE_NAME).write_text(
        "schema:\n"
        "  type: currency\n"
        "  currency:\n"
        "    currencies:\n"
        "      coins: {}\n"
        "transfer:\n"
        "  methods:\n"
        "    pay:\n"
        "      src:\n"
        "        of: sender\n"
        "        currency: coins\n",
        encoding="utf-8",
    )

    transfer = await _loader(tmp_path).load_config(TransferConfig)

    method = transfer.methods["pay"]
    assert isinstance(method.src.schema, CurrencySchema)
    assert method.src.schema.is_complete()
    assert not method.dest.schema.is_complete()

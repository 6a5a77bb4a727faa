"""
Issuer configuration.

A config file is a YAML mapping:

    name: Example Token
    symbol: EXT
    initial_signer: "0x..."
    admin: "0x..."
    snapshot_path: state/issuer.json   # optional

Relative `snapshot_path` values resolve against the config file's directory.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import yaml

from .core.controller import MintController
from .state.admin import AdminTable
from .state.balances import BalanceTable
from .state.snapshot import controller_from_snapshot


logger = logging.getLogger(__name__)

_REQUIRED_KEYS = ("name", "symbol", "initial_signer", "admin")
_OPTIONAL_KEYS = ("snapshot_path",)


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class IssuerConfig:
    name: str
    symbol: str
    initial_signer: str
    admin: str
    snapshot_path: Optional[Path] = None

    @classmethod
    def from_mapping(cls, obj: Any, *, base_dir: Optional[Path] = None) -> "IssuerConfig":
        if not isinstance(obj, Mapping):
            raise ConfigError("config must be a mapping")
        unknown = sorted(set(obj) - set(_REQUIRED_KEYS) - set(_OPTIONAL_KEYS))
        if unknown:
            raise ConfigError(f"unknown config keys: {', '.join(map(str, unknown))}")
        for key in _REQUIRED_KEYS:
            value = obj.get(key)
            if not isinstance(value, str) or not value:
                raise ConfigError(f"{key} must be a non-empty string")

        snapshot_path: Optional[Path] = None
        raw_path = obj.get("snapshot_path")
        if raw_path is not None:
            if not isinstance(raw_path, str) or not raw_path:
                raise ConfigError("snapshot_path must be a non-empty string")
            snapshot_path = Path(raw_path)
            if base_dir is not None and not snapshot_path.is_absolute():
                snapshot_path = base_dir / snapshot_path

        return cls(
            name=obj["name"],
            symbol=obj["symbol"],
            initial_signer=obj["initial_signer"],
            admin=obj["admin"],
            snapshot_path=snapshot_path,
        )


def load_config(path: Path) -> IssuerConfig:
    try:
        obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    return IssuerConfig.from_mapping(obj, base_dir=Path(path).resolve().parent)


def build_controller(config: IssuerConfig) -> Tuple[MintController, BalanceTable, AdminTable]:
    """
    Wire a controller with in-memory collaborators.

    If `config.snapshot_path` exists, nonces, balances and the signer are
    restored from it and `config.initial_signer` is not used.
    """
    admin = AdminTable(config.admin)
    if config.snapshot_path is not None and config.snapshot_path.exists():
        data = json.loads(config.snapshot_path.read_text(encoding="utf-8"))
        controller, balances = controller_from_snapshot(data, admin=admin)
        if (controller.name, controller.symbol) != (config.name, config.symbol):
            raise ConfigError(
                f"snapshot is for {controller.name}/{controller.symbol}, config is for {config.name}/{config.symbol}"
            )
        logger.info("restored issuer state from %s", config.snapshot_path)
        return controller, balances, admin

    balances = BalanceTable()
    controller = MintController(
        config.name,
        config.symbol,
        config.initial_signer,
        ledger=balances,
        admin=admin,
    )
    return controller, balances, admin

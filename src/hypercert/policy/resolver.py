"""Parameter resolver — loads certificate parameters from a config directory.

Reads ``hypercert_params.json``:

    protocol_version      stamped into every metadata document
    default_domain        domain tag when no record carries one
    default_rights        rights granted to fraction holders
    default_impact_scope  impact scope when the draft leaves it empty
    default_chain_id      chain whose minter is used when a chain is unknown
    minters               chain id -> certificate minter address

Missing keys fall back to the built-in constants. Addresses are stored
in any case and checksummed on load.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from hypercert.constants import (
    DEFAULT_DOMAIN,
    DEFAULT_IMPACT_SCOPE,
    DEFAULT_PROTOCOL_VERSION,
    DEFAULT_RIGHTS,
)
from hypercert.crypto.merkle import normalize_address

logger = logging.getLogger(__name__)

PARAMS_FILE = "hypercert_params.json"


@dataclass(frozen=True)
class ParamsResolver:
    """Resolved certificate parameters.

    Usage:
        resolver = ParamsResolver.from_config_dir(Path("config"))
        minter = resolver.minter_address(84532)
    """
    protocol_version: str = DEFAULT_PROTOCOL_VERSION
    default_domain: str = DEFAULT_DOMAIN
    default_rights: tuple[str, ...] = DEFAULT_RIGHTS
    default_impact_scope: tuple[str, ...] = DEFAULT_IMPACT_SCOPE
    default_chain_id: int | None = None
    minters: Mapping[int, str] = field(default_factory=dict)

    @classmethod
    def defaults(cls) -> ParamsResolver:
        return cls()

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> ParamsResolver:
        path = Path(config_dir) / PARAMS_FILE
        if not path.exists():
            raise FileNotFoundError(f"Parameter file not found: {path}")
        return cls.from_dict(json.loads(path.read_text(encoding="utf-8")))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ParamsResolver:
        minters = {
            int(chain_id): normalize_address(address)
            for chain_id, address in (data.get("minters") or {}).items()
        }
        default_chain = data.get("default_chain_id")
        return cls(
            protocol_version=str(data.get("protocol_version") or DEFAULT_PROTOCOL_VERSION),
            default_domain=str(data.get("default_domain") or DEFAULT_DOMAIN),
            default_rights=tuple(data.get("default_rights") or DEFAULT_RIGHTS),
            default_impact_scope=tuple(data.get("default_impact_scope") or DEFAULT_IMPACT_SCOPE),
            default_chain_id=int(default_chain) if default_chain is not None else None,
            minters=minters,
        )

    def minter_address(self, chain_id: int) -> str:
        """Minter address for a chain, falling back to the default chain."""
        address = self.minters.get(chain_id)
        if address is not None:
            return address
        if self.default_chain_id is None or self.default_chain_id not in self.minters:
            raise KeyError(f"No minter configured for chain {chain_id}")
        logger.warning(
            "No minter configured for chain %s, using chain %s",
            chain_id, self.default_chain_id,
        )
        return self.minters[self.default_chain_id]

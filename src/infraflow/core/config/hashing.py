# src/infraflow/core/config/hashing.py
"""
Hash canônico de documentos declarativos (config efetiva, planos).

SHA-256 sobre JSON com chaves ordenadas e separadores compactos: mapas
equivalentes produzem o mesmo hash independente da ordem das chaves.
Valores sem representação JSON (datas, enums) entram via `str`.
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """Hex SHA-256 (64 caracteres) do documento; só aceita `dict`."""
    if not isinstance(config, dict):
        raise TypeError(f"compute_config_hash espera dict, recebido {type(config).__name__}")

    payload = json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def short_hash(document: Dict[str, Any], length: int = 12) -> str:
    """Prefixo de `compute_config_hash`, usado em identificadores derivados (ex.: `plan-<hash>`)."""
    return compute_config_hash(document)[:length]

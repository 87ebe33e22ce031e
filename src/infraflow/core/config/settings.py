# src/infraflow/core/config/settings.py
"""
Materialização das opções do Orchestrator a partir da configuração resolvida.

Chaves consumidas (seção `orchestrator`):
    - dry_run (bool, default False)
    - concurrency (int >= 1, default 1); consultivo, a execução é sequencial
    - default_step_timeout_ms (int > 0 ou null, default null)
    - relabel_rolled_back (bool, default True)
    - global_labels (mapa str -> str, default {})

Chaves ausentes assumem o default. Chaves desconhecidas são ignoradas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import InvalidSettingError


@dataclass(frozen=True)
class OrchestratorSettings:
    """Opções do Orchestrator derivadas de configuração declarativa."""

    dry_run: bool = False
    concurrency: int = 1
    default_step_timeout_ms: Optional[int] = None
    relabel_rolled_back: bool = True
    global_labels: Dict[str, str] = field(default_factory=dict)


def _expect_bool(section: Dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise InvalidSettingError(f"orchestrator.{key} must be a boolean, got {type(value).__name__}")
    return value


def _expect_positive_int(value: Any, key: str) -> int:
    # bool é subclasse de int
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidSettingError(f"orchestrator.{key} must be a positive integer, got {value!r}")
    return value


def settings_from_config(config: Optional[Dict[str, Any]]) -> OrchestratorSettings:
    """
    Constrói `OrchestratorSettings` a partir da configuração efetiva.

    Args:
        config: configuração resolvida (ex.: saída de `load_config`) ou None.

    Returns:
        OrchestratorSettings com defaults aplicados às chaves ausentes.

    Raises:
        InvalidSettingError: se alguma chave consumida tiver tipo ou valor inválido.
    """
    section = (config or {}).get("orchestrator") or {}
    if not isinstance(section, dict):
        raise InvalidSettingError("orchestrator section must be a mapping")

    concurrency = _expect_positive_int(section.get("concurrency", 1), "concurrency")

    timeout = section.get("default_step_timeout_ms")
    if timeout is not None:
        timeout = _expect_positive_int(timeout, "default_step_timeout_ms")

    labels = section.get("global_labels") or {}
    if not isinstance(labels, dict):
        raise InvalidSettingError("orchestrator.global_labels must be a mapping")

    return OrchestratorSettings(
        dry_run=_expect_bool(section, "dry_run", False),
        concurrency=concurrency,
        default_step_timeout_ms=timeout,
        relabel_rolled_back=_expect_bool(section, "relabel_rolled_back", True),
        global_labels={str(k): str(v) for k, v in labels.items()},
    )

# src/infraflow/core/config/merge.py
"""
Combinação de camadas de configuração (`deep_merge`).

Regras por chave presente no override:
    - mapa sobre mapa: combinação recursiva
    - lista: substitui a lista inteira
    - `None` em qualquer lado: o override vence (`null` desliga um valor,
      um valor concreto religa)
    - escalares do mesmo tipo: o override vence
    - tipos diferentes: `ConfigTypeConflictError`, nada é devolvido

Nenhum argumento é mutado; o resultado não compartilha objetos com eles.
"""

from copy import deepcopy
from typing import Any, Dict, Tuple

from .errors import ConfigTypeConflictError


def _merge_value(path: Tuple[str, ...], current: Any, incoming: Any) -> Any:
    if isinstance(current, dict) and isinstance(incoming, dict):
        merged = deepcopy(current)
        for key, value in incoming.items():
            merged[key] = _merge_value(path + (key,), merged[key], value) if key in merged else deepcopy(value)
        return merged

    if current is None or incoming is None or isinstance(incoming, list):
        return deepcopy(incoming)

    if type(current) is not type(incoming):
        raise ConfigTypeConflictError(
            f"Conflito de tipo em '{'.'.join(path)}': "
            f"{type(current).__name__} vs {type(incoming).__name__}"
        )
    return deepcopy(incoming)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Devolve `base` com `override` aplicado por cima (ver regras do módulo)."""
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"deep_merge espera dois mapas, recebido {type(base).__name__} e {type(override).__name__}"
        )
    return _merge_value((), base, override)

# src/infraflow/core/config/loader.py
"""
Carregamento da configuração do Orchestrator.

Camadas, da menor para a maior prioridade:
    1. arquivo de defaults (obrigatório), ex.: `orchestrator.defaults.yaml`
    2. arquivo local (opcional; ignorado se o caminho não existir)
    3. `overrides` em memória (ex.: flags de linha de comando do chamador)

Cada camada é um documento YAML ou JSON cuja raiz é um mapa; as camadas
são combinadas por `deep_merge`. A interpretação das chaves fica em
`settings`.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


_PARSERS: Dict[str, Callable[[str], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.loads,
}


def _read_layer(path: Path) -> Dict[str, Any]:
    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        raise UnsupportedConfigFormatError(
            f"Formato não suportado: {path.suffix or '(sem extensão)'} em {path}"
        )

    data = parser(path.read_text(encoding="utf-8"))
    if data is None:
        # arquivo vazio
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(f"{path}: raiz deve ser um mapa, recebido {type(data).__name__}")
    return data


def load_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Resolve a configuração efetiva a partir das camadas.

    Args:
        defaults_path: arquivo base; precisa existir.
        local_path: overrides de ambiente; caminho inexistente é ignorado.
        overrides: overrides em memória, aplicados por último.

    Raises:
        DefaultsNotFoundError: se `defaults_path` não existir.
        UnsupportedConfigFormatError: extensão fora de .yaml/.yml/.json.
        InvalidConfigRootTypeError: raiz de algum arquivo não é um mapa.
        ConfigTypeConflictError: camadas com tipos incompatíveis na mesma chave.
    """
    defaults = Path(defaults_path)
    if not defaults.exists():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {defaults}")

    effective = _read_layer(defaults)

    if local_path is not None and Path(local_path).exists():
        effective = deep_merge(effective, _read_layer(Path(local_path)))

    if overrides:
        effective = deep_merge(effective, overrides)

    return effective

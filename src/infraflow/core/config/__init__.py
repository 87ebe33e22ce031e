# src/infraflow/core/config/__init__.py

"""
Camada de configuração do InfraFlow.

Este pacote contém as estruturas e utilitários responsáveis por carregar,
mesclar, validar estruturalmente e identificar a configuração usada pelo
Orchestrator.

A configuração no InfraFlow é:
    - declarativa
    - determinística
    - separada do plano de execução (o plano diz *o quê*, a config diz *como*)

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Geração de hash canônico para rastreabilidade
    - Materialização das opções do Orchestrator (`OrchestratorSettings`)

Invariantes:
    - A configuração final é um dicionário puro (dict)
    - Conflitos estruturais são tratados como erro

Limites explícitos:
    - Não valida planos de execução
    - Não executa Steps
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidSettingError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash, short_hash
from .loader import load_config
from .merge import deep_merge
from .settings import OrchestratorSettings, settings_from_config

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidSettingError",
    "UnsupportedConfigFormatError",
    "OrchestratorSettings",
    "compute_config_hash",
    "short_hash",
    "deep_merge",
    "load_config",
    "settings_from_config",
]

# src/infraflow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do InfraFlow.

As exceções aqui definidas representam violações estruturais da
configuração e não erros de execução de Steps ou de planos.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa erro de plano ou de execução

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende do Engine
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do InfraFlow.

    Permite captura genérica de falhas de configuração, mantendo a
    distinção entre erro de configuração e erro de execução de plano.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de configuração base (defaults) não encontrado.

    Decisões arquiteturais:
        - O arquivo de defaults é obrigatório
        - O loader não cria defaults implicitamente
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato de arquivo de configuração não suportado.

    Formatos suportados:
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"orchestrator": {"dry_run": false}}
        - override: {"orchestrator": "DRY"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """


class InvalidSettingError(ConfigError):
    """Valor inválido em uma chave consumida pelo Orchestrator (ex.: `orchestrator.concurrency`)."""

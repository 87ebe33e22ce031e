# src/infraflow/core/engine/references.py
"""
Referências de output entre Steps (`$step.<id>.<output>`).

Um parâmetro cujo valor é *exatamente* a string `$step.<stepId>.<outputName>`
é adiado: seu valor concreto é o output `<outputName>` produzido pelo Step
`<stepId>` na mesma run. Não há interpolação parcial, escape ou aninhamento:
`"prefix-$step.a.b"` é um literal.

Referências são reconhecidas onde quer que apareçam como valor string
inteiro, inclusive dentro de listas e mapas aninhados em `params`.

Este módulo é puro: nenhuma função depende de registry, Engine ou estado
de run, permitindo testes isolados.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping, Optional

from infraflow.core.exceptions import OutputReferenceError


OUTPUT_REF_PATTERN = re.compile(r"^\$step\.([A-Za-z0-9_-]+)\.([A-Za-z0-9_]+)$")


@dataclass(frozen=True)
class OutputRef:
    """Referência já decomposta."""

    source_step_id: str
    output_name: str

    def __str__(self) -> str:
        return f"$step.{self.source_step_id}.{self.output_name}"


def is_output_ref(value: Any) -> bool:
    """
    Indica se `value` é, por inteiro, uma referência `$step.<id>.<output>`.

    Args:
        value (Any): valor de parâmetro, de qualquer tipo.

    Returns:
        bool: True apenas para strings que casam integralmente com o padrão.
    """
    # fullmatch evita que "$" aceite um "\n" final
    return isinstance(value, str) and OUTPUT_REF_PATTERN.fullmatch(value) is not None


def parse_output_ref(value: Any) -> Optional[OutputRef]:
    """
    Decompõe uma referência de output em `OutputRef`.

    Args:
        value (Any): valor de parâmetro, de qualquer tipo.

    Returns:
        Optional[OutputRef]: referência decomposta, ou None se `value` não for
        uma referência completa (literais como `"prefix-$step.a.b"` incluídos).
    """
    if not isinstance(value, str):
        return None
    match = OUTPUT_REF_PATTERN.fullmatch(value)
    if match is None:
        return None
    return OutputRef(source_step_id=match.group(1), output_name=match.group(2))


def iter_output_refs(value: Any) -> Iterator[OutputRef]:
    """Percorre `value` em profundidade e produz toda referência encontrada, na ordem de visita."""
    if isinstance(value, str):
        ref = parse_output_ref(value)
        if ref is not None:
            yield ref
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from iter_output_refs(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from iter_output_refs(item)


def _resolve_value(value: Any, outputs: Mapping[str, Mapping[str, Any]]) -> Any:
    if isinstance(value, str):
        ref = parse_output_ref(value)
        if ref is None:
            return value
        step_outputs = outputs.get(ref.source_step_id)
        if step_outputs is None:
            raise OutputReferenceError(
                message=f'Cannot resolve "{value}": step "{ref.source_step_id}" has no outputs yet',
                details={"ref": value, "source_step_id": ref.source_step_id},
            )
        if ref.output_name not in step_outputs:
            raise OutputReferenceError(
                message=(
                    f'Cannot resolve "{value}": output "{ref.output_name}" '
                    f'not found in step "{ref.source_step_id}"'
                ),
                details={
                    "ref": value,
                    "source_step_id": ref.source_step_id,
                    "output_name": ref.output_name,
                },
            )
        return step_outputs[ref.output_name]

    if isinstance(value, Mapping):
        return {k: _resolve_value(v, outputs) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_value(v, outputs) for v in value]
    if isinstance(value, tuple):
        return tuple(_resolve_value(v, outputs) for v in value)
    return value


def resolve_step_params(
    params: Mapping[str, Any],
    outputs: Mapping[str, Mapping[str, Any]],
) -> Dict[str, Any]:
    """
    Substitui toda referência de output em `params` pelo valor concreto.

    Args:
        params: parâmetros declarados no PlanStep.
        outputs: outputs acumulados da run, por step_id.

    Returns:
        Novo dicionário com referências substituídas; literais inalterados.
        Nenhum input é mutado.

    Raises:
        OutputReferenceError: se o Step de origem ainda não tem outputs
            ("has no outputs yet") ou não produziu o output nomeado
            ("not found").
    """
    return {key: _resolve_value(value, outputs) for key, value in params.items()}

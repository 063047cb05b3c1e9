"""
Resolução dinâmica do esquema a partir da linha de cabeçalho.

O vocabulário dos cabeçalhos varia entre abas e ao longo do tempo
("Pipe_From", "pipe from", "From"), então cada campo lógico é descrito por
um predicado sobre o cabeçalho canonizado, e não por uma posição fixa.
"""
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

ABSENT = -1

_SEPARATORS = re.compile(r"[\s_\-]+")

HeaderPredicate = Callable[[str], bool]


def canonicalize_header(header: Any) -> str:
    """
    Canoniza um cabeçalho: apara, converte para minúsculas e remove espaços, hífens e underscores.

    Args:
        header (Any): Valor da célula de cabeçalho.

    Returns:
        str: Cabeçalho canonizado (ex: "Rattling_Qty" -> "rattlingqty").
    """
    if header is None:
        return ""
    return _SEPARATORS.sub("", str(header).strip().lower())


@dataclass(frozen=True)
class FieldSpec:
    """
    Campo lógico e o predicado que reconhece sua coluna.

    Attributes:
        name (str): Nome lógico do campo (ex: "rattling_qty").
        matches (HeaderPredicate): Predicado sobre o cabeçalho canonizado.
    """
    name: str
    matches: HeaderPredicate


def header_matcher(
        contains: Iterable[str] = (),
        equals: Iterable[str] = (),
        exclude: Iterable[str] = (),
) -> HeaderPredicate:
    """
    Constrói um predicado declarativo sobre o cabeçalho canonizado.

    Os termos são canonizados da mesma forma que o cabeçalho, então
    "pipe from", "pipe_from" e "pipefrom" são equivalentes.

    Args:
        contains: Casa se o cabeçalho contiver algum destes termos.
        equals: Casa se o cabeçalho for igual a algum destes termos.
        exclude: Nunca casa se o cabeçalho contiver algum destes termos.

    Returns:
        HeaderPredicate: Função ``canonical_header -> bool``.
    """
    contains = tuple(canonicalize_header(term) for term in contains)
    equals = frozenset(canonicalize_header(term) for term in equals)
    exclude = tuple(canonicalize_header(term) for term in exclude)

    def _matches(canonical: str) -> bool:
        if not canonical:
            return False
        if any(term in canonical for term in exclude):
            return False
        return canonical in equals or any(term in canonical for term in contains)

    return _matches


def field_spec(name: str, *contains: str, equals: Iterable[str] = (), exclude: Iterable[str] = ()) -> FieldSpec:
    """Atalho para declarar um FieldSpec com ``header_matcher``."""
    return FieldSpec(name, header_matcher(contains=contains, equals=equals, exclude=exclude))


def resolve_fields(header_row: Sequence[Any], field_specs: Sequence[FieldSpec]) -> dict[str, int]:
    """
    Mapeia campos lógicos para índices de coluna (0-based) do intervalo usado.

    Os campos são resolvidos na ordem em que foram declarados; cada campo fica
    com a primeira coluna (da esquerda para a direita) que casa com seu
    predicado e que ainda não foi tomada por um campo anterior. Campos sem
    coluna recebem ABSENT (-1).

    Args:
        header_row (Sequence): Linha de cabeçalho.
        field_specs (Sequence[FieldSpec]): Tabela ordenada de campos.

    Returns:
        dict[str, int]: Mapeamento {nome_lógico: índice}.
    """
    canonical_headers = [canonicalize_header(header) for header in header_row]
    taken: set[int] = set()
    mapping: dict[str, int] = {}

    for spec in field_specs:
        mapping[spec.name] = ABSENT
        for index, canonical in enumerate(canonical_headers):
            if index in taken:
                continue
            if spec.matches(canonical):
                mapping[spec.name] = index
                taken.add(index)
                break

    return mapping


def missing_fields(mapping: dict[str, int], required: Iterable[str]) -> list[str]:
    """Retorna os campos obrigatórios que ficaram sem coluna."""
    return [name for name in required if mapping.get(name, ABSENT) == ABSENT]

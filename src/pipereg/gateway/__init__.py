"""
Gateway para acesso à planilha remota.

Este módulo encapsula a sessão, o retry e as leituras e escritas na API do
Google Sheets, além da resolução do esquema pelos cabeçalhos.

Módulos:
    - a1: Coordenadas e endereços em notação A1
    - errors: Classificação de falhas remotas
    - connection: Conexão e sessão compartilhada
    - _retry: Executor com backoff e renovação de sessão
    - worksheet: Resolução e listagem de abas
    - operations: Leitura do intervalo usado, escrita e inserção de linhas
    - fields: Resolução de campos lógicos pelo cabeçalho
    - records: Localização de registros e planejamento de inserção
"""

from ._retry import (
    READ_BASE_DELAY,
    READ_MAX_DELAY,
    WRITE_BASE_DELAY,
    WRITE_MAX_DELAY,
    RetryExecutor,
    backoff_delay,
)
from .a1 import (
    RangeMeta,
    build_address,
    column_index_of,
    letters_of,
    parse_address,
    row_address,
)
from .connection import SessionManager, open_spreadsheet
from .errors import FailureKind, RemoteStoreError, classify_failure
from .fields import (
    ABSENT,
    FieldSpec,
    canonicalize_header,
    field_spec,
    header_matcher,
    missing_fields,
    resolve_fields,
)
from .operations import UsedRange, insert_row_at, read_used_range, write_range
from .records import (
    apply_field_updates,
    build_pending_row,
    filled_segments,
    locate_row,
    plan_insert_position,
    row_to_fields,
)
from .worksheet import list_worksheet_names, resolve_worksheet_name

__all__ = [
    "RangeMeta",
    "column_index_of",
    "letters_of",
    "parse_address",
    "build_address",
    "row_address",
    "FailureKind",
    "RemoteStoreError",
    "classify_failure",
    "SessionManager",
    "open_spreadsheet",
    "RetryExecutor",
    "backoff_delay",
    "READ_BASE_DELAY",
    "READ_MAX_DELAY",
    "WRITE_BASE_DELAY",
    "WRITE_MAX_DELAY",
    "list_worksheet_names",
    "resolve_worksheet_name",
    "UsedRange",
    "read_used_range",
    "write_range",
    "insert_row_at",
    "ABSENT",
    "FieldSpec",
    "canonicalize_header",
    "field_spec",
    "header_matcher",
    "missing_fields",
    "resolve_fields",
    "locate_row",
    "plan_insert_position",
    "build_pending_row",
    "filled_segments",
    "apply_field_updates",
    "row_to_fields",
]

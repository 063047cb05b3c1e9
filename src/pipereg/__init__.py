"""
Pipe Registry

Camada de acesso a uma planilha compartilhada usada como registro estruturado
de work orders de inspeção de tubos e dos lotes de tubing recebidos.

Este módulo expõe as principais classes para uso externo:

- Config: Configuração lida de variáveis de ambiente
- Registry: Registro com leitura, inserção agrupada e atualização por chave
- Table: Conteúdo lido de uma aba
"""

from .__version__ import __version__
from .config import Config
from .registry import Registry, Table

__all__ = [
    '__version__',
    'Config',
    'Registry',
    'Table',
]

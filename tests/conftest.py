"""Configuração de testes pytest."""
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Adicionar src ao path para importação dos módulos
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


@pytest.fixture
def no_sleep():
    """Zera as esperas do backoff entre tentativas."""
    with patch("pipereg.gateway._retry.time.sleep") as mock_sleep:
        yield mock_sleep

from dataclasses import dataclass
import os

from dotenv import load_dotenv

# Carrega as variáveis de ambiente do arquivo .env
load_dotenv()

DEFAULT_TUBING_SHEET = "tubing"
DEFAULT_WORK_ORDER_SHEET = "wo"
DEFAULT_CLIENT_SHEET = "client"
DEFAULT_RETRY_TRIES = 5


@dataclass(frozen=True)
class Config:
    """
    Configurações do registro, obtidas de variáveis de ambiente.

    Attributes:
        spreadsheet_id (str | None): ID da planilha, obtido da variável de ambiente SPREADSHEET_ID.
        service_account_file (str | None): Caminho para o arquivo de conta de serviço, obtido da variável de ambiente SERVICE_ACCOUNT_FILE.
        tubing_sheet (str | None): Aba do registro de tubos (TUBING_SHEET, padrão "tubing").
        work_order_sheet (str | None): Aba de work orders (WORK_ORDER_SHEET, padrão "wo").
        client_sheet (str | None): Aba de clientes (CLIENT_SHEET, padrão "client").
        retry_tries (int | None): Teto de tentativas por operação remota (RETRY_TRIES, padrão 5).
    """
    spreadsheet_id: str | None = None
    service_account_file: str | None = None
    tubing_sheet: str | None = None
    work_order_sheet: str | None = None
    client_sheet: str | None = None
    retry_tries: int | None = None

    def __post_init__(self):
        if self.spreadsheet_id is None:
            object.__setattr__(self, 'spreadsheet_id', os.getenv('SPREADSHEET_ID'))
        if self.service_account_file is None:
            object.__setattr__(self, 'service_account_file', os.getenv('SERVICE_ACCOUNT_FILE'))
        if self.tubing_sheet is None:
            object.__setattr__(self, 'tubing_sheet', os.getenv('TUBING_SHEET') or DEFAULT_TUBING_SHEET)
        if self.work_order_sheet is None:
            object.__setattr__(self, 'work_order_sheet', os.getenv('WORK_ORDER_SHEET') or DEFAULT_WORK_ORDER_SHEET)
        if self.client_sheet is None:
            object.__setattr__(self, 'client_sheet', os.getenv('CLIENT_SHEET') or DEFAULT_CLIENT_SHEET)
        if self.retry_tries is None:
            raw_tries = os.getenv('RETRY_TRIES')
            try:
                tries = int(raw_tries) if raw_tries else DEFAULT_RETRY_TRIES
            except ValueError:
                raise ValueError(f"A variável de ambiente 'RETRY_TRIES' deve ser um inteiro: '{raw_tries}'")
            object.__setattr__(self, 'retry_tries', tries)

        if not self.spreadsheet_id:
            raise ValueError("A variável de ambiente 'SPREADSHEET_ID' é obrigatória.")
        if not self.service_account_file:
            raise ValueError("A variável de ambiente 'SERVICE_ACCOUNT_FILE' é obrigatória.")
        if self.retry_tries < 1:
            raise ValueError("O número de tentativas (RETRY_TRIES) deve ser ao menos 1.")

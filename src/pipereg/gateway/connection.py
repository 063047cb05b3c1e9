import logging
import threading

from gspread import Client, Spreadsheet
from google.oauth2.service_account import Credentials


logger = logging.getLogger(__name__)

SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
]


def _connect_service_account(service_account_file: str) -> Client:
    """
    Conecta-se à API do Google Sheets usando um arquivo de conta de serviço.

    Cada chamada gera credenciais novas, o que força a emissão de um novo token.

    Args:
        service_account_file (str): Caminho para o arquivo de conta de serviço JSON.

    Returns:
        Client: Cliente autenticado do gspread para interagir com a API do Google Sheets.
    """
    logger.debug("Conectando à API do Google Sheets usando: %s", service_account_file)
    credentials = Credentials.from_service_account_file(
        service_account_file,
        scopes=SCOPES,
    )
    client = Client(auth=credentials)
    logger.info("Conexão estabelecida com sucesso à API do Google Sheets.")
    return client


def open_spreadsheet(spreadsheet_id: str, service_account_file: str) -> Spreadsheet:
    """
    Abre uma planilha do Google Sheets pelo seu ID, sem retry.

    O retry fica a cargo do executor que chama o SessionManager.

    Args:
        spreadsheet_id (str): ID da planilha do Google Sheets.
        service_account_file (str): Caminho para o arquivo de conta de serviço JSON.

    Returns:
        Spreadsheet: Handle autorizado da planilha.
    """
    logger.debug("Abrindo a planilha com ID: %s", spreadsheet_id)
    client = _connect_service_account(service_account_file)
    spreadsheet = client.open_by_key(spreadsheet_id)
    logger.info("Planilha aberta com sucesso: %s", spreadsheet.title)
    return spreadsheet


class SessionManager:
    """
    Mantém uma única sessão (handle autorizado da planilha) por instância.

    A sessão é criada sob demanda, reutilizada entre chamadas e descartada por
    ``invalidate()``. Apenas uma criação fica em andamento por vez: chamadas
    concorrentes esperam e reutilizam o resultado.
    """

    def __init__(self, spreadsheet_id: str, service_account_file: str):
        """
        Args:
            spreadsheet_id (str): ID da planilha alvo.
            service_account_file (str): Caminho para o arquivo de conta de serviço JSON.
        """
        if not spreadsheet_id:
            raise ValueError("O ID da planilha é obrigatório.")

        self.spreadsheet_id = spreadsheet_id
        self.service_account_file = service_account_file
        self._session: Spreadsheet | None = None
        self._create_lock = threading.Lock()

    @property
    def has_session(self) -> bool:
        return self._session is not None

    def get_session(self) -> Spreadsheet:
        """
        Retorna a sessão em cache, criando-a na primeira chamada.

        Returns:
            Spreadsheet: Handle autorizado da planilha.
        """
        session = self._session
        if session is not None:
            return session

        with self._create_lock:
            # Outra thread pode ter criado a sessão enquanto esperávamos
            if self._session is None:
                logger.debug("Criando nova sessão para a planilha %s", self.spreadsheet_id)
                self._session = open_spreadsheet(self.spreadsheet_id, self.service_account_file)
            return self._session

    def invalidate(self) -> None:
        """Descarta a sessão em cache. Idempotente."""
        if self._session is not None:
            logger.info("Sessão da planilha %s descartada.", self.spreadsheet_id)
        self._session = None

"""
Definição do schema do registro de tubos (lotes de tubing).

Os cabeçalhos da aba variam ("Pipe_From", "pipe from", "From"), então cada
campo é reconhecido por predicado e não por posição. A ordem de TUBING_FIELDS
importa: um campo só pode tomar colunas que os anteriores não tomaram.
"""
import re
from dataclasses import dataclass, field
from datetime import date

from ..gateway import field_spec

TUBING_TABLE_NAME = "tubing"

STATUS_ARRIVED = "Arrived"
STATUS_INSPECTION_DONE = "Inspection Done"
STATUS_COMPLETED = "Completed"

STAGE_KEYS = ("rattling", "external", "hydro", "mpi", "drift", "emi", "marking")
SCRAP_KEYS = ("rattling", "external", "jetting", "mpi", "drift", "emi")

_STAGE_TERMS = ("rattling", "external", "hydro", "jetting", "mpi", "drift", "emi", "marking")

TUBING_FIELDS = (
    field_spec("client", "client"),
    field_spec("wo_no", "wo", "work order", exclude=("date",)),
    field_spec("batch", "batch"),
    field_spec("status", "status"),
    field_spec("diameter", "diameter", "диаметр"),
    field_spec("pipe_from", "pipe from", equals=("from",)),
    field_spec("pipe_to", "pipe to", equals=("to",)),
    field_spec("rack", "rack"),
    field_spec("arrival_date", "arrival"),
    field_spec("class_1", "class 1"),
    field_spec("class_2", "class 2"),
    field_spec("class_3", "class 3"),
    field_spec("repair", "repair"),
    field_spec("rattling_qty", "rattling qty", exclude=("scrap",)),
    field_spec("external_qty", "external qty", exclude=("scrap",)),
    field_spec("hydro_qty", "hydro qty", "jetting qty", exclude=("scrap",)),
    field_spec("mpi_qty", "mpi qty", exclude=("scrap",)),
    field_spec("drift_qty", "drift qty", exclude=("scrap",)),
    field_spec("emi_qty", "emi qty", exclude=("scrap",)),
    field_spec("marking_qty", "marking qty"),
    field_spec("rattling_scrap", "rattling scrap"),
    field_spec("external_scrap", "external scrap"),
    field_spec("jetting_scrap", "jetting scrap"),
    field_spec("mpi_scrap", "mpi scrap"),
    field_spec("drift_scrap", "drift scrap"),
    field_spec("emi_scrap", "emi scrap"),
    field_spec("scrap_total", "scrap", exclude=("scrap qty",)),
    field_spec("start_date", "start date"),
    field_spec("end_date", "end date"),
    field_spec("load_out_date", "load out date", "loadout"),
    field_spec("act_no_oper", "act no oper", "act no"),
    field_spec("act_date", "act date"),
    field_spec("qty", "qty", "quantity", equals=("qty", "quantity"), exclude=_STAGE_TERMS + ("scrap", "planned")),
)

_NON_DIGITS = re.compile(r"[^0-9-]")


def compute_pipe_to(pipe_from: str, qty: str) -> str:
    """
    Calcula o número do último tubo do lote: pipe_from + qty - 1.

    Caracteres não numéricos são descartados antes da conversão.

    Args:
        pipe_from (str): Número do primeiro tubo.
        qty (str): Quantidade de tubos no lote.

    Returns:
        str: Número do último tubo, ou "" se algum valor não for numérico.
    """
    try:
        first = int(_NON_DIGITS.sub("", str(pipe_from)))
        count = int(_NON_DIGITS.sub("", str(qty)))
    except ValueError:
        return ""
    return str(first + count - 1)


@dataclass
class TubingBatch:
    """
    Lote de tubos registrado para uma work order.

    A chave do lote é (client, wo_no, batch).

    Attributes:
        client (str): Cliente dono dos tubos.
        wo_no (str): Número da work order.
        batch (str): Identificador do lote dentro da work order.
        status (str): Estado atual (Arrived, Inspection Done, Completed).
        quantities (dict[str, str]): Quantidade por estágio de inspeção (STAGE_KEYS).
        scrap (dict[str, str]): Refugo por estágio (SCRAP_KEYS).
    """
    client: str
    wo_no: str
    batch: str
    status: str = STATUS_ARRIVED
    diameter: str = ""
    qty: str = ""
    pipe_from: str = ""
    pipe_to: str = ""
    rack: str = ""
    arrival_date: str = field(default_factory=lambda: date.today().isoformat())
    class_1: str = ""
    class_2: str = ""
    class_3: str = ""
    repair: str = ""
    scrap_total: str = ""
    start_date: str = ""
    end_date: str = ""
    load_out_date: str = ""
    act_no_oper: str = ""
    act_date: str = ""
    quantities: dict[str, str] = field(default_factory=dict)
    scrap: dict[str, str] = field(default_factory=dict)

    @property
    def key(self) -> dict[str, str]:
        return {"client": self.client, "wo_no": self.wo_no, "batch": self.batch}

    def fill_pipe_to(self) -> None:
        """Preenche pipe_to a partir de pipe_from e qty, se ainda estiver vazio."""
        if not self.pipe_to and self.pipe_from and self.qty:
            self.pipe_to = compute_pipe_to(self.pipe_from, self.qty)

    def to_fields(self) -> dict[str, str]:
        """
        Converte para o dicionário {campo_lógico: valor} usado pelo registro.

        Returns:
            dict[str, str]: Valores de todos os campos de TUBING_FIELDS.
        """
        fields = {
            "client": self.client,
            "wo_no": self.wo_no,
            "batch": self.batch,
            "status": self.status,
            "diameter": self.diameter,
            "qty": self.qty,
            "pipe_from": self.pipe_from,
            "pipe_to": self.pipe_to,
            "rack": self.rack,
            "arrival_date": self.arrival_date,
            "class_1": self.class_1,
            "class_2": self.class_2,
            "class_3": self.class_3,
            "repair": self.repair,
            "scrap_total": self.scrap_total,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "load_out_date": self.load_out_date,
            "act_no_oper": self.act_no_oper,
            "act_date": self.act_date,
        }
        for stage in STAGE_KEYS:
            fields[f"{stage}_qty"] = self.quantities.get(stage, "")
        for stage in SCRAP_KEYS:
            fields[f"{stage}_scrap"] = self.scrap.get(stage, "")
        return fields

    @classmethod
    def from_fields(cls, fields: dict[str, str]) -> "TubingBatch":
        """
        Reconstrói o lote a partir de {campo_lógico: valor}.

        Args:
            fields (dict[str, str]): Valores lidos da aba (campos ausentes viram "").

        Returns:
            TubingBatch: Instância reconstruída.
        """
        def get(name: str) -> str:
            return fields.get(name, "") or ""

        return cls(
            client=get("client"),
            wo_no=get("wo_no"),
            batch=get("batch"),
            status=get("status"),
            diameter=get("diameter"),
            qty=get("qty"),
            pipe_from=get("pipe_from"),
            pipe_to=get("pipe_to"),
            rack=get("rack"),
            arrival_date=get("arrival_date"),
            class_1=get("class_1"),
            class_2=get("class_2"),
            class_3=get("class_3"),
            repair=get("repair"),
            scrap_total=get("scrap_total"),
            start_date=get("start_date"),
            end_date=get("end_date"),
            load_out_date=get("load_out_date"),
            act_no_oper=get("act_no_oper"),
            act_date=get("act_date"),
            quantities={stage: get(f"{stage}_qty") for stage in STAGE_KEYS},
            scrap={stage: get(f"{stage}_scrap") for stage in SCRAP_KEYS},
        )


@dataclass
class InspectionResult:
    """
    Resultado da inspeção de um lote.

    Campos None não são alterados na aba.
    """
    status: str = STATUS_INSPECTION_DONE
    class_1: str | None = None
    class_2: str | None = None
    class_3: str | None = None
    repair: str | None = None
    scrap_total: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    rack: str | None = None
    quantities: dict[str, str] = field(default_factory=dict)
    scrap: dict[str, str] = field(default_factory=dict)

    def to_updates(self) -> dict[str, str]:
        updates = {
            name: value
            for name, value in (
                ("status", self.status),
                ("class_1", self.class_1),
                ("class_2", self.class_2),
                ("class_3", self.class_3),
                ("repair", self.repair),
                ("scrap_total", self.scrap_total),
                ("start_date", self.start_date),
                ("end_date", self.end_date),
                ("rack", self.rack),
            )
            if value is not None
        }
        for stage, value in self.quantities.items():
            if stage not in STAGE_KEYS:
                raise ValueError(f"Estágio de inspeção desconhecido: '{stage}'")
            updates[f"{stage}_qty"] = value
        for stage, value in self.scrap.items():
            if stage not in SCRAP_KEYS:
                raise ValueError(f"Estágio de refugo desconhecido: '{stage}'")
            updates[f"{stage}_scrap"] = value
        return updates


@dataclass
class LoadOut:
    """Dados de expedição (load out) de um lote."""
    load_out_date: str = field(default_factory=lambda: date.today().isoformat())
    act_no_oper: str | None = None
    act_date: str | None = None
    status: str = STATUS_COMPLETED

    def to_updates(self) -> dict[str, str]:
        updates = {"load_out_date": self.load_out_date, "status": self.status}
        if self.act_no_oper is not None:
            updates["act_no_oper"] = self.act_no_oper
        if self.act_date is not None:
            updates["act_date"] = self.act_date
        return updates

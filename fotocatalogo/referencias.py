# fotocatalogo/referencias.py
from __future__ import annotations

import csv
import io
import unicodedata
import pandas as pd

from .errors import SchemaError, EmptyInput
from .models import ReferenceRecord
from .logging_setup import get_logger

log = get_logger(__name__)

REQUIRED_COLUMNS = ("codigo", "descripcion", "grupo", "subgrupo")


def _norm_txt(s) -> str:
    if s is None:
        return ""
    t = unicodedata.normalize("NFD", str(s))
    t = "".join(ch for ch in t if unicodedata.category(ch) != "Mn")
    return t.strip().lower()


def detect_delimiter(header_line: str) -> str:
    return ";" if ";" in header_line else ","


def _first_non_blank_line(raw_text: str) -> str | None:
    for line in raw_text.splitlines():
        if line.strip():
            return line
    return None


def _records_from_frame(df: pd.DataFrame, origen: str) -> list[ReferenceRecord]:
    df = df.rename(columns={c: _norm_txt(c) for c in df.columns})
    df = df.loc[:, ~df.columns.duplicated(keep="first")]

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise SchemaError(
            f"Faltan columnas en {origen}: " + ", ".join(missing)
            + ". Se requieren: " + ", ".join(REQUIRED_COLUMNS) + "."
        )

    out = df[list(REQUIRED_COLUMNS)].fillna("").astype(str)
    for col in REQUIRED_COLUMNS:
        out[col] = out[col].str.strip()

    by_code: dict[str, ReferenceRecord] = {}
    for _, r in out.iterrows():
        code = r["codigo"]
        if not code:
            continue
        by_code[code] = ReferenceRecord(
            code=code,
            description=r["descripcion"],
            group=r["grupo"],
            subgroup=r["subgrupo"],
        )
    return list(by_code.values())


def parse_referencias(raw_text: str) -> list[ReferenceRecord]:
    """
    Lee el CSV de referencias (codigo, descripcion, grupo, subgrupo).

    - Separador: ';' si la cabecera lo contiene, si no ','.
    - Cabeceras sin mayúsculas/espacios/tildes, en cualquier orden;
      las columnas de más se ignoran.
    - Campos faltantes al final de una fila => "", los sobrantes se descartan.
    - Códigos repetidos: gana la última fila.
    """
    raw_text = (raw_text or "").lstrip("\ufeff")
    header_line = _first_non_blank_line(raw_text)
    if header_line is None:
        raise EmptyInput()

    sep = detect_delimiter(header_line)
    rows = [r for r in csv.reader(io.StringIO(raw_text), delimiter=sep) if any(c.strip() for c in r)]
    header, body = rows[0], rows[1:]
    n_cols = len(header)
    # Cada fila se empareja con las cabeceras por posición
    body = [(r + [""] * n_cols)[:n_cols] for r in body]

    df = pd.DataFrame(body, columns=header)
    records = _records_from_frame(df, "el CSV")
    log.info("Referencias leídas: %d códigos (separador '%s')", len(records), sep)
    return records


def leer_referencias_excel(path_xlsx: str) -> list[ReferenceRecord]:
    """Mismas reglas que el CSV, leyendo la primera hoja de un .xlsx."""
    df = pd.read_excel(path_xlsx, sheet_name=0, dtype=str, engine="openpyxl")
    df = df.dropna(how="all")
    if df.empty and len(df.columns) == 0:
        raise EmptyInput("La planilla de referencias está vacía.")
    records = _records_from_frame(df, "la planilla")
    log.info("Referencias leídas de %s: %d códigos", path_xlsx, len(records))
    return records


class ReferenceTable:
    """Búsqueda por código sobre las referencias importadas."""

    def __init__(self, records=()):
        self._by_code: dict[str, ReferenceRecord] = {}
        for rec in records:
            self._by_code[rec.code] = rec

    @classmethod
    def from_csv_text(cls, raw_text: str) -> "ReferenceTable":
        return cls(parse_referencias(raw_text))

    def __len__(self) -> int:
        return len(self._by_code)

    def __contains__(self, code) -> bool:
        return code in self._by_code

    @property
    def records(self) -> list[ReferenceRecord]:
        return list(self._by_code.values())

    def lookup(self, code: str | None) -> ReferenceRecord | None:
        if not code:
            return None
        return self._by_code.get(str(code).strip())

    def buscar(self, texto: str, limite: int = 20) -> list[ReferenceRecord]:
        """Códigos que empiezan con `texto` primero, luego descripciones que lo contienen."""
        q = _norm_txt(texto)
        if not q:
            return []
        por_codigo, por_desc = [], []
        for rec in self._by_code.values():
            if _norm_txt(rec.code).startswith(q):
                por_codigo.append(rec)
            elif q in _norm_txt(rec.description):
                por_desc.append(rec)
        return (por_codigo + por_desc)[:limite]

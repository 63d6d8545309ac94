# fotocatalogo/dataio.py
import json
from typing import Iterable

from .errors import MalformedDocument
from .models import CatalogEntry, entries_from_payload
from .referencias import REQUIRED_COLUMNS, ReferenceTable, leer_referencias_excel
from .logging_setup import get_logger

log = get_logger(__name__)

TEMPLATE_HEADER = ",".join(REQUIRED_COLUMNS)


def to_portable(entries: Iterable[CatalogEntry]) -> str:
    """JSON estable: mismas entradas en el mismo orden => mismos bytes."""
    return json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False)


def from_portable(text: str, unique_codes: bool = False) -> list[CatalogEntry]:
    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedDocument(f"Error al leer el archivo: no es un JSON válido ({e}).") from e
    return entries_from_payload(payload, unique_codes=unique_codes)


def to_tabular_template() -> str:
    return TEMPLATE_HEADER + "\n"


# ---------- archivos ----------
def guardar_catalogo(path: str, entries: Iterable[CatalogEntry]) -> str:
    entries = list(entries)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(to_portable(entries))
    log.info("Catálogo guardado en %s (%d productos)", path, len(entries))
    return path


def cargar_catalogo(path: str, unique_codes: bool = False) -> list[CatalogEntry]:
    with open(path, "r", encoding="utf-8") as fh:
        text = fh.read()
    entries = from_portable(text, unique_codes=unique_codes)
    log.info("Catálogo leído de %s (%d productos)", path, len(entries))
    return entries


def guardar_plantilla_csv(path: str) -> str:
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(to_tabular_template())
    return path


def cargar_referencias(path: str) -> ReferenceTable:
    if path.lower().endswith((".xlsx", ".xlsm")):
        table = ReferenceTable(leer_referencias_excel(path))
    else:
        # utf-8-sig: los CSV guardados desde Excel traen BOM
        with open(path, "r", encoding="utf-8-sig") as fh:
            table = ReferenceTable.from_csv_text(fh.read())
    log.info("Referencias cargadas de %s: %d", path, len(table))
    return table

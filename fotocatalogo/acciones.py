# fotocatalogo/acciones.py
from __future__ import annotations

from .catalog_store import CatalogStore
from .config import USAR_CODIGOS
from .dataio import guardar_catalogo, cargar_catalogo
from .errors import MissingInput, EmptyCatalogError
from .models import CatalogEntry
from .pdfgen import generar_pdf
from .referencias import ReferenceTable
from .logging_setup import get_logger

log = get_logger(__name__)


def _clean(s: str | None) -> str:
    return (s or "").strip()


def agregar_producto(
    store: CatalogStore,
    image: str | None,
    code: str | None = None,
    description: str | None = None,
    referencias: ReferenceTable | None = None,
    *,
    group: str | None = None,
    subgroup: str | None = None,
    usar_codigos: bool = USAR_CODIGOS,
) -> CatalogEntry:
    """
    Alta de un producto recién fotografiado.

    Con usar_codigos el código es obligatorio y, si está en las referencias,
    de ahí salen descripción, grupo y subgrupo. Sin códigos basta la descripción.
    """
    image = _clean(image)
    code = _clean(code)
    description = _clean(description)

    if not image:
        raise MissingInput("Primero toma o sube una foto del producto.")

    if usar_codigos:
        if not code:
            raise MissingInput("Por favor, ingresa o selecciona el código del producto.")
        ref = referencias.lookup(code) if referencias is not None else None
        if ref is not None:
            description = description or ref.description
            group = group or ref.group
            subgroup = subgroup or ref.subgroup
        elif referencias is not None:
            log.info("Código %s no está en las referencias; se usa la descripción ingresada", code)

    if not description:
        raise MissingInput("Por favor, agrega la descripción antes de agregar el producto.")

    entry = CatalogEntry(
        image=image,
        description=description,
        code=code or None,
        group=_clean(group) or None,
        subgroup=_clean(subgroup) or None,
    )
    store.add(entry)
    return entry


def exportar_json(store: CatalogStore, path: str) -> str:
    snapshot = store.snapshot()
    if not snapshot:
        raise EmptyCatalogError("No hay productos para guardar. Por favor, agrega algunos primero.")
    return guardar_catalogo(path, snapshot)


def importar_json(store: CatalogStore, path: str) -> int:
    """Reemplaza el catálogo completo; si el archivo es inválido no cambia nada."""
    entries = cargar_catalogo(path, unique_codes=store.require_codes)
    store.replace_all(entries)
    return len(store)


def exportar_pdf(store: CatalogStore, output_path: str | None = None, **kwargs) -> str:
    # snapshot antes del layout: el store no se toca hasta terminar el PDF
    return generar_pdf(store.snapshot(), output_path=output_path, **kwargs)

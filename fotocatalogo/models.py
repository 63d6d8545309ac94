# fotocatalogo/models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .errors import InvalidCatalogFormat

# Orden fijo de llaves en el JSON exportado
ENTRY_KEYS = ("image", "code", "description", "group", "subgroup")
OPTIONAL_KEYS = ("code", "group", "subgroup")

# Variante vieja del catálogo (sólo imagen + partNumber + descripción)
LEGACY_ALIASES = {"partNumber": "code"}


@dataclass(frozen=True)
class CatalogEntry:
    """Un producto del catálogo: imagen (data URL) + metadatos."""

    image: str
    description: str
    code: str | None = None
    group: str | None = None
    subgroup: str | None = None

    def __post_init__(self):
        # Mismos valores que devuelve la importación: texto sin espacios, opcionales vacíos => None
        if isinstance(self.description, str):
            object.__setattr__(self, "description", self.description.strip())
        for key in OPTIONAL_KEYS:
            val = getattr(self, key)
            if isinstance(val, str):
                object.__setattr__(self, key, val.strip() or None)

    def to_dict(self) -> dict:
        out = {}
        for key in ENTRY_KEYS:
            val = getattr(self, key)
            if val is not None:
                out[key] = val
        return out

    @property
    def sort_key(self) -> str:
        return self.code or ""


@dataclass(frozen=True)
class ReferenceRecord:
    """Fila del CSV de referencias (codigo -> descripcion/grupo/subgrupo)."""

    code: str
    description: str
    group: str = ""
    subgroup: str = ""


def _optional_text(raw: Mapping[str, Any], key: str, pos: int) -> str | None:
    val = raw.get(key)
    if val is None:
        return None
    if not isinstance(val, str):
        raise InvalidCatalogFormat(
            f"El producto #{pos + 1} tiene un valor inválido en '{key}'."
        )
    val = val.strip()
    return val or None


def entry_from_mapping(raw: Any, pos: int = 0) -> CatalogEntry:
    """
    Valida la forma de un producto importado.
    image y description son obligatorios y no vacíos; el resto es opcional.
    """
    if isinstance(raw, CatalogEntry):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        raise InvalidCatalogFormat(f"El producto #{pos + 1} no es un objeto.")

    data = dict(raw)
    for old, new in LEGACY_ALIASES.items():
        if old in data and new not in data:
            data[new] = data[old]

    image = data.get("image")
    description = data.get("description")
    if not isinstance(image, str) or not image.strip():
        raise InvalidCatalogFormat(f"El producto #{pos + 1} no tiene imagen.")
    if not isinstance(description, str) or not description.strip():
        raise InvalidCatalogFormat(f"El producto #{pos + 1} no tiene descripción.")

    return CatalogEntry(
        image=image,
        description=description.strip(),
        code=_optional_text(data, "code", pos),
        group=_optional_text(data, "group", pos),
        subgroup=_optional_text(data, "subgroup", pos),
    )


def entries_from_payload(payload: Any, unique_codes: bool = False) -> list[CatalogEntry]:
    """
    Convierte una secuencia de objetos en productos validados.
    Con unique_codes=True además rechaza códigos repetidos.
    """
    if isinstance(payload, (str, bytes, Mapping)) or not isinstance(payload, Iterable):
        raise InvalidCatalogFormat("Se esperaba una lista de productos.")

    entries = [entry_from_mapping(raw, pos) for pos, raw in enumerate(payload)]

    if unique_codes:
        seen: set[str] = set()
        for e in entries:
            if not e.code:
                continue
            if e.code in seen:
                raise InvalidCatalogFormat(f"El código '{e.code}' está repetido en el catálogo.")
            seen.add(e.code)
    return entries

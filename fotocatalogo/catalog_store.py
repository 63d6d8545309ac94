# fotocatalogo/catalog_store.py
from __future__ import annotations

from typing import Callable, Iterable

from .errors import DuplicateCodeError, IndexOutOfRange
from .models import CatalogEntry, entries_from_payload
from .logging_setup import get_logger

log = get_logger(__name__)

Listener = Callable[[tuple], None]


class CatalogStore:
    """
    Fuente única de verdad del catálogo durante la sesión.

    Se crea explícitamente y se pasa por referencia a quien lo use.
    Con require_codes=True (variante con CSV de referencias) no se admiten
    dos productos con el mismo código; los productos sin código no cuentan.

    Las mutaciones no deben intercalarse con un layout en curso: se toma
    snapshot() antes de exportar y no se toca el store hasta terminar.
    """

    def __init__(self, require_codes: bool = True):
        self.require_codes = require_codes
        self._entries: list[CatalogEntry] = []
        self._listeners: list[Listener] = []

    # ---------- ciclo de vida ----------
    def init(self) -> None:
        """Inicio de sesión: catálogo vacío."""
        self._entries = []
        log.debug("Catálogo inicializado (require_codes=%s)", self.require_codes)

    def clear(self) -> None:
        """Reinicio explícito pedido por el usuario."""
        self._entries = []
        log.info("Catálogo vaciado")
        self._notify()

    # ---------- suscriptores ----------
    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        snap = self.snapshot()
        for fn in list(self._listeners):
            fn(snap)

    # ---------- operaciones ----------
    def __len__(self) -> int:
        return len(self._entries)

    def has_code(self, code: str | None) -> bool:
        if not code:
            return False
        return any(e.code == code for e in self._entries)

    def add(self, entry: CatalogEntry) -> None:
        if self.require_codes and self.has_code(entry.code):
            log.warning("Código duplicado rechazado: %s", entry.code)
            raise DuplicateCodeError(entry.code)
        self._entries.append(entry)
        log.info("Producto agregado: %s (%d en catálogo)", entry.code or entry.description, len(self._entries))
        self._notify()

    def remove_at(self, index: int) -> CatalogEntry:
        if not isinstance(index, int) or not 0 <= index < len(self._entries):
            raise IndexOutOfRange(
                f"No existe el producto #{index} (el catálogo tiene {len(self._entries)})."
            )
        removed = self._entries.pop(index)
        log.info("Producto eliminado: %s", removed.code or removed.description)
        self._notify()
        return removed

    def replace_all(self, entries: Iterable) -> None:
        # Validar todo antes de tocar el estado actual
        validated = entries_from_payload(entries, unique_codes=self.require_codes)
        self._entries = validated
        log.info("Catálogo reemplazado: %d productos", len(validated))
        self._notify()

    def snapshot(self) -> tuple[CatalogEntry, ...]:
        return tuple(self._entries)

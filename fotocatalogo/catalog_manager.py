# fotocatalogo/catalog_manager.py
"""
Punto de integración con una interfaz Qt.

La CLI trabaja directo sobre CatalogStore; una ventana PySide6 crea un
CatalogManager con el mismo store y conecta catalog_updated a sus vistas.
"""
from __future__ import annotations

from PySide6.QtCore import QObject, Signal

from .catalog_store import CatalogStore


class CatalogManager(QObject):
    """
    Puente Qt del CatalogStore para la interfaz.
    Emite catalog_updated(snapshot) cada vez que el catálogo cambia.
    """
    catalog_updated = Signal(object)  # tuple[CatalogEntry, ...]

    def __init__(self, store: CatalogStore):
        super().__init__()
        self._store = store
        self._store.subscribe(self._on_store_changed)

    @property
    def store(self) -> CatalogStore:
        return self._store

    @property
    def productos(self) -> tuple:
        return self._store.snapshot()

    def _on_store_changed(self, snapshot: tuple) -> None:
        self.catalog_updated.emit(snapshot)

    def detach(self) -> None:
        self._store.unsubscribe(self._on_store_changed)

# fotocatalogo/layout.py
"""
Paginado de tarjetas del catálogo.

Convierte la lista ordenada de productos en posiciones (página, x, y, ancho,
alto) sin solapes ni cortes de página, en filas de N columnas. El alto de
cada tarjeta depende del texto envuelto, que se mide con el mismo motor que
luego dibuja (TextMeasurer), no con una estimación.

Coordenadas en puntos PDF, con origen ARRIBA-izquierda (+Y hacia abajo);
el renderer las pasa al sistema de reportlab.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm

from .models import CatalogEntry
from .logging_setup import get_logger

log = get_logger(__name__)

# Oficio (Latinoamérica): 216 x 330 mm
OFICIO = (216 * mm, 330 * mm)
PAGE_SIZES = {"A4": A4, "OFICIO": OFICIO}

# (campo, estilo, rótulo) en el orden en que se dibujan dentro de la tarjeta
CARD_FIELDS = (
    ("code", "code", ""),
    ("description", "body", ""),
    ("group", "meta", "Grupo: "),
    ("subgroup", "meta", "Subgrupo: "),
)


class TextMeasurer(Protocol):
    def wrap(self, text: str, max_width: float, style: str = "body") -> list[str]:
        """Líneas en que queda `text` al envolverlo en `max_width`."""


@dataclass(frozen=True)
class PageGeometry:
    page_width: float
    page_height: float
    margin: float = 10 * mm
    cards_per_row: int = 2
    image_size: float = 35 * mm
    line_height: float = 4.5 * mm
    card_padding: float = 3 * mm
    inter_card_gap: float = 5 * mm
    text_offset: float = 3 * mm      # separación imagen -> texto
    field_spacing: float = 1.5 * mm  # entre dos campos de texto no vacíos
    title_height: float = 15 * mm    # sólo en la primera página

    def __post_init__(self):
        if self.cards_per_row < 1:
            raise ValueError("cards_per_row debe ser >= 1")
        if self.text_max_width <= 0:
            raise ValueError(
                f"No queda espacio para texto en la tarjeta (ancho {self.card_width:.1f} pt)"
            )

    @property
    def card_width(self) -> float:
        n = self.cards_per_row
        return (self.page_width - 2 * self.margin - self.inter_card_gap * (n - 1)) / n

    @property
    def text_max_width(self) -> float:
        return self.card_width - self.image_size - self.card_padding * 2 - self.text_offset

    @property
    def bottom_limit(self) -> float:
        return self.page_height - self.margin

    @classmethod
    def for_format(cls, formato: str = "A4", cards_per_row: int = 2, **overrides) -> "PageGeometry":
        try:
            w, h = PAGE_SIZES[(formato or "A4").strip().upper()]
        except KeyError:
            raise ValueError(f"Formato de página desconocido: {formato}") from None
        if "image_size" not in overrides:
            # Con muchas columnas la imagen se achica para dejar lugar al texto
            margin = overrides.get("margin", cls.margin)
            gap = overrides.get("inter_card_gap", cls.inter_card_gap)
            card_w = (w - 2 * margin - gap * (cards_per_row - 1)) / cards_per_row
            overrides["image_size"] = min(35 * mm, card_w * 0.4)
        return cls(page_width=w, page_height=h, cards_per_row=cards_per_row, **overrides)


@dataclass(frozen=True)
class CardField:
    name: str
    style: str
    lines: tuple[str, ...]


@dataclass(frozen=True)
class PagePlacement:
    page_index: int
    x: float
    y: float
    width: float
    height: float          # alto de la FILA (todas las tarjetas de la fila igual)
    entry: CatalogEntry
    row: int = 0
    column: int = 0
    card_height: float = 0.0
    fields: tuple[CardField, ...] = ()


def ordenar_para_exportar(entries: Iterable[CatalogEntry]) -> list[CatalogEntry]:
    """Copia ordenada por código (estable: empates conservan el orden de carga)."""
    return sorted(entries, key=lambda e: e.sort_key)


def _field_text(entry: CatalogEntry, name: str, label: str) -> str:
    val = (getattr(entry, name) or "").strip()
    return f"{label}{val}" if val else ""


def medir_tarjeta(entry: CatalogEntry, geometry: PageGeometry, measurer: TextMeasurer) -> tuple[float, tuple[CardField, ...]]:
    """Alto de la tarjeta + líneas ya envueltas de cada campo no vacío."""
    g = geometry
    fields: list[CardField] = []
    for name, style, label in CARD_FIELDS:
        text = _field_text(entry, name, label)
        if not text:
            continue
        lines = tuple(measurer.wrap(text, g.text_max_width, style))
        if lines:
            fields.append(CardField(name, style, lines))

    n_lines = sum(len(f.lines) for f in fields)
    content_h = n_lines * g.line_height + g.field_spacing * max(0, len(fields) - 1)
    card_h = max(g.image_size + 2 * g.card_padding, content_h + 2 * g.card_padding)
    return card_h, tuple(fields)


def calcular_layout(entries: Sequence[CatalogEntry], geometry: PageGeometry, measurer: TextMeasurer) -> list[PagePlacement]:
    g = geometry
    entries = list(entries)
    n = g.cards_per_row
    placements: list[PagePlacement] = []

    page = 0
    y = g.margin + g.title_height
    rows_on_page = 0

    for start in range(0, len(entries), n):
        row_idx = start // n
        row_entries = entries[start:start + n]
        # Medir TODA la fila antes de ubicarla: el salto se decide con su alto final
        measured = [medir_tarjeta(e, g, measurer) for e in row_entries]
        row_h = max(card_h for card_h, _ in measured)

        if rows_on_page:
            salta = y + row_h + g.inter_card_gap > g.bottom_limit
        else:
            # Página vacía: sólo la primera (con título) puede tener menos lugar que una nueva
            salta = y + row_h > g.bottom_limit and y > g.margin and g.margin + row_h <= g.bottom_limit
        if salta:
            page += 1
            y = g.margin
            rows_on_page = 0
        if y + row_h > g.bottom_limit:
            log.warning(
                "La fila %d (%.1f pt) no entra en una página; se ubica igual en la página %d",
                row_idx, row_h, page + 1,
            )

        for col, (entry, (card_h, fields)) in enumerate(zip(row_entries, measured)):
            placements.append(PagePlacement(
                page_index=page,
                x=g.margin + col * (g.card_width + g.inter_card_gap),
                y=y,
                width=g.card_width,
                height=row_h,
                entry=entry,
                row=row_idx,
                column=col,
                card_height=card_h,
                fields=fields,
            ))

        y += row_h + g.inter_card_gap
        rows_on_page += 1

    log.debug("Layout: %d tarjetas en %d páginas", len(placements), contar_paginas(placements))
    return placements


def contar_paginas(placements: Sequence[PagePlacement]) -> int:
    if not placements:
        return 0
    return max(p.page_index for p in placements) + 1

import os, datetime
from concurrent.futures import Future
from typing import Protocol, Sequence

from reportlab.pdfgen import canvas
from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics

from .config import FORMATO_PAGINA, TARJETAS_POR_FILA, TITULO
from .errors import EmptyCatalogError, ImageError
from .images import ImageDecoder
from .layout import PageGeometry, PagePlacement, calcular_layout, ordenar_para_exportar
from .paths import catalogos_dir, nombre_con_timestamp
from .logging_setup import get_logger

log = get_logger(__name__)

# =====================================================
# ESTILOS (fuente, tamaño, color)
# =====================================================
STYLES = {
    "title":  ("Helvetica-Bold", 16, colors.HexColor("#1f2937")),
    "header": ("Helvetica", 8, colors.HexColor("#6b7280")),
    "code":   ("Helvetica-Bold", 10, colors.HexColor("#1f2937")),
    "body":   ("Helvetica", 9, colors.black),
    "meta":   ("Helvetica", 8, colors.HexColor("#4b5563")),
}

CARD_FILL   = colors.HexColor("#f8fafc")
CARD_STROKE = colors.HexColor("#cbd5e1")
CARD_RADIUS = 2.5 * mm


# ---------- helpers de wrapping ----------
def _wrap_words(text: str, max_width: float, font_name: str, font_size: float) -> list[str]:
    """Word wrap clásico; una palabra que no entra sola se corta por caracteres."""
    words = str(text).split()
    lines, current = [], ""
    for w in words:
        test = (current + " " + w).strip()
        if pdfmetrics.stringWidth(test, font_name, font_size) <= max_width:
            current = test
            continue
        if current:
            lines.append(current)
            current = ""
        if pdfmetrics.stringWidth(w, font_name, font_size) <= max_width:
            current = w
        else:
            pieces = _wrap_long_word(w, max_width, font_name, font_size)
            lines.extend(pieces[:-1])
            current = pieces[-1]
    if current:
        lines.append(current)
    return lines


def _wrap_long_word(word: str, max_width: float, font_name: str, font_size: float) -> list[str]:
    """
    Rompe una palabra por caracteres para que NUNCA invada la columna vecina.
    Si hay corte, agrega '-' al final de la línea (menos en la última).
    """
    s = word
    out = []
    while s:
        # buscar el prefijo más largo que entra (dejando lugar al guion)
        last_fit = 0
        for i in range(1, len(s) + 1):
            if pdfmetrics.stringWidth(s[:i] + "-", font_name, font_size) <= max_width:
                last_fit = i
            else:
                break
        if last_fit == 0:  # si ni un solo char entra, forzar 1
            last_fit = 1
        if last_fit < len(s):
            out.append(s[:last_fit] + "-")
            s = s[last_fit:]
        else:
            out.append(s)
            s = ""
    return out


# =====================================================
# API de dibujo
# =====================================================
class DocumentSurface(Protocol):
    """Lo que el renderer necesita del motor de PDF (coordenadas desde ARRIBA)."""

    def wrap(self, text: str, max_width: float, style: str = "body") -> list[str]: ...
    def new_page(self) -> None: ...
    def draw_page_header(self, text: str, page_number: int, geometry: PageGeometry) -> None: ...
    def draw_title(self, title: str, subtitle: str, geometry: PageGeometry) -> None: ...
    def draw_card(self, x: float, y: float, w: float, h: float) -> None: ...
    def draw_image(self, image, x: float, y: float, size: float) -> None: ...
    def draw_placeholder(self, x: float, y: float, size: float) -> None: ...
    def draw_lines(self, lines: Sequence[str], x: float, y: float, style: str, line_height: float) -> None: ...


class ReportlabSurface:
    """DocumentSurface sobre un canvas de reportlab (origen abajo-izquierda)."""

    def __init__(self, out_path: str, page_size: tuple[float, float], title: str = ""):
        self.W, self.H = page_size
        self.c = canvas.Canvas(out_path, pagesize=page_size)
        if title:
            self.c.setTitle(title)

    def _y(self, top: float) -> float:
        return self.H - top

    def wrap(self, text: str, max_width: float, style: str = "body") -> list[str]:
        font_name, font_size, _ = STYLES.get(style, STYLES["body"])
        lines: list[str] = []
        for paragraph in str(text).splitlines():
            lines.extend(_wrap_words(paragraph, max_width, font_name, font_size))
        return lines

    def new_page(self) -> None:
        self.c.showPage()

    def draw_page_header(self, text: str, page_number: int, geometry: PageGeometry) -> None:
        font_name, font_size, color = STYLES["header"]
        y = self._y(geometry.margin * 0.6)
        self.c.setFont(font_name, font_size)
        self.c.setFillColor(color)
        self.c.drawString(geometry.margin, y, text)
        self.c.drawRightString(self.W - geometry.margin, y, f"Página {page_number}")

    def draw_title(self, title: str, subtitle: str, geometry: PageGeometry) -> None:
        font_name, font_size, color = STYLES["title"]
        top = geometry.margin
        self.c.setFont(font_name, font_size)
        self.c.setFillColor(color)
        self.c.drawString(geometry.margin, self._y(top + font_size), title)
        if subtitle:
            h_font, h_size, h_color = STYLES["header"]
            self.c.setFont(h_font, h_size)
            self.c.setFillColor(h_color)
            self.c.drawString(geometry.margin, self._y(top + font_size + h_size + 4), subtitle)

    def draw_card(self, x: float, y: float, w: float, h: float) -> None:
        self.c.setLineWidth(0.6)
        self.c.setStrokeColor(CARD_STROKE)
        self.c.setFillColor(CARD_FILL)
        self.c.roundRect(x, self._y(y + h), w, h, CARD_RADIUS, stroke=1, fill=1)

    def draw_image(self, image, x: float, y: float, size: float) -> None:
        self.c.drawImage(
            image, x, self._y(y + size),
            width=size, height=size,
            preserveAspectRatio=True, anchor="c",
            mask="auto",
        )

    def draw_placeholder(self, x: float, y: float, size: float) -> None:
        self.c.setLineWidth(0.5)
        self.c.setStrokeColor(CARD_STROKE)
        self.c.setFillColor(colors.white)
        self.c.rect(x, self._y(y + size), size, size, stroke=1, fill=1)
        font_name, font_size, color = STYLES["meta"]
        self.c.setFont(font_name, font_size)
        self.c.setFillColor(color)
        self.c.drawCentredString(x + size / 2, self._y(y + size / 2), "Sin imagen")

    def draw_lines(self, lines: Sequence[str], x: float, y: float, style: str, line_height: float) -> None:
        font_name, font_size, color = STYLES.get(style, STYLES["body"])
        self.c.setFont(font_name, font_size)
        self.c.setFillColor(color)
        for i, line in enumerate(lines):
            # baseline dentro de la línea: ~3/4 del interlineado
            self.c.drawString(x, self._y(y + i * line_height + line_height * 0.75), line)

    def save(self) -> None:
        self.c.save()


# =====================================================
# Renderer
# =====================================================
class DocumentRenderer:
    def __init__(self, surface: DocumentSurface, geometry: PageGeometry, decoder: ImageDecoder, title: str = TITULO, fecha: datetime.datetime | None = None):
        self.surface = surface
        self.geometry = geometry
        self.decoder = decoder
        self.title = title
        self.fecha = fecha or datetime.datetime.now()
        self._page = -1

    def _open_page(self, index: int) -> None:
        if self._page >= 0:
            self.surface.new_page()
        self._page = index
        self.surface.draw_page_header(self.title, index + 1, self.geometry)
        if index == 0:
            subtitle = f"Generado el {self.fecha.strftime('%d/%m/%Y %H:%M')}"
            self.surface.draw_title(self.title, subtitle, self.geometry)

    def _draw_card(self, p: PagePlacement, image_future: Future) -> None:
        g = self.geometry
        s = self.surface
        s.draw_card(p.x, p.y, p.width, p.height)

        img_x = p.x + g.card_padding
        img_y = p.y + g.card_padding
        # No se dibuja la imagen hasta que terminó de decodificarse
        try:
            image = image_future.result()
        except ImageError as e:
            log.warning("Imagen de '%s' no disponible: %s", p.entry.code or p.entry.description, e)
            s.draw_placeholder(img_x, img_y, g.image_size)
        else:
            s.draw_image(image, img_x, img_y, g.image_size)

        text_x = img_x + g.image_size + g.text_offset
        cursor = p.y + g.card_padding
        for field in p.fields:
            s.draw_lines(field.lines, text_x, cursor, field.style, g.line_height)
            cursor += len(field.lines) * g.line_height + g.field_spacing

    def render(self, placements: Sequence[PagePlacement]) -> int:
        """Dibuja todas las tarjetas en orden; devuelve la cantidad de páginas."""
        # Decodificación en paralelo al dibujo; se espera cada una en orden
        futures = [self.decoder.submit(p.entry.image) for p in placements]
        self._open_page(0)
        for p, fut in zip(placements, futures):
            while self._page < p.page_index:
                self._open_page(self._page + 1)
            self._draw_card(p, fut)
        return self._page + 1


# =====================================================
# Generación de PDF
# =====================================================
def generar_pdf(entries, output_path: str | None = None, geometry: PageGeometry | None = None, titulo: str | None = None) -> str:
    entries = list(entries)
    if not entries:
        raise EmptyCatalogError()

    titulo = titulo or TITULO
    geometry = geometry or PageGeometry.for_format(FORMATO_PAGINA, TARJETAS_POR_FILA)
    out_path = output_path or os.path.join(catalogos_dir(), nombre_con_timestamp("catalogo", "pdf"))
    out_dir = os.path.dirname(os.path.abspath(out_path))
    os.makedirs(out_dir, exist_ok=True)

    # Se ordena una COPIA; el orden del catálogo en pantalla no cambia
    ordered = ordenar_para_exportar(entries)

    surface = ReportlabSurface(out_path, (geometry.page_width, geometry.page_height), titulo)
    placements = calcular_layout(ordered, geometry, surface)
    with ImageDecoder() as decoder:
        pages = DocumentRenderer(surface, geometry, decoder, titulo).render(placements)
    surface.save()

    log.info("PDF generado: %s (%d productos, %d páginas)", out_path, len(entries), pages)
    return out_path

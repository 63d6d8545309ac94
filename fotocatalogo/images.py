# fotocatalogo/images.py
from __future__ import annotations

import base64
import binascii
import re
from concurrent.futures import Future, ThreadPoolExecutor
from io import BytesIO

from PIL import Image, UnidentifiedImageError
from reportlab.lib.utils import ImageReader

from .errors import ImageError
from .logging_setup import get_logger

log = get_logger(__name__)

_DATA_URL_RE = re.compile(r"^data:(image/[\w.+-]+);base64,(.*)$", re.S)


def capturar_imagen(path: str) -> str:
    """
    Lee una foto desde archivo y la devuelve como data URL PNG,
    igual que el canvas de captura (toDataURL("image/png")).
    """
    try:
        with Image.open(path) as img:
            img.load()
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
            buf = BytesIO()
            img.save(buf, format="PNG")
    except (OSError, UnidentifiedImageError) as e:
        raise ImageError(f"No se pudo leer la imagen '{path}': {e}") from e
    data = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{data}"


def decodificar_data_url(data_url: str) -> bytes:
    """Bytes de la imagen; acepta data URL o base64 suelto."""
    s = (data_url or "").strip()
    m = _DATA_URL_RE.match(s)
    payload = m.group(2) if m else s
    try:
        raw = base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ImageError(f"Imagen con base64 inválido: {e}") from e
    if not raw:
        raise ImageError("Imagen vacía.")
    return raw


def _decode(data_url: str) -> ImageReader:
    raw = decodificar_data_url(data_url)
    try:
        with Image.open(BytesIO(raw)) as img:
            img.verify()
    except (OSError, SyntaxError, ValueError) as e:  # PIL: SyntaxError en PNG truncados
        raise ImageError(f"La imagen no se pudo decodificar: {e}") from e
    return ImageReader(BytesIO(raw))


class ImageDecoder:
    """
    Decodifica imágenes fuera del hilo de dibujo.
    submit() devuelve un Future; quien dibuja espera su result() antes de usarla.
    """

    def __init__(self, max_workers: int = 1):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="img")

    def submit(self, data_url: str) -> Future:
        return self._executor.submit(_decode, data_url)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "ImageDecoder":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

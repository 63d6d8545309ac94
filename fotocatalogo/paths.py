# fotocatalogo/paths.py
import os, datetime

from .config import OUTPUT_DIR, _documents_dir

BASE_APP_TITLE = "Fotocatálogo"


def user_docs_root() -> str:
    root = os.path.join(_documents_dir(), "Catalogos")
    os.makedirs(root, exist_ok=True)
    return root


def user_docs_dir(subfolder: str) -> str:
    d = os.path.join(user_docs_root(), subfolder)
    os.makedirs(d, exist_ok=True)
    return d


def catalogos_dir() -> str:
    """Carpeta escribible donde se dejan los PDF generados."""
    if OUTPUT_DIR:
        os.makedirs(OUTPUT_DIR, exist_ok=True)
        return OUTPUT_DIR
    return user_docs_dir("catalogos")


def nombre_con_timestamp(prefijo: str, ext: str, now: datetime.datetime | None = None) -> str:
    stamp = (now or datetime.datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{prefijo}_{stamp}.{ext.lstrip('.')}"

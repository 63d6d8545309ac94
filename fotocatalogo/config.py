# fotocatalogo/config.py
from __future__ import annotations
import os, sys, json
from typing import Dict, Any, Tuple, List

# --------------------------
# Utilidades de rutas
# --------------------------
def _documents_dir() -> str:
    if os.name == "nt":
        try:
            from ctypes import windll, create_unicode_buffer
            CSIDL_PERSONAL = 5
            SHGFP_TYPE_CURRENT = 0
            buf = create_unicode_buffer(260)
            if windll.shell32.SHGetFolderPathW(None, CSIDL_PERSONAL, None, SHGFP_TYPE_CURRENT, buf) == 0:
                return buf.value
        except Exception:
            pass
    return os.path.join(os.path.expanduser("~"), "Documents")


def _ensure_dir(p: str) -> str:
    try:
        os.makedirs(p, exist_ok=True)
    except OSError:
        pass
    return p


# --------------------------
# Detección de carpeta y archivo de configuración
# --------------------------
_THIS_DIR = os.path.dirname(os.path.abspath(__file__))


def _candidate_config_dirs() -> List[str]:
    dirs: List[str] = []
    # 1) Ejecutable congelado (PyInstaller): carpeta junto al .exe
    if getattr(sys, "frozen", False):
        dirs.append(os.path.join(os.path.dirname(sys.executable), "config"))

    # 2) Carpeta "config" relativa al cwd
    dirs.append(os.path.join(os.getcwd(), "config"))

    # 3) Carpeta "config" relativa a este módulo
    dirs.append(os.path.join(_THIS_DIR, "config"))

    out: List[str] = []
    seen: set[str] = set()
    for d in dirs:
        if d not in seen:
            seen.add(d)
            out.append(d)
    return out


def _pick_config_path() -> Tuple[str, str | None]:
    for d in _candidate_config_dirs():
        for fname in ("config.json", "fotocatalogo.json"):
            p = os.path.join(d, fname)
            if os.path.exists(p):
                return d, p
    # Sin archivo: se usan los valores por defecto
    return _candidate_config_dirs()[0], None


CONFIG_DIR, CONFIG_PATH = _pick_config_path()

# --------------------------
# Defaults
# --------------------------
PAGE_FORMATS = ("A4", "OFICIO")

DEFAULT_CONFIG: Dict[str, Any] = {
    # True  => variante con código obligatorio/único y búsqueda en CSV de referencias
    # False => variante mínima (imagen + descripción), se permiten repetidos
    "usar_codigos": True,
    "formato_pagina": "A4",        # "A4" | "OFICIO"
    "tarjetas_por_fila": 2,
    "titulo": "Catálogo de Productos",

    # opcionales:
    # "output_dir": "C:/Users/<usuario>/Documents/Catalogos/catalogos"
    # "log_dir": "C:/Users/<usuario>/Documents/Catalogos/logs"
    # "log_level": "INFO"  # ERROR, WARNING, INFO, DEBUG
}


def _load_json(path: str | None) -> Dict[str, Any]:
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, ValueError):
        return {}


def load_app_config(path: str | None = None) -> Dict[str, Any]:
    cfg = DEFAULT_CONFIG.copy()
    raw = _load_json(path if path is not None else CONFIG_PATH)
    if raw:
        if "usar_codigos" in raw:
            cfg["usar_codigos"] = bool(raw["usar_codigos"])

        fmt = str(raw.get("formato_pagina", cfg["formato_pagina"])).strip().upper()
        if fmt in PAGE_FORMATS:
            cfg["formato_pagina"] = fmt

        try:
            n = int(raw.get("tarjetas_por_fila", cfg["tarjetas_por_fila"]))
            if 1 <= n <= 4:
                cfg["tarjetas_por_fila"] = n
        except (TypeError, ValueError):
            pass

        if "titulo" in raw and str(raw["titulo"]).strip():
            cfg["titulo"] = str(raw["titulo"]).strip()

        for key in ("output_dir", "log_dir"):
            if key in raw and str(raw[key]).strip():
                cfg[key] = str(raw[key]).strip()
        if "log_level" in raw and str(raw["log_level"]).strip():
            cfg["log_level"] = str(raw["log_level"]).strip().upper()
    return cfg


APP_CONFIG = load_app_config()

# --------------------------
# Parámetros principales
# --------------------------
USAR_CODIGOS: bool     = APP_CONFIG["usar_codigos"]
FORMATO_PAGINA: str    = APP_CONFIG["formato_pagina"]
TARJETAS_POR_FILA: int = APP_CONFIG["tarjetas_por_fila"]
TITULO: str            = APP_CONFIG["titulo"]

# --------------------------
# Logging (rutas y nivel). Las variables de entorno pisan el archivo.
# --------------------------
def _default_log_dir() -> str:
    return os.path.join(_documents_dir(), "Catalogos", "logs")


def _resolve_dir(raw: str) -> str:
    return os.path.abspath(os.path.expanduser(os.path.expandvars(raw)))


_raw_log_dir = (os.environ.get("LOG_DIR") or APP_CONFIG.get("log_dir") or "").strip()
LOG_DIR: str = _resolve_dir(_raw_log_dir) if _raw_log_dir else _default_log_dir()

LOG_LEVEL: str = str(os.environ.get("LOG_LEVEL") or APP_CONFIG.get("log_level", "INFO")).strip().upper()
if LOG_LEVEL not in ("ERROR", "WARNING", "INFO", "DEBUG"):
    LOG_LEVEL = "INFO"

_raw_output_dir = str(APP_CONFIG.get("output_dir", "") or "").strip()
OUTPUT_DIR: str | None = _resolve_dir(_raw_output_dir) if _raw_output_dir else None


__all__ = [
    "CONFIG_DIR", "CONFIG_PATH", "PAGE_FORMATS",
    "DEFAULT_CONFIG", "APP_CONFIG", "load_app_config",
    "USAR_CODIGOS", "FORMATO_PAGINA", "TARJETAS_POR_FILA", "TITULO",
    "LOG_DIR", "LOG_LEVEL", "OUTPUT_DIR",
]

from __future__ import annotations

import argparse
import os
import sys

from .acciones import agregar_producto, importar_json, exportar_pdf
from .catalog_store import CatalogStore
from .config import USAR_CODIGOS, FORMATO_PAGINA, TARJETAS_POR_FILA, PAGE_FORMATS
from .dataio import guardar_catalogo, guardar_plantilla_csv, cargar_referencias
from .errors import CatalogoError
from .images import capturar_imagen
from .layout import PageGeometry
from .logging_setup import get_logger

log = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fotocatalogo",
        description="Catálogo de productos con fotos: alta, JSON y PDF paginado",
    )
    parser.add_argument(
        "--sin-codigos",
        action="store_true",
        help="Variante mínima: sin código obligatorio ni control de duplicados.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("plantilla", help="Guardar la plantilla CSV de referencias")
    p.add_argument("-o", "--output", default="plantilla_referencias.csv")

    p = sub.add_parser("agregar", help="Agregar un producto al catálogo JSON")
    p.add_argument("catalogo", help="Archivo JSON del catálogo (se crea si no existe)")
    p.add_argument("--imagen", required=True, help="Foto del producto")
    p.add_argument("--codigo", default="")
    p.add_argument("--descripcion", default="")
    p.add_argument("--grupo", default="")
    p.add_argument("--subgrupo", default="")
    p.add_argument("--referencias", default=None, help="CSV con codigo,descripcion,grupo,subgrupo")

    p = sub.add_parser("quitar", help="Quitar un producto por posición (desde 0)")
    p.add_argument("catalogo")
    p.add_argument("indice", type=int)

    p = sub.add_parser("listar", help="Listar los productos del catálogo")
    p.add_argument("catalogo")

    p = sub.add_parser("buscar", help="Buscar códigos en el CSV de referencias")
    p.add_argument("referencias")
    p.add_argument("texto")

    p = sub.add_parser("pdf", help="Generar el PDF del catálogo")
    p.add_argument("catalogo")
    p.add_argument("-o", "--output", default=None)
    p.add_argument("--formato", choices=PAGE_FORMATS, default=FORMATO_PAGINA)
    p.add_argument("--columnas", type=int, default=TARJETAS_POR_FILA)
    p.add_argument("--titulo", default=None)

    return parser


def _abrir_sesion(path: str, usar_codigos: bool) -> CatalogStore:
    store = CatalogStore(require_codes=usar_codigos)
    store.init()
    if os.path.exists(path):
        importar_json(store, path)
    return store


def _run(args) -> None:
    usar_codigos = USAR_CODIGOS and not args.sin_codigos

    if args.command == "plantilla":
        guardar_plantilla_csv(args.output)
        print(f"✔ Plantilla guardada en {args.output}")

    elif args.command == "agregar":
        store = _abrir_sesion(args.catalogo, usar_codigos)
        referencias = cargar_referencias(args.referencias) if args.referencias else None
        entry = agregar_producto(
            store,
            capturar_imagen(args.imagen),
            code=args.codigo,
            description=args.descripcion,
            referencias=referencias,
            group=args.grupo,
            subgroup=args.subgrupo,
            usar_codigos=usar_codigos,
        )
        guardar_catalogo(args.catalogo, store.snapshot())
        print(f"✔ Agregado {entry.code or ''} {entry.description} ({len(store)} en catálogo)")

    elif args.command == "quitar":
        store = _abrir_sesion(args.catalogo, usar_codigos)
        removed = store.remove_at(args.indice)
        # el archivo de sesión se guarda aunque quede vacío
        guardar_catalogo(args.catalogo, store.snapshot())
        print(f"✔ Quitado {removed.code or ''} {removed.description}")

    elif args.command == "listar":
        store = _abrir_sesion(args.catalogo, usar_codigos)
        for i, e in enumerate(store.snapshot()):
            extra = " / ".join(x for x in (e.group, e.subgroup) if x)
            print(f"{i:>3}  {e.code or '-':<12} {e.description}" + (f"  [{extra}]" if extra else ""))

    elif args.command == "buscar":
        table = cargar_referencias(args.referencias)
        for rec in table.buscar(args.texto):
            print(f"{rec.code:<12} {rec.description}  [{rec.group} / {rec.subgroup}]")

    elif args.command == "pdf":
        store = _abrir_sesion(args.catalogo, usar_codigos)
        geometry = PageGeometry.for_format(args.formato, args.columnas)
        out = exportar_pdf(store, args.output, geometry=geometry, titulo=args.titulo)
        print(f"✔ PDF generado: {out}")


def run_app(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        _run(args)
    except CatalogoError as e:
        log.warning("%s: %s", type(e).__name__, e.mensaje)
        print(f"❌ {e.mensaje}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        log.exception("Error en el comando %s", args.command)
        print(f"❌ {e}", file=sys.stderr)
        return 1
    return 0


def main() -> None:
    sys.exit(run_app())


if __name__ == "__main__":
    main()

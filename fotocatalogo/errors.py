# fotocatalogo/errors.py
"""
Errores del catálogo.

Todos son recuperables: la operación se aborta sin modificar el estado y el
mensaje (en `mensaje`) se muestra tal cual al usuario.
"""


class CatalogoError(Exception):
    """Base de los errores de la aplicación."""
    mensaje = "Ocurrió un error."

    def __init__(self, mensaje: str | None = None):
        self.mensaje = mensaje or self.mensaje
        super().__init__(self.mensaje)


class SchemaError(CatalogoError):
    """El CSV de referencias no trae las columnas requeridas."""
    mensaje = "El archivo CSV no tiene las columnas requeridas."


class EmptyInput(SchemaError):
    """El CSV de referencias está vacío."""
    mensaje = "El archivo CSV está vacío."


class DuplicateCodeError(CatalogoError):
    mensaje = "Ya existe un producto con ese código en el catálogo."

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"El código '{code}' ya fue agregado al catálogo.")


class IndexOutOfRange(CatalogoError, IndexError):
    mensaje = "El producto seleccionado ya no existe en el catálogo."


class InvalidCatalogFormat(CatalogoError):
    mensaje = "El archivo JSON no tiene el formato de catálogo correcto."


class MalformedDocument(CatalogoError):
    mensaje = "Error al leer el archivo. Asegúrate de que es un JSON válido."


class MissingInput(CatalogoError):
    mensaje = "Por favor, agrega la imagen, el código y la descripción antes de agregar el producto."


class EmptyCatalogError(CatalogoError):
    mensaje = "No hay productos para exportar. Por favor, agrega algunos primero."


class ImageError(CatalogoError):
    mensaje = "No se pudo leer la imagen."

import base64, io, os, shutil, tempfile
import pytest

# Antes de importar el paquete (la colección importa los tests): logs a un temporal
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="fotocatalogo-logs-"))
os.environ.setdefault("LOG_LEVEL", "DEBUG")


@pytest.fixture(autouse=True, scope="session")
def _init_logging_for_tests(tmp_path_factory):
    # Cada corrida de tests escribe logs a un directorio temporal
    log_dir = tmp_path_factory.mktemp("logs")
    os.environ["LOG_DIR"] = str(log_dir)
    os.environ["LOG_LEVEL"] = "DEBUG"

    from fotocatalogo.logging_setup import init_logging
    init_logging(level="DEBUG", log_dir=str(log_dir))

    yield
    shutil.rmtree(log_dir, ignore_errors=True)


class FakeMeasurer:
    """Envuelve cada `chars_per_line` caracteres; registra los anchos pedidos."""

    def __init__(self, chars_per_line: int = 20):
        self.chars_per_line = chars_per_line
        self.widths = []

    def wrap(self, text, max_width, style="body"):
        self.widths.append(max_width)
        n = self.chars_per_line
        return [text[i:i + n] for i in range(0, len(text), n)]


@pytest.fixture
def measurer():
    return FakeMeasurer()


@pytest.fixture
def png_data_url():
    from PIL import Image
    buf = io.BytesIO()
    Image.new("RGB", (8, 6), "red").save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


@pytest.fixture
def photo_file(tmp_path):
    from PIL import Image
    path = tmp_path / "foto.jpg"
    Image.new("RGB", (40, 30), "blue").save(path, format="JPEG")
    return str(path)


@pytest.fixture
def make_entry(png_data_url):
    from fotocatalogo.models import CatalogEntry

    def _make(code=None, description="Producto", group=None, subgroup=None, image=None):
        return CatalogEntry(
            image=image or png_data_url,
            description=description,
            code=code,
            group=group,
            subgroup=subgroup,
        )
    return _make

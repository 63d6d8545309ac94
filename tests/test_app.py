import json
import pytest

import fotocatalogo.app as app


@pytest.fixture(autouse=True)
def _con_codigos(monkeypatch):
    monkeypatch.setattr(app, "USAR_CODIGOS", True)


@pytest.fixture
def refs_csv(tmp_path):
    path = tmp_path / "refs.csv"
    path.write_text(
        "codigo;descripcion;grupo;subgrupo\n"
        "A1;Tornillo;Ferretería;Tornillos\n"
        "A2;Arandela;Ferretería;\n"
        "B1;Tuerca;Ferretería;Tuercas\n",
        encoding="utf-8",
    )
    return str(path)


def test_plantilla(tmp_path):
    out = tmp_path / "plantilla.csv"
    assert app.run_app(["plantilla", "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8") == "codigo,descripcion,grupo,subgrupo\n"


def test_agregar_listar_quitar(tmp_path, photo_file, refs_csv, capsys):
    cat = tmp_path / "catalogo.json"
    assert app.run_app(["agregar", str(cat), "--imagen", photo_file, "--codigo", "A1", "--referencias", refs_csv]) == 0
    assert app.run_app(["agregar", str(cat), "--imagen", photo_file, "--codigo", "Z9", "--descripcion", "Libre"]) == 0

    data = json.loads(cat.read_text(encoding="utf-8"))
    assert [d["code"] for d in data] == ["A1", "Z9"]
    assert data[0]["description"] == "Tornillo"
    assert data[0]["subgroup"] == "Tornillos"
    assert data[0]["image"].startswith("data:image/png;base64,")
    assert "group" not in data[1]

    capsys.readouterr()
    assert app.run_app(["listar", str(cat)]) == 0
    out = capsys.readouterr().out
    assert "A1" in out and "Tornillo" in out and "Ferretería / Tornillos" in out
    assert "Libre" in out

    assert app.run_app(["quitar", str(cat), "0"]) == 0
    data = json.loads(cat.read_text(encoding="utf-8"))
    assert [d["code"] for d in data] == ["Z9"]


def test_agregar_duplicado_falla_sin_tocar_archivo(tmp_path, photo_file, capsys):
    cat = tmp_path / "catalogo.json"
    args = ["agregar", str(cat), "--imagen", photo_file, "--codigo", "A1", "--descripcion", "Uno"]
    assert app.run_app(args) == 0
    before = cat.read_text(encoding="utf-8")

    capsys.readouterr()
    assert app.run_app(args) == 1
    assert "A1" in capsys.readouterr().err
    assert cat.read_text(encoding="utf-8") == before


def test_sin_codigos_permite_repetidos(tmp_path, photo_file):
    cat = tmp_path / "catalogo.json"
    args = ["--sin-codigos", "agregar", str(cat), "--imagen", photo_file, "--descripcion", "Caja"]
    assert app.run_app(args) == 0
    assert app.run_app(args) == 0
    assert len(json.loads(cat.read_text(encoding="utf-8"))) == 2


def test_agregar_sin_codigo_falla(tmp_path, photo_file, capsys):
    cat = tmp_path / "catalogo.json"
    assert app.run_app(["agregar", str(cat), "--imagen", photo_file, "--descripcion", "Algo"]) == 1
    assert "código" in capsys.readouterr().err
    assert not cat.exists()


def test_quitar_indice_invalido(tmp_path, photo_file):
    cat = tmp_path / "catalogo.json"
    app.run_app(["agregar", str(cat), "--imagen", photo_file, "--codigo", "A1", "--descripcion", "Uno"])
    assert app.run_app(["quitar", str(cat), "5"]) == 1
    assert len(json.loads(cat.read_text(encoding="utf-8"))) == 1


def test_buscar(refs_csv, capsys):
    assert app.run_app(["buscar", refs_csv, "a"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert [line.split()[0] for line in lines] == ["A1", "A2", "B1"]


def test_pdf(tmp_path, photo_file):
    cat = tmp_path / "catalogo.json"
    for code in ("B2", "A1", "C3"):
        app.run_app(["agregar", str(cat), "--imagen", photo_file, "--codigo", code, "--descripcion", f"Producto {code}"])
    out = tmp_path / "out" / "catalogo.pdf"
    assert app.run_app(["pdf", str(cat), "-o", str(out), "--formato", "OFICIO", "--columnas", "3", "--titulo", "Prueba"]) == 0
    assert out.read_bytes().startswith(b"%PDF")


def test_pdf_catalogo_vacio(tmp_path, capsys):
    cat = tmp_path / "vacio.json"
    cat.write_text("[]", encoding="utf-8")
    assert app.run_app(["pdf", str(cat), "-o", str(tmp_path / "x.pdf")]) == 1
    assert "No hay productos" in capsys.readouterr().err


def test_json_invalido(tmp_path, capsys):
    cat = tmp_path / "roto.json"
    cat.write_text("{ roto", encoding="utf-8")
    assert app.run_app(["listar", str(cat)]) == 1
    assert "JSON" in capsys.readouterr().err


def test_quitar_el_ultimo_deja_catalogo_vacio(tmp_path, photo_file):
    cat = tmp_path / "catalogo.json"
    assert app.run_app(["agregar", str(cat), "--imagen", photo_file, "--codigo", "A1", "--descripcion", "Uno"]) == 0
    assert app.run_app(["quitar", str(cat), "0"]) == 0
    assert json.loads(cat.read_text(encoding="utf-8")) == []
    assert app.run_app(["listar", str(cat)]) == 0

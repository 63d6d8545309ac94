import pandas as pd
import pytest

import fotocatalogo.referencias as ref
from fotocatalogo.errors import SchemaError, EmptyInput


def test_detect_delimiter():
    assert ref.detect_delimiter("codigo;descripcion;grupo;subgrupo") == ";"
    assert ref.detect_delimiter("codigo,descripcion,grupo,subgrupo") == ","


@pytest.mark.parametrize("sep", [";", ","])
def test_parse_with_detected_delimiter(sep):
    text = sep.join(["codigo", "descripcion", "grupo", "subgrupo"]) + "\n" \
        + sep.join(["A1", "Tornillo 3/8, acero", "Ferretería", "Tornillos"]) + "\n"
    if sep == ",":
        text = text.replace("Tornillo 3/8, acero", '"Tornillo 3/8, acero"')
    recs = ref.parse_referencias(text)
    assert len(recs) == 1
    assert recs[0].code == "A1"
    assert recs[0].description == "Tornillo 3/8, acero"
    assert recs[0].subgroup == "Tornillos"


def test_mixed_case_headers_lookup():
    text = "Codigo,Descripcion,Grupo,Subgrupo\nA1,Widget,Hardware,Fasteners\n"
    table = ref.ReferenceTable.from_csv_text(text)
    rec = table.lookup("A1")
    assert rec is not None
    assert (rec.description, rec.group, rec.subgroup) == ("Widget", "Hardware", "Fasteners")


def test_headers_any_order_with_extra_columns_and_accents():
    text = " Subgrupo ;Precio; CÓDIGO ;Descripción;Grupo\nTornillos;12.5;B7;Perno;Ferretería\n"
    table = ref.ReferenceTable.from_csv_text(text)
    rec = table.lookup("B7")
    assert rec.description == "Perno"
    assert rec.group == "Ferretería"
    assert rec.subgroup == "Tornillos"


def test_missing_required_header_raises():
    with pytest.raises(SchemaError) as exc:
        ref.parse_referencias("codigo,descripcion,grupo\nA1,x,y\n")
    assert "subgrupo" in str(exc.value)


@pytest.mark.parametrize("text", ["", "   \n\n  \n", "\ufeff"])
def test_blank_input_raises_empty(text):
    with pytest.raises(EmptyInput):
        ref.parse_referencias(text)
    # EmptyInput también es un SchemaError
    assert issubclass(EmptyInput, SchemaError)


def test_header_only_gives_no_records():
    assert ref.parse_referencias("codigo,descripcion,grupo,subgrupo\n") == []


def test_duplicate_codes_last_wins():
    text = "codigo,descripcion,grupo,subgrupo\nA1,Viejo,G,S\nA2,Otro,G,S\nA1,Nuevo,G2,S2\n"
    recs = ref.parse_referencias(text)
    assert [r.code for r in recs] == ["A1", "A2"]
    table = ref.ReferenceTable(recs)
    assert table.lookup("A1").description == "Nuevo"
    assert table.lookup("A1").group == "G2"


def test_missing_trailing_fields_are_empty_and_surplus_dropped():
    text = "codigo;descripcion;grupo;subgrupo\nA1;Solo descripcion\nA2;D;G;S;sobra;mas\n"
    table = ref.ReferenceTable.from_csv_text(text)
    a1 = table.lookup("A1")
    assert (a1.description, a1.group, a1.subgroup) == ("Solo descripcion", "", "")
    a2 = table.lookup("A2")
    assert (a2.description, a2.group, a2.subgroup) == ("D", "G", "S")


def test_blank_lines_and_empty_codes_skipped():
    text = "\n\ncodigo,descripcion,grupo,subgrupo\n\nA1,X,G,S\n,Sin codigo,G,S\n\n"
    table = ref.ReferenceTable.from_csv_text(text)
    assert len(table) == 1
    assert "A1" in table


def test_lookup_unknown_or_blank():
    table = ref.ReferenceTable.from_csv_text("codigo,descripcion,grupo,subgrupo\nA1,X,G,S\n")
    assert table.lookup("ZZ") is None
    assert table.lookup("") is None
    assert table.lookup(" A1 ").code == "A1"


def test_buscar_prefers_code_prefix():
    text = (
        "codigo,descripcion,grupo,subgrupo\n"
        "TO-1,Tornillo,F,T\n"
        "X-9,Caja de tornillos,F,C\n"
        "TU-2,Tuerca,F,T\n"
    )
    table = ref.ReferenceTable.from_csv_text(text)
    assert [r.code for r in table.buscar("to")] == ["TO-1", "X-9"]
    assert [r.code for r in table.buscar("t", limite=2)] == ["TO-1", "TU-2"]
    assert table.buscar("   ") == []


def test_leer_referencias_excel(tmp_path):
    path = tmp_path / "refs.xlsx"
    pd.DataFrame({
        "Código": ["A1", "A2"],
        "Descripción": ["Widget", "Gadget"],
        "Grupo": ["Hardware", "Hardware"],
        "Subgrupo": ["Fasteners", ""],
    }).to_excel(path, index=False, engine="openpyxl")

    recs = ref.leer_referencias_excel(str(path))
    table = ref.ReferenceTable(recs)
    assert table.lookup("A1").subgroup == "Fasteners"
    assert table.lookup("A2").subgroup == ""

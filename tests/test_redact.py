from __future__ import annotations

from pyhabibbi._redact import is_secret_key, mask_value, redact_for_log


def test_redact_for_log_drops_secrets() -> None:
    payload = {
        "nombre": "Ana",
        "clave": "secreto",
        "newPassword": "pw",
        "access_token": "abc",
        "nested": {"Authorization": "Bearer x", "rol": "admin"},
    }

    redacted = redact_for_log(payload)
    assert redacted["nombre"] == "Ana"
    assert redacted["clave"] == "<redacted>"
    assert redacted["newPassword"] == "<redacted>"
    assert redacted["access_token"] == "<redacted>"
    assert redacted["nested"]["Authorization"] == "<redacted>"
    assert redacted["nested"]["rol"] == "admin"


def test_redact_for_log_masks_customer_personal_data() -> None:
    redacted = redact_for_log({"rut": "12.345.678-9", "correo": "ana@cafe.cl", "telefono": "", "id_cliente": 7})

    assert redacted["rut"] == "**********-9"
    assert redacted["correo"].endswith("cl")
    assert "ana" not in redacted["correo"]
    assert redacted["telefono"] == ""
    assert redacted["id_cliente"] == 7


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_walks_lists_and_summarizes_bytes() -> None:
    redacted = redact_for_log([{"clave": "a"}, b"\x00\x01", 3])
    assert redacted == [{"clave": "<redacted>"}, "<bytes:2b>", 3]


def test_helpers() -> None:
    assert is_secret_key("refresh-token")
    assert not is_secret_key("nombre")
    assert mask_value("ab") == "**"
    assert mask_value(123456) == "****56"

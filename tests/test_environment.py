from __future__ import annotations

from linkimport import environment


def test_defaults_when_unset(monkeypatch) -> None:
    for name in (
        "LINKIMPORT_CHUNK_SIZE",
        "LINKIMPORT_UPLOAD_MAX_BYTES",
        "LINKIMPORT_SERVICE_URL",
        "LINKIMPORT_SERVICE_TOKEN",
        "LINKIMPORT_SERVICE_TIMEOUT",
        "LINKIMPORT_SERVICE_INSECURE",
    ):
        monkeypatch.delenv(name, raising=False)

    assert environment.get_chunk_size() == 100
    assert environment.get_upload_max_bytes() == 5 * 1024 * 1024
    assert environment.get_service_url() is None
    assert environment.get_service_token() is None
    assert environment.get_service_timeout() == 30
    assert environment.is_service_insecure() is False


def test_invalid_numbers_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("LINKIMPORT_CHUNK_SIZE", "0")
    monkeypatch.setenv("LINKIMPORT_SERVICE_TIMEOUT", "soon")

    assert environment.get_chunk_size() == 100
    assert environment.get_service_timeout() == 30


def test_values_are_read_from_env(monkeypatch) -> None:
    monkeypatch.setenv("LINKIMPORT_CHUNK_SIZE", " 25 ")
    monkeypatch.setenv("LINKIMPORT_SERVICE_URL", " https://links.example.com ")
    monkeypatch.setenv("LINKIMPORT_SERVICE_INSECURE", "yes")

    assert environment.get_chunk_size() == 25
    assert environment.get_service_url() == "https://links.example.com"
    assert environment.is_service_insecure() is True


def test_insecure_flag_false_values(monkeypatch) -> None:
    monkeypatch.setenv("LINKIMPORT_SERVICE_INSECURE", "off")

    assert environment.is_service_insecure() is False

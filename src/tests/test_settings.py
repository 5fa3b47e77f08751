from multisend.core.settings import Settings, settings


def test_settings_is_singleton():
    assert Settings() is settings


def test_defaults():
    assert settings.lookup_timeout == 10.0
    assert settings.max_decode_depth == 8
    assert settings.default_safe_version == "1.3.0"


def test_signature_lookup_url(monkeypatch):
    monkeypatch.setattr(settings, "openchain_proxy_base_url", None)
    assert settings.signature_lookup_url == settings.openchain_lookup_url

    monkeypatch.setattr(settings, "openchain_proxy_base_url", "https://proxy.example")
    assert settings.signature_lookup_url == "https://proxy.example/api/openchain"

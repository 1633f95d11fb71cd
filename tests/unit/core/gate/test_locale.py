import pytest
from starlette.responses import Response

from src.core.gate.locale import (
    LocaleConfig,
    locale_from_accept_language,
    locale_from_cookie,
    locale_from_path,
    localize_path,
    resolve_locale,
    set_locale_cookie,
    strip_locale,
    strip_raw_locale,
)
from tests.utils.gate_helpers import make_request


@pytest.fixture
def config():
    return LocaleConfig(supported=("en", "id"), default="en")


@pytest.mark.parametrize("path, expected", [
    ("/id/listings", "id"),
    ("/en", "en"),
    ("/fr/listings", None),
    ("/identity", None),
    ("/", None),
    ("//id/listings", None),
])
def test_locale_from_path(config, path, expected):
    assert locale_from_path(path, config) == expected


@pytest.mark.parametrize("path, expected", [
    ("/id/listings/42", "/listings/42"),
    ("/id", "/"),
    ("/id/", "/"),
    ("/en//other.example/x", "/other.example/x"),
    ("//id/listings", "//id/listings"),
    ("/listings", "/listings"),
])
def test_strip_locale(config, path, expected):
    assert strip_locale(path, config) == expected


@pytest.mark.parametrize("raw_path, bare_path, expected", [
    (b"/id/caf%C3%A9/a%2Fb", "/caf\u00e9/a/b", b"/caf%C3%A9/a%2Fb"),
    (b"/id", "/", b"/"),
    (b"/id//x", "/x", b"/x"),
    (None, "/caf\u00e9", b"/caf%C3%A9"),
    (b"/%69d/caf%C3%A9", "/caf\u00e9", b"/caf%C3%A9"),
])
def test_strip_raw_locale_keeps_percent_encoding(raw_path, bare_path, expected):
    assert strip_raw_locale(raw_path, "id", bare_path) == expected


def test_localize_path_never_prefixes_default(config):
    assert localize_path("/listings", "en", config) == "/listings"
    assert localize_path("/listings", "id", config) == "/id/listings"
    assert localize_path("/", "id", config) == "/id"


class TestAcceptLanguage:
    @pytest.mark.parametrize("header, expected", [
        ("id,en;q=0.8", "id"),
        ("en-US,en;q=0.9,id;q=0.8", "en"),
        ("id-ID", "id"),
        ("fr-FR, de;q=0.5, id;q=0.1", "id"),
        ("fr, de", None),
        ("*", None),
        ("", None),
        (None, None),
    ])
    def test_first_supported_tag_is_selected(self, config, header, expected):
        assert locale_from_accept_language(header, config) == expected

    def test_quality_values_are_ignored(self, config):
        # Header order wins, mirroring how browsers list preferences.
        assert locale_from_accept_language("en;q=0.1, id;q=0.9", config) == "en"


class TestResolveLocale:
    def test_path_locale_is_authoritative(self, config):
        request = make_request("/en/listings", headers={"cookie": "locale=id", "accept-language": "id"})

        assert resolve_locale(request, config, path_locale="en") == "en"

    def test_cookie_before_header(self, config):
        request = make_request(headers={"cookie": "locale=id", "accept-language": "en"})

        assert resolve_locale(request, config) == "id"

    def test_unsupported_cookie_is_ignored(self, config):
        request = make_request(headers={"cookie": "locale=fr", "accept-language": "id"})

        assert locale_from_cookie(request, config) is None
        assert resolve_locale(request, config) == "id"

    def test_falls_back_to_default(self, config):
        assert resolve_locale(make_request(), config) == "en"


def test_set_locale_cookie(config):
    response = Response()

    set_locale_cookie(response, "id", config)

    cookie = response.headers["set-cookie"]
    assert cookie.startswith("locale=id")
    assert "samesite=lax" in cookie.lower()
    assert "Path=/" in cookie

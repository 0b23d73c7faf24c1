"""HTTP-level tests for the FastAPI application."""

from fastapi.testclient import TestClient

from shorturl.core.setting import CounterBackend
from shorturl.main import create_app
from shorturl.services.code_generator import ALPHABET, ALPHABET_LENGTH, generate
from shorturl.services.reachability import CheckResult


def _counter_value_for(code: str) -> int:
    """Counter value whose generated code is `code`."""
    value = 0
    for char in code:
        value = value * ALPHABET_LENGTH + ALPHABET.index(char)
    return value


class TestShortenEndpoint:
    """Test GET /new/<url>."""

    def test_creates_short_url(self, client):
        """Test that the first URL gets the first code."""
        response = client.get("/new/http://example.com")

        assert response.status_code == 200
        assert response.json() == {
            "original_url": "http://example.com",
            "short_url": "testserver/1",
        }

    def test_same_url_returns_same_short_url(self, client):
        """Test that resubmitting a URL returns its existing short URL."""
        first = client.get("/new/http://example.com").json()
        client.get("/new/https://example.org")
        again = client.get("/new/http://example.com")

        assert again.status_code == 200
        assert again.json() == first

    def test_second_url_gets_next_code(self, client):
        """Test that a new URL gets the next counter value."""
        client.get("/new/http://example.com")
        response = client.get("/new/https://example.org")

        assert response.json()["short_url"] == "testserver/2"

    def test_query_string_belongs_to_url(self, client):
        """Test that the request query string is kept as part of the URL."""
        response = client.get("/new/http://example.com/search?q=a&b=c")

        assert response.status_code == 200
        assert response.json()["original_url"] == "http://example.com/search?q=a&b=c"

    def test_percent_escapes_are_kept(self, client, checker):
        """Test that the URL is stored and redirected to exactly as submitted."""
        url = "http://example.com/a%20b/100%25?q=x%26y"

        response = client.get(f"/new/{url}")
        redirect = client.get("/1", follow_redirects=False)

        assert response.json()["original_url"] == url
        assert checker.calls == [url]
        assert redirect.headers["location"] == url

    def test_missing_scheme(self, client, checker):
        """Test that a URL without http:// or https:// is a server error."""
        response = client.get("/new/example.com")

        assert response.status_code == 500
        assert "http:// or https://" in response.json()["detail"]
        assert checker.calls == []

    def test_unreachable_url(self, client, checker):
        """Test that an unreachable URL is rejected and nothing is stored."""
        checker.result = CheckResult.UNREACHABLE

        response = client.get("/new/http://nowhere.invalid")

        assert response.status_code == 404
        assert client.get("/1", follow_redirects=False).status_code == 404

    def test_public_host_override(self, settings, checker):
        """Test that PUBLIC_HOST replaces the request host in short URLs."""
        settings.PUBLIC_HOST = "sho.rt"
        with TestClient(create_app(settings, checker=checker)) as client:
            response = client.get("/new/http://example.com")

        assert response.json()["short_url"] == "sho.rt/1"

    def test_corrupted_counter_is_server_error(self, settings, checker):
        """Test that a corrupted counter file fails the request and is left alone."""
        settings.COUNTER_BACKEND = CounterBackend.file
        settings.COUNTER_FILE.write_text("not a number")

        with TestClient(create_app(settings, checker=checker)) as client:
            response = client.get("/new/http://example.com")

        assert response.status_code == 500
        assert settings.COUNTER_FILE.read_text() == "not a number"

    def test_file_counter_backend(self, settings, checker):
        """Test that the file backend advances the counter file."""
        settings.COUNTER_BACKEND = CounterBackend.file

        with TestClient(create_app(settings, checker=checker)) as client:
            client.get("/new/http://example.com")
            response = client.get("/new/https://example.org")

        assert response.json()["short_url"] == "testserver/2"
        assert settings.COUNTER_FILE.read_text() == "2"


class TestRedirectEndpoint:
    """Test GET /<code>."""

    def test_redirects_to_original(self, client):
        """Test that a known code redirects with 302."""
        client.get("/new/http://example.com/landing")

        response = client.get("/1", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "http://example.com/landing"

    def test_code_with_percent_escape(self, settings, checker):
        """Test that a code that looks like a percent-escape is looked up verbatim."""
        value = _counter_value_for("%41")
        assert generate(value) == "%41"
        settings.COUNTER_BACKEND = CounterBackend.file
        settings.COUNTER_FILE.write_text(str(value))

        with TestClient(create_app(settings, checker=checker)) as client:
            created = client.get("/new/http://example.com/percent")
            response = client.get("/%41", follow_redirects=False)
            decoded = client.get("/A", follow_redirects=False)

        assert created.json()["short_url"] == "testserver/%41"
        assert response.status_code == 302
        assert response.headers["location"] == "http://example.com/percent"
        assert decoded.status_code == 404

    def test_unknown_code(self, client):
        """Test that an unknown code is a 404 naming the code."""
        response = client.get("/zz", follow_redirects=False)

        assert response.status_code == 404
        assert response.json()["detail"] == "No short_url found with id zz"

    def test_malformed_code(self, client):
        """Test that a code longer than any issued code is a 404."""
        code = "a" * 17

        response = client.get(f"/{code}", follow_redirects=False)

        assert response.status_code == 404
        assert response.json()["detail"] == f"No short_url found with id {code}"

    def test_request_timing_header(self, client):
        """Test that the logging middleware adds the processing time."""
        response = client.get("/zz", follow_redirects=False)

        assert "x-process-time" in response.headers


class TestDocumentation:
    """Test the static documentation served alongside the codes."""

    def test_root_without_docs(self, client):
        """Test the service description when no docs are installed."""
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["message"] == "URL Shortener Service"

    def test_docs_are_served(self, settings, checker):
        """Test that the index and other docs files are served."""
        settings.DOCS_DIR.mkdir()
        (settings.DOCS_DIR / "index.html").write_text("<h1>docs</h1>")
        (settings.DOCS_DIR / "api.css").write_text("h1 {}")

        with TestClient(create_app(settings, checker=checker)) as client:
            index = client.get("/")
            stylesheet = client.get("/api.css")

        assert index.status_code == 200
        assert index.text == "<h1>docs</h1>"
        assert stylesheet.text == "h1 {}"

    def test_docs_not_found_page_does_not_hide_codes(self, settings, checker):
        """Test that a 404.html in the docs does not replace redirects."""
        settings.DOCS_DIR.mkdir()
        (settings.DOCS_DIR / "404.html").write_text("<h1>lost</h1>")

        with TestClient(create_app(settings, checker=checker)) as client:
            client.get("/new/http://example.com")
            response = client.get("/1", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "http://example.com"

    def test_docs_cannot_escape_directory(self, settings, checker, tmp_path):
        """Test that a path outside the docs directory is not served."""
        settings.DOCS_DIR.mkdir()
        (tmp_path / "secret.txt").write_text("secret")

        with TestClient(create_app(settings, checker=checker)) as client:
            response = client.get("/..%2Fsecret.txt", follow_redirects=False)

        assert response.status_code == 404
        assert response.text != "secret"

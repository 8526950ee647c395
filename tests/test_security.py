import pytest

from sikap_storage.auth import authorize, sanitize_filename


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("photo.jpg", "photo.jpg"),
        ("../../etc/passwd", "passwd"),
        ("/var/www/uploads/a.webp", "a.webp"),
        ("..\\..\\boot.ini", "boot.ini"),
        ("dir/name/", "name"),
        ("dir/./", "dir"),
    ],
)
def test_sanitize_keeps_last_segment(raw, expected):
    assert sanitize_filename(raw) == expected


@pytest.mark.parametrize("raw", ["", "/", "///", "..", "../..", "a/..", ".", "bad\x00.png"])
def test_sanitize_rejects_names_without_final_segment(raw):
    assert sanitize_filename(raw) is None


def test_authorize_requires_exact_secret(settings):
    assert authorize(None, settings) is False
    assert authorize("", settings) is False
    assert authorize("wrong", settings) is False
    assert authorize(settings.api_secret + " ", settings) is False
    assert authorize(settings.api_secret.upper(), settings) is False
    assert authorize(settings.api_secret, settings) is True


@pytest.mark.parametrize(
    "method, path",
    [
        ("GET", "/"),
        ("GET", "/health"),
        ("POST", "/upload"),
        ("DELETE", "/file/whatever.bin"),
    ],
)
def test_protected_routes_reject_missing_or_wrong_key(client, method, path):
    r = client.request(method, path)
    assert r.status_code == 401
    r = client.request(method, path, headers={"x-api-key": "nope"})
    assert r.status_code == 401
    assert r.json() == {"detail": "invalid key"}


def test_root_banner_with_key(client, auth):
    r = client.get("/", headers=auth)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert "Sikap Storage" in r.text


def test_rejected_delete_leaves_file(client, base_dir):
    target = base_dir / "keep.txt"
    target.write_bytes(b"data")
    r = client.delete("/file/keep.txt", headers={"x-api-key": "wrong"})
    assert r.status_code == 401
    assert target.exists()


def test_cors_preflight_allows_api_key_header(client):
    r = client.options(
        "/upload",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "x-api-key, content-type",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"
    assert "x-api-key" in r.headers["access-control-allow-headers"].lower()
    assert "DELETE" in r.headers["access-control-allow-methods"]

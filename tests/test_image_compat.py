from unittest.mock import MagicMock, patch

import pytest
import requests

from showerconfig_backend.render import image_compat
from showerconfig_backend.render.image_compat import cache_path_for, is_remote, resolve_image

URL = "https://res.cloudinary.com/demo/image/upload/v1/door.png"


@pytest.fixture(autouse=True)
def cache_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(image_compat, "IMAGE_CACHE_DIR", tmp_path / "cache")
    return tmp_path / "cache"


def _response(status_code=200, body=b"png-bytes"):
    response = MagicMock()
    response.status_code = status_code
    response.iter_content.return_value = [body]
    return response


def test_is_remote():
    assert is_remote(URL)
    assert not is_remote("/tmp/door.png")


def test_cache_path_keeps_supported_suffix(cache_dir):
    assert cache_path_for(URL).suffix == ".png"
    assert cache_path_for("https://cdn.example.com/asset").suffix == ".png"
    assert cache_path_for(URL).parent == cache_dir


def test_downloads_once_then_uses_cache():
    with patch("showerconfig_backend.render.image_compat.requests.get", return_value=_response()) as mock_get:
        first = resolve_image(URL)
        second = resolve_image(URL)

    assert first == second
    assert first.read_bytes() == b"png-bytes"
    mock_get.assert_called_once()


def test_http_error_raises_file_not_found():
    with patch("showerconfig_backend.render.image_compat.requests.get", return_value=_response(404)):
        with pytest.raises(FileNotFoundError):
            resolve_image(URL)


def test_network_failure_raises_file_not_found():
    with patch(
        "showerconfig_backend.render.image_compat.requests.get",
        side_effect=requests.ConnectionError("offline"),
    ):
        with pytest.raises(FileNotFoundError):
            resolve_image(URL)


def test_local_paths(tmp_path):
    local = tmp_path / "base.png"
    local.write_bytes(b"x")
    assert resolve_image(str(local)) == local
    with pytest.raises(FileNotFoundError):
        resolve_image(str(tmp_path / "missing.png"))
    with pytest.raises(FileNotFoundError):
        resolve_image("")


def test_interrupted_download_leaves_no_cache_entry(cache_dir):
    response = MagicMock()
    response.status_code = 200
    response.iter_content.side_effect = requests.exceptions.ChunkedEncodingError("connection reset")

    with patch("showerconfig_backend.render.image_compat.requests.get", return_value=response):
        with pytest.raises(FileNotFoundError):
            resolve_image(URL)

    assert not cache_path_for(URL).exists()
    assert list(cache_dir.iterdir()) == []

    with patch("showerconfig_backend.render.image_compat.requests.get", return_value=_response()) as mock_get:
        assert resolve_image(URL).read_bytes() == b"png-bytes"
    mock_get.assert_called_once()

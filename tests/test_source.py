# tests/test_source.py
from io import BytesIO
import numpy as np
import pytest
import requests
from PIL import Image
from rpal import source


def png_bytes(color=(10, 200, 30), size=(20, 10)):
    buf = BytesIO()
    Image.new("RGB", size, color=color).save(buf, format="PNG")
    return buf.getvalue()


class FakeResponse:
    def __init__(self, payload=None, content=b"", status=200):
        self._payload = payload
        self.content = content
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


class FakeSession:
    """Answers the collection search, then the image download."""

    def __init__(self, search=None, image=None, search_error=None):
        self.search = search
        self.image = image
        self.search_error = search_error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        if url == source.RIJKS_COLLECTION_URL:
            if self.search_error:
                raise self.search_error
            return self.search
        if isinstance(self.image, Exception):
            raise self.image
        return self.image


def search_payload(*art_objects):
    return FakeResponse(payload={"count": len(art_objects), "artObjects": list(art_objects)})


def painting(url="https://lh3.example.com/abc=s0", has_image=True, title="The Milkmaid"):
    return {"hasImage": has_image, "webImage": {"url": url} if url else None, "longTitle": title}


def test_rijks_query_success():
    session = FakeSession(
        search=search_payload(painting(has_image=False, title="No image"), painting()),
        image=FakeResponse(content=png_bytes()),
    )
    result = source.rijks_query("Vermeer", api_key="test-key", session=session)

    assert isinstance(result, source.ImageAvailable)
    assert result.title == "The Milkmaid"
    assert result.url == "https://lh3.example.com/abc=s512"
    assert result.image.shape == (10, 20, 3)
    assert np.allclose(result.image[0, 0], np.array([10, 200, 30]) / 255.0)

    _, params = session.calls[0]
    assert params["q"] == "Vermeer"
    assert params["key"] == "test-key"
    assert params["type"] == "schilderij"


def test_rijks_query_network_failure():
    session = FakeSession(search_error=requests.ConnectionError("offline"))
    result = source.rijks_query("Vermeer", session=session)
    assert result == source.ImageUnavailable("Rijksmuseum unavailable")


def test_rijks_query_bad_json():
    session = FakeSession(search=FakeResponse(payload=None))
    result = source.rijks_query("Vermeer", session=session)
    assert isinstance(result, source.ImageUnavailable)
    assert result.reason == "Rijksmuseum unavailable"


@pytest.mark.parametrize("payload", [
    search_payload(),
    search_payload(painting(has_image=False)),
    search_payload(painting(url=None)),
    FakeResponse(payload={"count": 0}),
])
def test_rijks_query_no_results(payload):
    result = source.rijks_query("zzzz", session=FakeSession(search=payload))
    assert result == source.ImageUnavailable("Query returned no results")


@pytest.mark.parametrize("image", [
    requests.Timeout("slow"),
    FakeResponse(status=404),
    FakeResponse(content=b"not an image"),
])
def test_rijks_query_image_failure(image):
    session = FakeSession(search=search_payload(painting()), image=image)
    result = source.rijks_query("Vermeer", session=session)
    assert result == source.ImageUnavailable("Image unavailable")


def test_api_key_from_environment(monkeypatch):
    monkeypatch.setenv("RIJKS_API_KEY", "env-key")
    assert source.rijks_api_key() == "env-key"
    monkeypatch.delenv("RIJKS_API_KEY")
    assert source.rijks_api_key() == source.RIJKS_DEFAULT_API_KEY


def test_sized_image_url_only_rewrites_suffix():
    assert source.sized_image_url("https://x/img=s0") == "https://x/img=s512"
    assert source.sized_image_url("https://x/s0=s0/img") == "https://x/s0=s0/img"


def test_load_image(tmp_path):
    path = tmp_path / "canvas.png"
    path.write_bytes(png_bytes(color=(255, 255, 255)))

    result = source.load_image(path)
    assert isinstance(result, source.ImageAvailable)
    assert result.title == "canvas"
    assert np.all(result.image == 1.0)


def test_load_image_missing_and_corrupt(tmp_path):
    missing = source.load_image(tmp_path / "nope.png")
    assert isinstance(missing, source.ImageUnavailable)

    corrupt = tmp_path / "corrupt.png"
    corrupt.write_bytes(b"garbage")
    result = source.load_image(corrupt)
    assert isinstance(result, source.ImageUnavailable)
    assert "Could not read image" in result.reason

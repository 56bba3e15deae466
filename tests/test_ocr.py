import base64
import httpx
import pytest
from pytest_httpx import HTTPXMock
from grocery_shelf.ocr import OcrError, extract_text

URL_PREFIX = "https://vision.googleapis.com/v1/images:annotate?key=test-key"


@pytest.fixture
def image(tmp_path):
    path = tmp_path / "receipt.jpg"
    path.write_bytes(b"\xff\xd8fake-jpeg")
    return path


def test_extract_full_text(httpx_mock: HTTPXMock, image):
    httpx_mock.add_response(
        url=URL_PREFIX,
        json={"responses": [{"fullTextAnnotation": {
            "text": "Milk\nBread",
            "pages": [{"confidence": 0.9}, {"confidence": 0.7}],
        }}]},
    )
    result = extract_text(image, "test-key")
    assert result.text == "Milk\nBread"
    assert result.confidence == pytest.approx(0.8)


def test_falls_back_to_text_annotations(httpx_mock: HTTPXMock, image):
    httpx_mock.add_response(
        url=URL_PREFIX,
        json={"responses": [{"textAnnotations": [{"description": "Eggs"}]}]},
    )
    result = extract_text(image, "test-key")
    assert result.text == "Eggs"
    assert result.confidence is None


def test_sends_base64_image_and_text_detection(httpx_mock: HTTPXMock, image):
    httpx_mock.add_response(url=URL_PREFIX, json={"responses": [{"textAnnotations": [{"description": "x"}]}]})
    extract_text(image, "test-key")
    body = httpx_mock.get_requests()[0].read()
    assert b"TEXT_DETECTION" in body
    assert base64.b64encode(image.read_bytes()) in body


def test_no_text_raises(httpx_mock: HTTPXMock, image):
    httpx_mock.add_response(url=URL_PREFIX, json={"responses": [{}]})
    with pytest.raises(OcrError, match="No text"):
        extract_text(image, "test-key")


def test_http_error_raises(httpx_mock: HTTPXMock, image):
    httpx_mock.add_response(url=URL_PREFIX, status_code=403, json={"error": {"message": "API key not valid"}})
    with pytest.raises(OcrError, match="API key not valid"):
        extract_text(image, "test-key")


def test_network_error_raises(httpx_mock: HTTPXMock, image):
    httpx_mock.add_exception(httpx.ConnectError("failed"))
    with pytest.raises(OcrError, match="Could not connect"):
        extract_text(image, "test-key")


def test_missing_key_raises(image):
    with pytest.raises(OcrError, match="GOOGLE_VISION_API_KEY"):
        extract_text(image, "")

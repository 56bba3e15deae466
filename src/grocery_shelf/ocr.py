from __future__ import annotations
import base64
from pathlib import Path
from typing import Optional
import httpx
from pydantic import BaseModel

VISION_URL = "https://vision.googleapis.com/v1/images:annotate"


class OcrError(Exception):
    pass


class OcrResult(BaseModel):
    text: str
    confidence: Optional[float] = None


def _page_confidence(annotation: dict) -> Optional[float]:
    scores = [p["confidence"] for p in annotation.get("pages", []) if "confidence" in p]
    if not scores:
        return None
    return sum(scores) / len(scores)


def extract_text(image_path: Path, api_key: str) -> OcrResult:
    if not api_key:
        raise OcrError("GOOGLE_VISION_API_KEY environment variable is required to read images.")

    payload = {
        "requests": [
            {
                "image": {"content": base64.b64encode(Path(image_path).read_bytes()).decode()},
                "features": [{"type": "TEXT_DETECTION", "maxResults": 1}],
                "imageContext": {"languageHints": ["en"]},
            }
        ]
    }
    try:
        response = httpx.post(VISION_URL, params={"key": api_key}, json=payload, timeout=30)
    except httpx.ConnectError:
        raise OcrError("Could not connect to the Vision API. Check your internet connection.")
    except httpx.TimeoutException:
        raise OcrError("Request to the Vision API timed out.")

    if response.status_code >= 400:
        try:
            message = response.json().get("error", {}).get("message", "")
        except ValueError:
            message = ""
        raise OcrError(f"Vision API error {response.status_code}: {message or response.reason_phrase}")

    results = response.json().get("responses") or [{}]
    first = results[0]
    full = first.get("fullTextAnnotation") or {}
    if full.get("text"):
        return OcrResult(text=full["text"], confidence=_page_confidence(full))
    annotations = first.get("textAnnotations") or []
    if annotations and annotations[0].get("description"):
        return OcrResult(text=annotations[0]["description"])
    raise OcrError(f"No text found in {Path(image_path).name}.")

from __future__ import annotations
import json
import re


class ParseError(Exception):
    pass


_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def extract_json(text: str, opening: str = "{["):
    """Return the first top-level JSON value in text that may contain extra prose.

    ``opening`` limits which brackets may start the value: ``"{"`` for objects
    only, ``"{["`` for objects or arrays.
    """
    if not text or not text.strip():
        raise ParseError("Empty response")
    cleaned = _FENCE.sub("", text.strip())
    decoder = json.JSONDecoder()
    for index, char in enumerate(cleaned):
        if char not in opening:
            continue
        try:
            value, _ = decoder.raw_decode(cleaned, index)
        except json.JSONDecodeError:
            continue
        return value
    raise ParseError(f"No JSON value in response: {text[:200]!r}")

import json
import re
from typing import Any

_FENCE_OPEN = re.compile(r"^```[a-zA-Z0-9]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")


def strip_code_fences(s: str) -> str:
    s = (s or "").strip()
    # ```json ... ``` or ``` ... ```
    if s.startswith("```"):
        s = _FENCE_OPEN.sub("", s)
        s = _FENCE_CLOSE.sub("", s)
    return s.strip()


def extract_json(text: str) -> Any:
    """
    Pull the first JSON object/array out of model text and parse it.
    Leading prose and markdown fences are dropped, trailing text after the
    first complete value is ignored. A bare `null` answer parses to None.
    """
    candidate = strip_code_fences(text)
    if candidate == "null":
        return None
    if not candidate.startswith(("{", "[")):
        starts = [i for i in (candidate.find("{"), candidate.find("[")) if i != -1]
        if not starts:
            raise ValueError("No JSON object/array found in text")
        candidate = candidate[min(starts):]
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        value, _ = json.JSONDecoder().raw_decode(candidate)
        return value

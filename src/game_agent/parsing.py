"""
Extraction of JSON objects from free-form model output.

The model is asked for bare JSON, but replies sometimes arrive wrapped in
markdown fences or surrounded by prose. The strategies below are tried in
order and the first one that yields a JSON object wins.
"""
import json
import re
from typing import Any, Callable, Dict, List, Optional

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)
_BRACE_RE = re.compile(r"\{.*\}", re.DOTALL)


def normalize_llm_content(content) -> str:
    """Normalize LLM response content to a plain string.

    Gemini can return content as a list of content blocks
    (e.g., [{"type": "text", "text": "..."}]) instead of a string.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict):
                if "text" in part:
                    parts.append(part["text"])
        return "".join(parts)
    return str(content)


def _whole_text(raw: str) -> Optional[str]:
    return raw


def _fenced_block(raw: str) -> Optional[str]:
    match = _FENCE_RE.search(raw)
    return match.group(1) if match else None


def _brace_span(raw: str) -> Optional[str]:
    # Greedy: first "{" to last "}"
    match = _BRACE_RE.search(raw)
    return match.group(0) if match else None


_STRATEGIES: List[Callable[[str], Optional[str]]] = [_whole_text, _fenced_block, _brace_span]


def parse_json_response(raw: str) -> Optional[Dict[str, Any]]:
    """Return the first JSON object recoverable from ``raw``, or None."""
    if not raw:
        return None
    for strategy in _STRATEGIES:
        candidate = strategy(raw)
        if candidate is None:
            continue
        try:
            parsed = json.loads(candidate)
        except (ValueError, RecursionError):
            continue
        if isinstance(parsed, dict):
            return parsed
    return None

# lecturequiz/utils/text.py
import json
import re
from typing import Any, Dict, Optional, Set, Tuple


def clamp(n: int, low: int, high: int) -> int:
    return max(low, min(high, n))


# -----------------------------
# Input cleaning
# -----------------------------
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")
_CONTROL_TOKENS_RE = re.compile(
    r"(<\|.*?\|>)|(\b(role|system|developer|assistant|user)\s*:)", re.I | re.S
)


def remove_control_chars(s: str) -> str:
    return _CONTROL_CHARS_RE.sub("", s or "")


def clean_text(s: str) -> str:
    s = remove_control_chars(s)
    return re.sub(r"\s+", " ", s).strip()


def normalize_newlines(text: str) -> str:
    t = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    t = re.sub(r"[ \t]+\n", "\n", t)
    return re.sub(r"\n{3,}", "\n\n", t).strip()


def sanitize_lecture_text(text: str, max_chars: int = 30000) -> str:
    """
    Remove control-token patterns that can hijack some Llama-style models.
    """
    t = remove_control_chars(text or "").strip()
    t = _CONTROL_TOKENS_RE.sub("", t)
    return normalize_newlines(t[:max_chars])


# -----------------------------
# JSON extraction from LLM output
# -----------------------------
_JSON_BLOCK_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)


def first_balanced_object(s: str) -> Optional[str]:
    start = s.find("{")
    if start < 0:
        return None

    depth = 0
    in_str = False
    esc = False

    for i in range(start, len(s)):
        ch = s[i]
        if in_str:
            if esc:
                esc = False
            elif ch == "\\":
                esc = True
            elif ch == '"':
                in_str = False
        else:
            if ch == '"':
                in_str = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return s[start : i + 1]
    return None


def _loads_dict(s: str) -> Optional[Dict[str, Any]]:
    try:
        obj = json.loads(s)
    except ValueError:
        return None
    return obj if isinstance(obj, dict) else None


def extract_json_object(raw: str) -> Tuple[Optional[Dict[str, Any]], str]:
    """
    Returns (object, mode) where mode is one of
    direct / fenced / balanced / empty / none.
    """
    raw = (raw or "").strip()
    if not raw:
        return None, "empty"

    obj = _loads_dict(raw)
    if obj is not None:
        return obj, "direct"

    m = _JSON_BLOCK_RE.search(raw)
    if m:
        obj = _loads_dict(m.group(1).strip())
        if obj is not None:
            return obj, "fenced"

    cand = first_balanced_object(raw)
    if cand:
        obj = _loads_dict(cand)
        if obj is not None:
            return obj, "balanced"

    return None, "none"


def strip_code_fences(text: str) -> str:
    return re.sub(r"```[a-zA-Z]*\n?|```", "", text or "").strip()


# -----------------------------
# Fuzzy dedupe helpers (Jaccard)
# -----------------------------
_STOP = {
    "the","a","an","and","or","to","of","in","on","for","with","by","at","from",
    "is","are","was","were","be","been","being","this","that","these","those",
    "what","which","who","when","where","why","how"
}

def _norm(s: str) -> str:
    s = (s or "").lower()
    s = re.sub(r"[^a-z0-9\s]", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s

def _tokens(s: str) -> Set[str]:
    return {t for t in _norm(s).split() if len(t) >= 3 and t not in _STOP}

def jaccard_sim(a: str, b: str) -> float:
    A, B = _tokens(a), _tokens(b)
    if not A or not B:
        return 0.0
    return len(A & B) / len(A | B)

import hashlib
import logging
import math
from datetime import datetime, timezone
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def round_half_up(value: float) -> int:
    """Round .5 away from zero instead of Python's banker's rounding."""
    return int(math.floor(round(value, 9) + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def text_fingerprint(text: str) -> str:
    """
    Deterministic fingerprint of extracted resume text.
    SHA256 over whitespace-collapsed text, first 32 hex chars.
    """
    normalized = " ".join((text or "").split())
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:32]


SKILL_SYNONYMS = {
    "js": "javascript",
    "ecmascript": "javascript",
    "ts": "typescript",
    "reactjs": "react",
    "react.js": "react",
    "node": "node.js",
    "nodejs": "node.js",
    "vuejs": "vue",
    "vue.js": "vue",
    "nextjs": "next.js",
    "golang": "go",
    "k8s": "kubernetes",
    "postgres": "postgresql",
    "py": "python",
    "python3": "python",
    "c sharp": "c#",
    "csharp": "c#",
    "cpp": "c++",
    "tf": "terraform",
    "mongo": "mongodb",
}


def skill_key(name: str) -> str:
    """Case-normalized, trimmed key used for uniqueness of (user, skill)."""
    return " ".join((name or "").strip().lower().split())


def normalize_skill(name: str) -> str:
    """skill_key plus synonym folding (reactjs -> react, nodejs -> node.js)."""
    key = skill_key(name)
    return SKILL_SYNONYMS.get(key, key)


def unique_preserving_order(items: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out

import hashlib
from typing import Optional


def hash_content(text: Optional[str]) -> str:
    """Return the SHA-256 hex digest of ``text`` (``None`` hashes as "")."""
    return hashlib.sha256((text or "").encode("utf-8")).hexdigest()

from typing import List, Optional

from _engine.errors import InvalidArgumentError


def chunk_text(text: Optional[str], max_chars: int) -> List[str]:
    """
    Split text into contiguous pieces of at most ``max_chars`` characters.

    Joining the returned pieces gives back ``text`` exactly. Empty text
    yields an empty list.

    Raises:
        InvalidArgumentError: if ``max_chars`` is not a positive integer.
    """
    if isinstance(max_chars, bool) or not isinstance(max_chars, int) or max_chars <= 0:
        raise InvalidArgumentError(
            f"max_chars must be a positive integer, got {max_chars!r}"
        )
    if not text:
        return []
    return [text[i : i + max_chars] for i in range(0, len(text), max_chars)]

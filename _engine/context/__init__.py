from .builder import build_context
from .cache import ContextCache

__all__ = ["build_context", "ContextCache"]

import math
from typing import Optional

from _data.openai import DEFAULT_CONTEXT_LIMIT, MODEL_CONTEXT_LIMITS
from _engine.console import warn
from _engine.errors import InvalidArgumentError
from _types.model import Budget

# Share of the context window handed to the diff content. The rest is left
# for the instructions and the model's answer.
DEFAULT_INPUT_SHARE_FRACTION = 0.5

# Heuristic, not measured. English text averages about four characters per
# token and code fewer; three keeps the estimate below the real capacity.
DEFAULT_CHARS_PER_TOKEN = 3


def get_model_context_limit(model: Optional[str]) -> int:
    """Token limit for a model id, or DEFAULT_CONTEXT_LIMIT when unknown."""
    limit = MODEL_CONTEXT_LIMITS.get(model or "")
    if limit is None:
        warn(
            f"Unknown model '{model}' - using conservative context length of "
            f"{DEFAULT_CONTEXT_LIMIT:,} tokens."
        )
        return DEFAULT_CONTEXT_LIMIT
    return limit


def compute_budget(
    model: Optional[str],
    input_share_fraction: float = DEFAULT_INPUT_SHARE_FRACTION,
    chars_per_token: int = DEFAULT_CHARS_PER_TOKEN,
    override: Optional[int] = None,
) -> Budget:
    """
    Derive the per-chunk character budget for a model.

    Args:
        model: Model identifier looked up in MODEL_CONTEXT_LIMITS.
        input_share_fraction: Fraction of the window reserved for input, in (0, 1].
        chars_per_token: Characters assumed per token.
        override: Explicit max chars per chunk; wins over the computed value.

    Returns:
        Budget: the inputs and the resulting ``max_chars_per_chunk`` (always >= 1).
    """
    if not 0 < input_share_fraction <= 1:
        raise InvalidArgumentError(
            f"input_share_fraction must be in (0, 1], got {input_share_fraction!r}"
        )
    if chars_per_token <= 0:
        raise InvalidArgumentError(
            f"chars_per_token must be positive, got {chars_per_token!r}"
        )
    if override is not None and override <= 0:
        raise InvalidArgumentError(f"max chars override must be positive, got {override!r}")

    if override is not None:
        token_limit = MODEL_CONTEXT_LIMITS.get(model or "", DEFAULT_CONTEXT_LIMIT)
        max_chars = override
    else:
        token_limit = get_model_context_limit(model)
        max_tokens_for_input = math.floor(token_limit * input_share_fraction)
        max_chars = max(1, max_tokens_for_input * chars_per_token)

    return Budget(
        model_token_limit=token_limit,
        input_share_fraction=input_share_fraction,
        chars_per_token=chars_per_token,
        max_chars_per_chunk=max_chars,
    )


def compute_max_chunk_chars(model: Optional[str], override: Optional[int] = None) -> int:
    return compute_budget(model, override=override).max_chars_per_chunk

from typing import Callable, Optional, Sequence

from _data.prompts import ANALYZE_PROMPT, CREATE_PROMPT, FILE_BLOCK
from _engine.completion.client import CompletionClient
from _engine.completion.gateway import SummarizationGateway, generate_language_instruction
from _engine.console import console
from _engine.context.builder import build_context
from _engine.context.cache import ContextCache
from _engine.errors import AuthenticationError, InvalidArgumentError
from _types.model import AppConfig, ChangedFile, ContextOptions, PromptType


def generate_prompt(files: Sequence[ChangedFile], prompt_type: PromptType, language: str) -> str:
    """
    Build the review or commit-message prompt for a set of files.

    Raises:
        InvalidArgumentError: for an unsupported prompt type.
    """
    diffs = "\n".join(FILE_BLOCK.format(filename=f.filename, diff=f.diff) for f in files)
    language_instruction = generate_language_instruction(language)

    if prompt_type == PromptType.ANALYZE:
        return ANALYZE_PROMPT.format(diffs=diffs, language_instruction=language_instruction)
    if prompt_type == PromptType.CREATE:
        return CREATE_PROMPT.format(diffs=diffs, language_instruction=language_instruction)
    raise InvalidArgumentError(f"Invalid prompt type: {prompt_type}")


def context_options_from_config(config: AppConfig, max_workers: int = 1) -> ContextOptions:
    return ContextOptions(
        model=config.OPENAI_API_MODEL,
        max_chars=config.OPENAI_CHUNK_SIZE_CHARS,
        max_combined_chars=config.OPENAI_COMBINED_SIZE_CHARS,
        max_workers=max_workers,
    )


def _analyze_once(
    files: Sequence[ChangedFile],
    prompt_type: PromptType,
    config: AppConfig,
    cache: ContextCache,
    options: ContextOptions,
) -> str:
    client = CompletionClient(
        api_key=config.OPENAI_API_KEY,
        model=config.OPENAI_API_MODEL,
        base_url=config.OPENAI_API_BASEURL,
    )
    gateway = SummarizationGateway(client, config.OPENAI_RESPONSE_LANGUAGE)
    context_files = build_context(files, prompt_type, gateway, cache, options)
    prompt = generate_prompt(context_files, prompt_type, config.OPENAI_RESPONSE_LANGUAGE)

    console.print("[info]📤 Sending request to AI...[/info]")
    response = client.complete(prompt)
    console.print("[success]✅ Response received.[/success]")
    return response


def analyze_updated_code(
    files: Sequence[ChangedFile],
    prompt_type: PromptType,
    config: AppConfig,
    cache: Optional[ContextCache] = None,
    refresh_credentials: Optional[Callable[[], Optional[str]]] = None,
    options: Optional[ContextOptions] = None,
) -> str:
    """
    Ask the model for a review (ANALYZE) or a commit message (CREATE).

    Args:
        files: Changed files with their diffs.
        prompt_type: Which prompt to send.
        config: Validated configuration (key, model, language, budgets).
        cache: Context cache; defaults to ``.cache/context.json`` in the cwd.
        refresh_credentials: Called once when the API key is rejected. It
            returns a new key to retry with, or None to give up.
        options: Context options; derived from ``config`` when omitted.

    Returns:
        str: the model answer.
    """
    cache = cache or ContextCache()
    options = options or context_options_from_config(config)
    try:
        return _analyze_once(files, prompt_type, config, cache, options)
    except AuthenticationError as e:
        console.print(f"[error]❌ Error analyzing updated code: {e}[/error]")
        new_key = refresh_credentials() if refresh_credentials else None
        if not new_key:
            raise
        retry_config = config.model_copy(update={"OPENAI_API_KEY": new_key})
        return _analyze_once(files, prompt_type, retry_config, cache, options)

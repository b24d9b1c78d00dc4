BASE_URL: str = "https://api.openai.com/v1"

DEFAULT_MODEL: str = "gpt-4o-mini"

# Reasoning models that accept the lighter reasoning/verbosity knobs.
LOW_EFFORT_MODELS = ("gpt-5-nano",)

# Context window (input + output tokens) per model id.
MODEL_CONTEXT_LIMITS: dict = {
    "gpt-4o-mini": 128000,
    "gpt-4o": 128000,
    "gpt-4-turbo": 128000,
    "gpt-4.1": 1047576,
    "gpt-4.1-mini": 1047576,
    "gpt-4.1-nano": 1047576,
    "gpt-5-nano": 400000,
    "deepseek-r1-distill-llama-8b": 131072,
}

# Used for any model id missing from the table above. Small on purpose:
# guessing too high overflows the real window of small local models.
DEFAULT_CONTEXT_LIMIT: int = 8192

SUPPORTED_LANGUAGES: dict = {
    "en-US": "English (US)",
    "pt-BR": "Portuguese (Brazil)",
}

DEFAULT_LANGUAGE: str = "en-US"

REQUEST_TIMEOUT: int = 120

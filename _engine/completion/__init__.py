from .analysis import analyze_updated_code, context_options_from_config
from .models import display_models, get_models, select_model

__all__ = [
    "analyze_updated_code",
    "context_options_from_config",
    "display_models",
    "get_models",
    "select_model",
]

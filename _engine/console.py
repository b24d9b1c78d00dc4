from rich.console import Console
from rich.theme import Theme

# Custom theme for consistent styling
custom_theme = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "bold red",
        "highlight": "magenta",
    }
)

console = Console(theme=custom_theme)


def warn(message: str) -> None:
    console.print(f"[warning]⚠️ {message}[/warning]")

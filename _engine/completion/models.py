from typing import List, Optional

import requests
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from _data.openai import BASE_URL, DEFAULT_CONTEXT_LIMIT, MODEL_CONTEXT_LIMITS
from _engine.console import console


def known_models() -> List[dict]:
    return [{"name": name, "context": limit} for name, limit in MODEL_CONTEXT_LIMITS.items()]


def get_models(api_key: Optional[str] = None, base_url: Optional[str] = None) -> List[dict]:
    """
    List models served by the endpoint, falling back to the built-in table.

    Each entry is ``{"name": str, "context": int}``; the context comes from
    MODEL_CONTEXT_LIMITS since the listing endpoint does not report it.
    """
    headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]Loading models..."),
            transient=True,
            console=console,
        ) as progress:
            progress.add_task("", total=None)
            response = requests.get(
                f"{(base_url or BASE_URL).rstrip('/')}/models", headers=headers, timeout=15
            )
    except requests.exceptions.RequestException as e:
        console.print(f"[warning]Unable to list remote models ({e}); showing known models.[/warning]")
        return known_models()

    if response.status_code != 200:
        console.print(
            f"[warning]Model listing returned {response.status_code}; showing known models.[/warning]"
        )
        return known_models()

    try:
        remote = [item["id"] for item in response.json().get("data", [])]
    except (ValueError, KeyError, TypeError, AttributeError):
        return known_models()
    if not remote:
        return known_models()
    return [
        {"name": name, "context": MODEL_CONTEXT_LIMITS.get(name, DEFAULT_CONTEXT_LIMIT)}
        for name in sorted(remote)
    ]


def display_models(models) -> None:
    """Display models in table format"""
    if not models:
        console.print(
            Panel(
                "[italic yellow]No models available",
                title="[bold red]Warning",
                border_style="red",
            )
        )
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("No.", style="dim", width=6, justify="center")
    table.add_column("Model Name", style="cyan", min_width=20)
    table.add_column("Context (tokens)", style="green", justify="right")

    for i, model in enumerate(models, 1):
        table.add_row(str(i), model["name"], f"{model['context']:,}")

    console.print(Panel(table, title="[bold cyan]Available Models", border_style="cyan"))


def select_model(models) -> Optional[str]:
    """Let the user select a model"""
    if not models:
        return None

    while True:
        console.print("\n[bold yellow]Please select a model (enter number or 'q' to quit):")
        choice = console.input("[bold cyan]>>> ").strip()

        if choice.lower() == "q":
            return None
        try:
            index = int(choice) - 1
        except ValueError:
            console.print("[bold red]Please enter a valid number")
            continue
        if 0 <= index < len(models):
            return models[index]["name"]
        console.print("[bold red]Invalid number")

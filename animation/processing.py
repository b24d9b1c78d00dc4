from contextlib import contextmanager

from _engine.console import console


@contextmanager
def processing(message: str = "Processing..."):
    """Show a spinner while a slow call (git, model) is running."""
    with console.status(f"[bold green]{message}", spinner="moon"):
        yield

# Standard Library Imports
import argparse
import os
import sys
import tempfile
from typing import List, Optional, Tuple

# Third-Party Library Imports
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

# Internal Module Imports
from _engine.completion import (
    analyze_updated_code,
    context_options_from_config,
    display_models,
    get_models,
    select_model,
)
from _engine.config import (
    ConfigKeys,
    load_config,
    save_config,
    update_config_from_string,
    validate_configuration,
)
from _engine.console import console, warn
from _engine.context import ContextCache
from _engine.errors import AcrError, InvalidArgumentError
from _engine.git import (
    check_conflicts,
    clear_stage,
    collect_changed_files,
    commit_with_editor,
    get_commits,
    get_latest_commit_hash,
    push_changes,
    stage_all_changes,
)
from _types.model import AppConfig, ContextOptions, PromptType
from animation.processing import processing

COMMIT_PAGE_SIZE = 15


# --- Credentials ---


def prompt_for_new_api_key() -> Optional[str]:
    """Ask for a replacement API key after a 401 and save it."""
    console.print("[warning]The configured API key was rejected.[/warning]")
    new_key = Prompt.ask("[bold cyan]Enter a valid OpenAI API key (empty to abort)[/bold cyan]", password=True)
    new_key = (new_key or "").strip()
    if not new_key:
        return None
    config = load_config()
    config[ConfigKeys.OPENAI_API_KEY.value] = new_key
    save_config(config)
    console.print("[success]✅ API key updated.[/success]")
    return new_key


# --- Run Configuration ---


def build_run_configuration(args) -> Tuple[AppConfig, ContextOptions]:
    config = validate_configuration()
    if args.model:
        config = config.model_copy(update={"OPENAI_API_MODEL": args.model})
        console.print(f"[info]Using model specified via command line: [cyan]{args.model}[/cyan][/info]")

    options = context_options_from_config(config, max_workers=args.workers)
    updates = {}
    if args.max_chars is not None:
        updates["max_chars"] = args.max_chars
    if args.max_combined_chars is not None:
        updates["max_combined_chars"] = args.max_combined_chars
    if updates:
        options = options.model_copy(update=updates)
    return config, options


# --- Analyze ---


def display_commits(commits, offset: int = 0) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("No.", style="dim", width=6, justify="center")
    table.add_column("SHA", style="yellow")
    table.add_column("Date", style="green")
    table.add_column("Message", style="cyan")
    for i, commit in enumerate(commits, 1):
        table.add_row(str(i), commit.sha_short, commit.date, commit.message)
    console.print(
        Panel(table, title=f"[bold cyan]Commits {offset + 1}-{offset + len(commits)}", border_style="cyan")
    )


def select_commits() -> List[str]:
    """Let the user pick commits page by page. Returns full SHAs."""
    skip = 0
    selected: List[str] = []
    while True:
        commits = get_commits(skip, COMMIT_PAGE_SIZE)
        if not commits:
            warn("No more commits available.")
            break

        display_commits(commits, offset=skip)
        answer = Prompt.ask(
            "[bold cyan]Select commits to analyze (e.g. 1,3), 'm' to load more, Enter to finish[/bold cyan]",
            default="",
            show_default=False,
        )
        tokens = [token.strip().lower() for token in answer.split(",") if token.strip()]
        for token in tokens:
            if token == "m":
                continue
            if token.isdigit() and 1 <= int(token) <= len(commits):
                sha = commits[int(token) - 1].sha_full
                if sha not in selected:
                    selected.append(sha)
            else:
                warn(f"Ignoring invalid selection '{token}'.")

        if "m" not in tokens:
            break
        skip += COMMIT_PAGE_SIZE
    return selected


def analyze_commit(sha: str, config: AppConfig, options: ContextOptions, cache: ContextCache) -> None:
    console.print(f"\n[bold blue]📂 Fetching modified files for commit [bold]{sha}[/bold]...[/bold blue]")
    files = collect_changed_files(sha)
    if not files:
        warn("No valid differences found for analysis.")
        return

    analysis = analyze_updated_code(
        files,
        PromptType.ANALYZE,
        config,
        cache=cache,
        refresh_credentials=prompt_for_new_api_key,
        options=options,
    )
    console.print(
        Panel(
            Markdown(analysis),
            title=f"[bold green]Code Analysis Result for commit {sha[:8]}",
            border_style="green",
        )
    )
    console.print("[success]Analyzed Files:[/success]")
    for file in files:
        console.print(f"[success]- {file.filename}[/success]")


def command_analyze(args) -> None:
    config, options = build_run_configuration(args)
    if args.latest:
        latest = get_latest_commit_hash()
        if latest is None:
            return
        shas = [latest]
    else:
        shas = args.shas or select_commits()
    if not shas:
        warn("No commits selected for analysis.")
        return

    cache = ContextCache()
    for sha in shas:
        analyze_commit(sha, config, options, cache)


# --- Create ---


def verify_conflicts() -> bool:
    conflicts = check_conflicts()
    if not conflicts:
        console.print("[success]✔ No conflicts detected.[/success]")
        return True

    console.print("[error]❌ Conflicts detected in the following files:[/error]")
    for index, filename in enumerate(conflicts, 1):
        console.print(f"{index}. {filename}")
    if Confirm.ask("Do you want to continue even with conflicts?", default=False):
        warn("Continuing with conflicts.")
        return True
    console.print("[error]❌ Resolve the conflicts before proceeding.[/error]")
    return False


def command_create(args) -> None:
    config, options = build_run_configuration(args)

    clear_stage()
    if not verify_conflicts():
        sys.exit(1)
    with processing("Staging changes..."):
        stage_all_changes()

    staged_files = collect_changed_files(None)
    if not staged_files:
        warn("No staged changes to commit.")
        return

    while True:
        choice = Prompt.ask(
            "[bold cyan]Commit message:[/bold cyan] (1) Generate with AI and edit, (2) Write my own, (3) Cancel",
            choices=["1", "2", "3"],
            default="1",
        )
        if choice == "3":
            warn("Commit process canceled.")
            return

        if choice == "1":
            console.print("[info]📤 Generating commit message with AI...[/info]")
            message = analyze_updated_code(
                staged_files,
                PromptType.CREATE,
                config,
                refresh_credentials=prompt_for_new_api_key,
                options=options,
            )
        else:
            message = ""
            while not message.strip():
                message = Prompt.ask("[bold cyan]Enter your commit message[/bold cyan]")

        fd, message_file = tempfile.mkstemp(prefix="commit_message_", suffix=".txt")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(message)
            returncode = commit_with_editor(message_file)
        finally:
            os.remove(message_file)

        if returncode == 0:
            break
        console.print("[error]❌ The commit was not created (empty message or editor aborted).[/error]")

    if Confirm.ask("Do you want to push to the remote repository?", default=True):
        push_changes()
    else:
        warn("Push not performed.")


# --- Configuration Commands ---


def command_set_config(args) -> None:
    update_config_from_string(args.assignment)


def command_set_model(args) -> None:
    config = load_config()
    models = get_models(
        config.get(ConfigKeys.OPENAI_API_KEY.value), config.get(ConfigKeys.OPENAI_API_BASEURL.value)
    )
    display_models(models)
    selected = select_model(models)
    if not selected:
        console.print("\n[yellow]No model selected. Default model not changed.[/yellow]")
        return
    config[ConfigKeys.OPENAI_API_MODEL.value] = selected
    save_config(config)
    console.print(f"[bold green]✔[/bold green] Default model '[cyan]{selected}[/cyan]' saved.")


def command_clear_cache(args) -> None:
    ContextCache().clear()
    console.print("[success]✅ Context cache cleared.[/success]")


# --- Argument Parsing ---


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="acr",
        description="Analyze and create commits with AI assistance directly from the local Git repository.",
    )

    run_options = argparse.ArgumentParser(add_help=False)
    run_options.add_argument("-m", "--model", type=str, help="Model to use for this run. Overrides the configured one.")
    run_options.add_argument(
        "--max-chars",
        type=positive_int,
        help="Maximum characters per diff chunk. Overrides the budget computed from the model.",
    )
    run_options.add_argument(
        "--max-combined-chars",
        type=positive_int,
        help="Length above which chunk summaries are summarized again. Defaults to --max-chars.",
    )
    run_options.add_argument(
        "--workers",
        type=positive_int,
        default=1,
        help="Number of files summarized in parallel. Default: %(default)s",
    )

    subparsers = parser.add_subparsers(dest="command")

    analyze = subparsers.add_parser("analyze", parents=[run_options], help="List and analyze commits.")
    analyze.add_argument("shas", nargs="*", help="Commit SHAs to analyze. Prompts when omitted.")
    analyze.add_argument("--latest", action="store_true", help="Analyze the most recent commit (HEAD).")
    analyze.set_defaults(handler=command_analyze)

    create = subparsers.add_parser("create", parents=[run_options], help="Create a new commit with AI assistance.")
    create.set_defaults(handler=command_create)

    set_config = subparsers.add_parser("set_config", help="Update a configuration value (KEY=VALUE).")
    set_config.add_argument("assignment", help="Configuration in the format KEY=VALUE")
    set_config.set_defaults(handler=command_set_config)

    set_model = subparsers.add_parser("set_model", help="Interactively select and save the default model.")
    set_model.set_defaults(handler=command_set_model)

    clear_cache = subparsers.add_parser("clear_cache", help="Delete the cached diff summaries.")
    clear_cache.set_defaults(handler=command_clear_cache)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "handler", None):
        parser.print_help()
        return
    args.handler(args)


def run() -> None:
    try:
        main()
    except KeyboardInterrupt:
        console.print("\n[bold yellow]✋ Operation cancelled by user.[/bold yellow]")
        sys.exit(0)
    except InvalidArgumentError:
        raise
    except AcrError as e:
        console.print(
            Panel(
                f"[yellow]{e}[/yellow]",
                title="[bold red]Error[/bold red]",
                border_style="red",
            )
        )
        sys.exit(1)


# --- Entry Point ---
if __name__ == "__main__":
    run()

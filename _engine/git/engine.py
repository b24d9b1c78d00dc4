# Standard Library Imports
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import List, Optional, Tuple

# Third-Party Library Imports
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

# Build-in Functions And Class Import
from _engine.console import console, warn
from _engine.errors import GitCommandError
from _types.model import ChangedFile, CommitInfo, FileStatus
from .command import check_git_command, run_git_command

# --- Configuration ---
# Hash of git's empty tree, used as the parent of a root commit
EMPTY_TREE_HASH = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"
# Default number of worker threads for parallel diff extraction
DEFAULT_MAX_WORKERS = os.cpu_count() or 4
# Field separator for git log output (ASCII unit separator)
LOG_FIELD_SEPARATOR = "\x1f"
MAX_MESSAGE_LENGTH = 100


def get_latest_commit_hash(cwd: Optional[str] = None) -> Optional[str]:
    """
    Get the latest commit hash from the git repository.

    Returns:
        Optional[str]: The SHA-1 hash of the most recent commit, or None on failure.
    """
    returncode, stdout, stderr = run_git_command(["git", "rev-parse", "HEAD"], cwd=cwd)
    if returncode != 0 or not stdout:
        console.print("[error]Failed to get latest commit hash.[/error]")
        console.print(f"[dim]Details:[/dim] [dim yellow]{stderr}[/dim yellow]")
        return None
    return stdout


def parse_name_status(output: str) -> List[Tuple[FileStatus, str]]:
    """
    Parse ``--name-status`` output into (status, filename) pairs.

    Renames and copies ("R100\\told\\tnew") report the new path.
    """
    entries = []
    for line in output.splitlines():
        parts = line.strip().split("\t")
        if len(parts) < 2 or not parts[-1]:
            continue
        entries.append((FileStatus.from_git(parts[0]), parts[-1]))
    return entries


def get_changed_files(
    commit_hash: Optional[str] = None, cwd: Optional[str] = None
) -> List[Tuple[FileStatus, str]]:
    """
    List files changed by a commit, or the staged set when no commit is given.

    Raises:
        GitCommandError: if git fails (unknown commit, not a repository, ...).
    """
    if commit_hash:
        command = ["git", "diff-tree", "--no-commit-id", "--name-status", "-r", "--root", commit_hash]
    else:
        command = ["git", "diff", "--cached", "--name-status"]
    return parse_name_status(check_git_command(command, cwd=cwd))


def _parent_of(commit_hash: str, cwd: Optional[str] = None) -> str:
    returncode, _, _ = run_git_command(
        ["git", "rev-parse", "--verify", "--quiet", f"{commit_hash}^"], cwd=cwd
    )
    return f"{commit_hash}^" if returncode == 0 else EMPTY_TREE_HASH


def get_file_diff(filename: str, commit_hash: Optional[str] = None, cwd: Optional[str] = None) -> str:
    """
    Diff of one file for a commit (against its parent) or for the staged set.

    Raises:
        GitCommandError: if git fails.
    """
    if commit_hash:
        command = ["git", "diff", _parent_of(commit_hash, cwd), commit_hash, "--", filename]
    else:
        command = ["git", "diff", "--cached", "--", filename]
    return check_git_command(command, cwd=cwd)


def collect_changed_files(
    commit_hash: Optional[str] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    cwd: Optional[str] = None,
) -> List[ChangedFile]:
    """
    Read the diff of every changed file in parallel, keeping git's order.

    Files whose diff is empty or cannot be read are reported and left out.
    """
    entries = get_changed_files(commit_hash, cwd=cwd)
    if not entries:
        return []

    diffs: List[Optional[str]] = [None] * len(entries)
    progress = Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TextColumn("•"),
        TextColumn("Processed [progress.completed] of [progress.total]"),
        TimeElapsedColumn(),
        SpinnerColumn("simpleDots"),
        console=console,
        transient=True,
    )

    with progress:
        task_id = progress.add_task("[cyan]Reading diffs[/cyan]...", total=len(entries))
        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
            future_to_index = {
                executor.submit(get_file_diff, filename, commit_hash, cwd): index
                for index, (_, filename) in enumerate(entries)
            }
            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    diffs[index] = future.result()
                except GitCommandError as e:
                    console.print(
                        f"[error]❌ Error reading differences for file [bold]{entries[index][1]}[/bold]: {e.stderr}[/error]"
                    )
                progress.update(task_id, advance=1)

    files = []
    for (status, filename), diff in zip(entries, diffs):
        if diff is None:
            continue
        if not diff.strip():
            warn(f"No differences found for file {filename}.")
            continue
        files.append(ChangedFile(filename=filename, diff=diff, status=status))
    return files


def _truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def get_commits(skip: int = 0, limit: int = 15, cwd: Optional[str] = None) -> List[CommitInfo]:
    """
    Retrieve commits in batches, newest first.

    Raises:
        GitCommandError: if git log fails.
    """
    sep = LOG_FIELD_SEPARATOR
    stdout = check_git_command(
        [
            "git",
            "log",
            f"--skip={skip}",
            f"--max-count={limit}",
            f"--pretty=format:%H{sep}%ct{sep}%s",
        ],
        cwd=cwd,
    )

    commits = []
    for line in stdout.splitlines():
        if not line:
            continue
        sha_full, timestamp, message = line.split(sep, 2)
        commits.append(
            CommitInfo(
                sha_full=sha_full,
                sha_short=sha_full[:7],
                date=datetime.fromtimestamp(int(timestamp)).strftime("%m/%d/%Y %H:%M"),
                message=_truncate(message.replace("\n", " "), MAX_MESSAGE_LENGTH),
            )
        )
    return commits

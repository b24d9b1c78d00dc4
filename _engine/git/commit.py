import subprocess
from typing import List, Optional

from _engine.console import console
from .command import check_git_command, run_git_command


def clear_stage(cwd: Optional[str] = None) -> None:
    """Unstage everything without touching the working tree."""
    returncode, _, stderr = run_git_command(["git", "reset", "--quiet"], cwd=cwd)
    if returncode != 0:
        console.print(f"[warning]Could not clear the stage: {stderr}[/warning]")


def check_conflicts(cwd: Optional[str] = None) -> List[str]:
    stdout = check_git_command(["git", "diff", "--name-only", "--diff-filter=U"], cwd=cwd)
    return [line for line in stdout.splitlines() if line.strip()]


def stage_all_changes(cwd: Optional[str] = None) -> None:
    check_git_command(["git", "add", "--all"], cwd=cwd)
    console.print("[success]✔ All changes staged.[/success]")


def commit_with_editor(message_file: str, cwd: Optional[str] = None) -> int:
    """
    Open the user's editor on the prepared message and commit.

    Runs attached to the terminal so the editor can take over; returns git's
    exit code (non-zero when the user aborts with an empty message).
    """
    return subprocess.call(["git", "commit", "--edit", "--file", message_file], cwd=cwd)


def push_changes(cwd: Optional[str] = None) -> bool:
    returncode, stdout, stderr = run_git_command(["git", "push"], cwd=cwd)
    if returncode != 0:
        console.print(f"[error]❌ Push failed:[/error] {stderr}")
        return False
    console.print("[success]🚀 Changes pushed.[/success]")
    return True

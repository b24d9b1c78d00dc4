import subprocess
from typing import List, Optional, Tuple

from _engine.console import console
from _engine.errors import GitCommandError


def run_git_command(command: List[str], cwd: Optional[str] = None) -> Tuple[int, str, str]:
    """
    Runs a git command and returns its return code, stdout, and stderr.

    Args:
        command (List[str]): The git command and its arguments as a list of strings.
                             Example: ["git", "rev-parse", "HEAD"]
        cwd (Optional[str]): Repository directory. Defaults to the process cwd.

    Returns:
        Tuple[int, str, str]: Return code, stripped stdout and stripped stderr.
                              Returns (1, "", message) if git could not be started.
    """
    try:
        # errors="replace" keeps binary or mis-encoded diffs from failing the run
        result = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except FileNotFoundError:
        error_msg = "Git command not found. Is Git installed and in your PATH?"
        console.print(f"[bold red]Error:[/bold red] {error_msg}")
        return 1, "", error_msg
    except OSError as e:
        error_msg = f"Exception running command {' '.join(command)}: {e}"
        console.print(f"[bold red]Error:[/bold red] {error_msg}")
        return 1, "", error_msg

    return result.returncode, result.stdout.strip(), result.stderr.strip()


def check_git_command(command: List[str], cwd: Optional[str] = None) -> str:
    """Like run_git_command, but raises GitCommandError on a non-zero exit."""
    returncode, stdout, stderr = run_git_command(command, cwd=cwd)
    if returncode != 0:
        raise GitCommandError(command, returncode, stderr)
    return stdout

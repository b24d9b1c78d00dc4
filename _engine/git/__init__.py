from .commit import check_conflicts, clear_stage, commit_with_editor, push_changes, stage_all_changes
from .engine import collect_changed_files, get_commits, get_latest_commit_hash

__all__ = [
    "check_conflicts",
    "clear_stage",
    "collect_changed_files",
    "commit_with_editor",
    "get_commits",
    "get_latest_commit_hash",
    "push_changes",
    "stage_all_changes",
]

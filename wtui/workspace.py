"""Editor workspace file for a task directory."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path


def generate_workspace_file(task_id: str, task_dir: str | os.PathLike[str]) -> Path:
    """Write <task_id>.code-workspace listing the task's subdirectories; return its path."""
    directory = Path(task_dir)
    folders = sorted(entry.name for entry in directory.iterdir() if entry.is_dir())

    workspace = {
        "folders": [{"path": name} for name in folders],
        "settings": {"workbench.editor.labelFormat": "medium"},
    }
    data = json.dumps(workspace, indent=2, ensure_ascii=False) + "\n"

    ws_path = directory / f"{task_id}.code-workspace"
    fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".wtui-workspace-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(data)
        os.replace(tmp_name, ws_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return ws_path
# wtui

`wtui` groups git worktrees from several repositories into *tasks*. A task is a
directory under a tasks root. It holds one worktree per service, and all of them
are on the same branch. The task directory also holds a `<task>.code-workspace`
file that lists its subdirectories for the editor.

## Installing

```
pip install .
```

To run the tests:

```
pip install '.[test]'
pytest
```

## Using the library

The central object is `wtui.manager.TaskManager`. You build it from a
`wtui.domain.Config` (`tasks_root`, `root_dir`, `branch_prefix`, `base_branch`,
`editor`) and collaborators that you supply:

- a `wtui.domain.GitClient`, which runs the git operations,
- a `wtui.domain.Resolver`, which maps a service token to a repository path.
  It may also be a `wtui.domain.RefreshingResolver`.
- an optional `wtui.domain.SlnGenerator`, which writes a solution file for the
  task,
- an optional `logging.Logger`.

```python
import logging

from wtui.domain import Config, InitParams
from wtui.manager import TaskManager
from wtui.strategy import SyncStrategy

config = Config(tasks_root="/work/.tasks", branch_prefix="feature/", base_branch="develop")
manager = TaskManager(config, git, resolver, sln, logging.getLogger("wtui"))

manager.init(InitParams(task_id="PROJ-123", services=["api", "web"]))
for service in manager.list_services("PROJ-123"):
    print(service.name, service.branch, service.is_dirty, service.ahead, service.behind)

manager.sync_task("PROJ-123", SyncStrategy.REBASE, print)
manager.push_task("PROJ-123", print)
manager.remove("PROJ-123", force=False, delete_branches=True)
```

`TaskManager` has these further methods:

- `add`, which takes `AddParams`,
- `list`,
- `repos(refresh)`,
- `sync_service`,
- `push_service`,
- `stash_service(task_id, service_name, pop, include_untracked)`,
- `remove_service`,
- `task_dir`,
- `resolve_branch_name`.

The branch name is the prefix followed by the task ID. When `InitParams` has no
`branch_prefix`, the prefix from the configuration is used. Whenever worktrees
are added, the manager writes the workspace file again and calls the solution
generator.

`wtui.domain.validate_task_id` checks task IDs. An empty ID raises
`TaskNotFoundError`. An ID that is `.`, that contains `..`, or that contains any
of `/ \ < > : " | ? *` raises `InvalidTaskIDError`.

### Errors

Failures raise exceptions from `wtui.errors`. All of them derive from
`TaskError`:

- `TaskNotFoundError`
- `TaskExistsError`
- `ServiceNotFoundError`
- `InvalidTaskIDError`
- `RemoteBranchConflictError`
- `WorktreeSetupError`

`init` and `add` raise `WorktreeSetupError` in two cases:

- any service hits a remote branch conflict,
- services were requested but none was added.

If `init` added nothing, it removes the task directory it created. `add` never
removes the task directory.

### Remote branch conflicts

A conflict occurs when the task branch exists on the remote but not locally. In
that case `WorktreeSetupError.conflict()` returns the `RemoteBranchConflictError`,
which carries `task_id`, `service_name`, `branch_name` and `repo_path`.

To resolve it, call `init` (or `add`) again. In `remote_branch_strategies`, give
a `wtui.strategy.RemoteBranchStrategy` for the affected service:

- `FETCH_AND_SWITCH` tracks the remote branch.
- `NEW_BRANCH` creates the branch plus the suffix from `branch_suffixes`.
- `CANCEL` skips the service.

`init` accepts an existing task directory only when strategies are given.

### Syncing and pushing

The `SyncStrategy` values behave as follows:

- `SyncStrategy.MERGE` merges `origin/<base branch>` into each worktree.
- `SyncStrategy.REBASE` rebases each worktree onto `origin/<base branch>`.
- `SyncStrategy.NOOP` only reports `sync skipped.`.

If the configuration names no base branch, `develop` is used.

Syncing first fetches each worktree. It skips a worktree in these cases:

- the worktree is missing,
- the worktree is dirty,
- the worktree is already up to date.

Task-wide sync and push work on all services concurrently. They try every
service and then raise the first failure. Progress lines go to the callback you
pass.

## Terminal interface pieces

`wtui.tui` holds building blocks for a terminal interface:

- `wtui.tui.focus.FocusPanel` handles panel focus and cycling.
- `wtui.tui.keymap.default_keymap` returns the global key bindings.
- `wtui.tui.commands` holds background commands and the messages they return.
  - Streaming operations return a `Batch` whose output is read with
    `read_next_line`.
  - `ExecCommand.run` starts an external program: `rider`, the configured
    editor, or `lazygit`.
- `wtui.tui.chrome` has `render_header(width)` and
  `render_footer(focus, lazygit_available, op_running, spinner_frame)`.
- `wtui.tui.log_overlay.LogOverlay` is a scrollable viewer for a JSON-lines log.
  - It shows records whose `msg` starts with `exec ` as `HH:MM:SS $ argv`.
  - It can filter them by `task_id`.

## What the package does not do

- There is no command to run and no interactive application. The `wtui.tui`
  pieces are not assembled into a screen or event loop.
- No `GitClient`, `Resolver` or `SlnGenerator` implementation is included. You
  must supply the code that runs git, discovers repositories and writes
  solution files.
- Configuration is not loaded from any file. You construct `Config` yourself.
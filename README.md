# ghdash

Building blocks for a dashboard of GitHub pull requests and issues.
Sections are defined in a YAML file, each one a saved search. The package
fetches them through `gh api graphql`, lays them out as plain-text tables,
and runs the usual `gh` actions on the selected row: for pull requests
close, reopen, mark ready, merge, diff and check out; for issues close and
reopen.

`gh` must be installed and logged in for fetching and for the actions.

## What the package does not do

There is no interactive terminal program and no command to start one. The
package has no main screen, event loop, footer, help screen or preview
panel. It does not comment on or assign pull requests and issues, does not
run user-defined keybinding commands, does not copy to the clipboard and
does not open pages in a browser. The pieces below are meant to be driven
by your own code.

## Configuration

`ghdash.config.parse_config(path=None, environ=None)` loads the
configuration:

1. if `path` is given, that file is read;
2. otherwise the file named by `GH_DASH_CONFIG` is used, or, when that is
   unset, `$XDG_CONFIG_HOME/gh-dash/config.yml` (falling back to
   `$HOME/.config/gh-dash/config.yml`). The chosen file, and its
   directory, are created with the default contents if missing.

`environ` replaces `os.environ` for these lookups. Values from the file are
laid over the defaults and then validated: colours under `theme.colors`
must be hex colours, and column widths under `defaults.layout` must be
positive. Any failure is raised as `ParsingError`; its `err` attribute
holds the cause, a `ConfigError` when the file cannot be found, created or
read, or a `ValueError` when the YAML is malformed or fails validation.
`find_existing_config_file` returns the first of these locations that
already exists, or `None`.

A small example:

```yaml
prSections:
  - title: My Pull Requests
    filters: is:open author:@me
  - title: Needs My Review
    filters: is:open review-requested:@me
issuesSections:
  - title: Assigned
    filters: is:open assignee:@me
defaults:
  prsLimit: 20
  issuesLimit: 20
  view: prs
  preview:
    open: true
    width: 50
  refetchIntervalMinutes: 30
repoPaths:
  someone/project: ~/code/project
  someone-else/*: ~/code/someone-else/*
pager:
  diff: delta
```

`default_config()` returns the defaults as a `Config`, and
`default_config_yaml()` returns them as YAML text. `config_to_dict` and
`config_from_dict` convert between `Config` and plain mappings.
`Config.full_screen_diff_pager_env()` gives the environment used for
diffs (`LESS=CRX` and `GH_PAGER` set from `pager.diff`, `less` by default).

## Local repository paths

`repoPaths` maps repositories to checkouts on disk. An exact
`owner/repo` entry wins; otherwise an `owner/*` entry is expanded with the
repository name. `ghdash.repopath.get_repo_local_path` does the lookup and
returns `None` when nothing matches:

```python
from ghdash.repopath import get_repo_local_path

paths = {"someone/project": "/src/project", "someone-else/*": "/src/someone-else/*"}
get_repo_local_path("someone-else/tool", paths)   # "/src/someone-else/tool"
get_repo_local_path("nobody/tool", paths)         # None
```

## Using the pieces

```python
from datetime import datetime, timedelta, timezone

from ghdash.config import parse_config
from ghdash.context import ProgramContext
from ghdash.prssection import fetch_all_sections
from ghdash.utils import time_elapsed

config = parse_config("my-dash.yml", {})
ctx = ProgramContext(config=config, main_content_width=120, main_content_height=30)

sections, commands = fetch_all_sections(ctx)
for command in commands:
    finished = command()                       # a TaskFinishedMsg
    if finished.err is None:
        sections[finished.section_id - 1].update(finished.msg)

print(sections[0].view())

now = datetime.now(timezone.utc)
time_elapsed(now - timedelta(days=3), now)   # "3d ago"
```

Section ids start at 1. `update` takes either a message or a key name
such as `"x"` (close), `"X"` (reopen), `"w"` (ready), `"m"` (merge),
`"d"` (diff) or `"C"` (checkout), and returns a list of callables to run.
`PrsSection` and `IssuesSection` accept a `fetcher` and a `runner` in
place of the real GraphQL search and `subprocess.run`. Checking out a pull
request whose repository has no entry in `repoPaths` sets the context's
`error` to a `RepoPathNotFoundError`.

The modules:

- `ghdash.config` – configuration schema, defaults, loading and validation;
- `ghdash.data` – GraphQL queries for pull requests, issues and the
  current user (`GhGraphQLClient`, `fetch_pull_requests`, `fetch_issues`,
  `current_login_name`) and the records they return;
- `ghdash.keys` – the key bindings and their help groups;
- `ghdash.messages` – messages passed between components;
- `ghdash.context` – shared program state and background task tracking;
- `ghdash.theme` – colours, from the defaults or the configured theme;
- `ghdash.table`, `ghdash.listviewport`, `ghdash.search`, `ghdash.tabs` –
  text layout of tables, scrolling, the search bar and the section tabs;
- `ghdash.rows` – table cells for pull requests and issues;
- `ghdash.section`, `ghdash.prssection`, `ghdash.issuessection` – the
  sections themselves, their paging and their actions;
- `ghdash.repopath`, `ghdash.utils` – repository path lookup and
  relative time formatting.
"""Dashboard configuration: schema, defaults, YAML loading and validation."""

import copy
import os
import re
import types
from dataclasses import MISSING, dataclass, field, fields, is_dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Union, get_args, get_origin

import yaml
from wcwidth import wcswidth

DASH_DIR = "gh-dash"
CONFIG_YML_FILE_NAME = "config.yml"
CONFIG_YAML_FILE_NAME = "config.yaml"
DEFAULT_XDG_CONFIG_DIRNAME = ".config"

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})")


def _field(key: str, default: Any = MISSING, *, factory: Any = MISSING, omitempty: bool = False):
    meta = {"yaml": key, "omitempty": omitempty}
    if factory is not MISSING:
        return field(default_factory=factory, metadata=meta)
    return field(default=default, metadata=meta)


class ViewType(str, Enum):
    PRS = "prs"
    ISSUES = "issues"


@dataclass
class SectionConfig:
    title: str = _field("title", "")
    filters: str = _field("filters", "")
    limit: Optional[int] = _field("limit", None, omitempty=True)


@dataclass
class ColumnConfig:
    width: Optional[int] = _field("width", None, omitempty=True)
    hidden: Optional[bool] = _field("hidden", None, omitempty=True)


@dataclass
class PrsLayoutConfig:
    updated_at: ColumnConfig = _field("updatedAt", factory=ColumnConfig, omitempty=True)
    repo: ColumnConfig = _field("repo", factory=ColumnConfig, omitempty=True)
    author: ColumnConfig = _field("author", factory=ColumnConfig, omitempty=True)
    assignees: ColumnConfig = _field("assignees", factory=ColumnConfig, omitempty=True)
    title: ColumnConfig = _field("title", factory=ColumnConfig, omitempty=True)
    base: ColumnConfig = _field("base", factory=ColumnConfig, omitempty=True)
    review_status: ColumnConfig = _field("reviewStatus", factory=ColumnConfig, omitempty=True)
    state: ColumnConfig = _field("state", factory=ColumnConfig, omitempty=True)
    ci: ColumnConfig = _field("ci", factory=ColumnConfig, omitempty=True)
    lines: ColumnConfig = _field("lines", factory=ColumnConfig, omitempty=True)


@dataclass
class IssuesLayoutConfig:
    updated_at: ColumnConfig = _field("updatedAt", factory=ColumnConfig, omitempty=True)
    state: ColumnConfig = _field("state", factory=ColumnConfig, omitempty=True)
    repo: ColumnConfig = _field("repo", factory=ColumnConfig, omitempty=True)
    title: ColumnConfig = _field("title", factory=ColumnConfig, omitempty=True)
    creator: ColumnConfig = _field("creator", factory=ColumnConfig, omitempty=True)
    assignees: ColumnConfig = _field("assignees", factory=ColumnConfig, omitempty=True)
    comments: ColumnConfig = _field("comments", factory=ColumnConfig, omitempty=True)
    reactions: ColumnConfig = _field("reactions", factory=ColumnConfig, omitempty=True)


@dataclass
class PrsSectionConfig:
    title: str = _field("title", "")
    filters: str = _field("filters", "")
    limit: Optional[int] = _field("limit", None, omitempty=True)
    layout: PrsLayoutConfig = _field("layout", factory=PrsLayoutConfig, omitempty=True)

    def to_section_config(self) -> SectionConfig:
        return SectionConfig(title=self.title, filters=self.filters, limit=self.limit)


@dataclass
class IssuesSectionConfig:
    title: str = _field("title", "")
    filters: str = _field("filters", "")
    limit: Optional[int] = _field("limit", None, omitempty=True)
    layout: IssuesLayoutConfig = _field("layout", factory=IssuesLayoutConfig, omitempty=True)

    def to_section_config(self) -> SectionConfig:
        return SectionConfig(title=self.title, filters=self.filters, limit=self.limit)


@dataclass
class PreviewConfig:
    open: bool = _field("open", False)
    width: int = _field("width", 0)


@dataclass
class LayoutConfig:
    prs: PrsLayoutConfig = _field("prs", factory=PrsLayoutConfig, omitempty=True)
    issues: IssuesLayoutConfig = _field("issues", factory=IssuesLayoutConfig, omitempty=True)


@dataclass
class Defaults:
    preview: PreviewConfig = _field("preview", factory=PreviewConfig)
    prs_limit: int = _field("prsLimit", 0)
    issues_limit: int = _field("issuesLimit", 0)
    view: ViewType = _field("view", ViewType.PRS)
    layout: LayoutConfig = _field("layout", factory=LayoutConfig, omitempty=True)
    refetch_interval_minutes: int = _field("refetchIntervalMinutes", 0, omitempty=True)


@dataclass
class Keybinding:
    key: str = _field("key", "")
    command: str = _field("command", "")


@dataclass
class Keybindings:
    issues: list[Keybinding] = _field("issues", factory=list)
    prs: list[Keybinding] = _field("prs", factory=list)


@dataclass
class Pager:
    diff: str = _field("diff", "")


@dataclass
class ColorThemeText:
    primary: str = _field("primary", "")
    secondary: str = _field("secondary", "")
    inverted: str = _field("inverted", "")
    faint: str = _field("faint", "")
    warning: str = _field("warning", "")
    success: str = _field("success", "")


@dataclass
class ColorThemeBorder:
    primary: str = _field("primary", "")
    secondary: str = _field("secondary", "")
    faint: str = _field("faint", "")


@dataclass
class ColorThemeBackground:
    selected: str = _field("selected", "")


@dataclass
class ColorTheme:
    text: ColorThemeText = _field("text", factory=ColorThemeText)
    background: ColorThemeBackground = _field("background", factory=ColorThemeBackground)
    border: ColorThemeBorder = _field("border", factory=ColorThemeBorder)


@dataclass
class TableUIThemeConfig:
    show_separator: bool = _field("showSeparator", False)


@dataclass
class UIThemeConfig:
    table: TableUIThemeConfig = _field("table", factory=TableUIThemeConfig)


@dataclass
class ThemeConfig:
    ui: UIThemeConfig = _field("ui", factory=UIThemeConfig, omitempty=True)
    colors: Optional[ColorTheme] = _field("colors", None, omitempty=True)


@dataclass
class Config:
    pr_sections: list[PrsSectionConfig] = _field("prSections", factory=list)
    issues_sections: list[IssuesSectionConfig] = _field("issuesSections", factory=list)
    defaults: Defaults = _field("defaults", factory=Defaults)
    keybindings: Keybindings = _field("keybindings", factory=Keybindings)
    repo_paths: dict[str, str] = _field("repoPaths", factory=dict)
    theme: Optional[ThemeConfig] = _field("theme", None, omitempty=True)
    pager: Pager = _field("pager", factory=Pager)

    def full_screen_diff_pager_env(self, environ: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        """Environment for running a diff in a full-screen pager."""
        diff = self.pager.diff or "less"
        if diff == "delta":
            diff = "delta --paging always"
        env = dict(os.environ if environ is None else environ)
        env["LESS"] = "CRX"
        env["GH_PAGER"] = diff
        return env


class ConfigError(Exception):
    """No usable configuration file could be found or created."""

    def __init__(self, config_dir: str, err: BaseException):
        self.config_dir = config_dir
        self.err = err
        location = os.path.join(config_dir, DASH_DIR, CONFIG_YML_FILE_NAME)
        super().__init__(
            "Couldn't find a config.yml or a config.yaml configuration file.\n"
            f"Create one under: {location}\n\n"
            "Example of a config.yml file:\n"
            f"{default_config_yaml()}\n\n"
            "press q to exit.\n\n"
            f"Original error: {err}"
        )


class ParsingError(Exception):
    """The configuration could not be loaded."""

    def __init__(self, err: BaseException):
        self.err = err
        super().__init__(f"failed parsing config.yml: {err}")


def _text_width(text: str) -> int:
    return max(wcswidth(text), 0)


def default_config() -> Config:
    """The configuration used when nothing overrides it."""
    return Config(
        defaults=Defaults(
            preview=PreviewConfig(open=True, width=50),
            prs_limit=20,
            issues_limit=20,
            view=ViewType.PRS,
            refetch_interval_minutes=30,
            layout=LayoutConfig(
                prs=PrsLayoutConfig(
                    updated_at=ColumnConfig(width=_text_width("2mo ago")),
                    repo=ColumnConfig(width=15),
                    author=ColumnConfig(width=15),
                    assignees=ColumnConfig(width=20, hidden=True),
                    base=ColumnConfig(width=15, hidden=True),
                    lines=ColumnConfig(width=_text_width("123450 / -123450")),
                ),
                issues=IssuesLayoutConfig(
                    updated_at=ColumnConfig(width=_text_width("2mo ago")),
                    repo=ColumnConfig(width=15),
                    creator=ColumnConfig(width=10),
                    assignees=ColumnConfig(width=20, hidden=True),
                ),
            ),
        ),
        pr_sections=[
            PrsSectionConfig(title="My Pull Requests", filters="is:open author:@me"),
            PrsSectionConfig(title="Needs My Review", filters="is:open review-requested:@me"),
            PrsSectionConfig(title="Involved", filters="is:open involves:@me -author:@me"),
        ],
        issues_sections=[
            IssuesSectionConfig(title="My Issues", filters="is:open author:@me"),
            IssuesSectionConfig(title="Assigned", filters="is:open assignee:@me"),
            IssuesSectionConfig(title="Involved", filters="is:open involves:@me -author:@me"),
        ],
        keybindings=Keybindings(issues=[], prs=[]),
        repo_paths={},
        theme=ThemeConfig(ui=UIThemeConfig(table=TableUIThemeConfig(show_separator=True))),
    )


def _optional_inner(tp: Any) -> Any:
    if get_origin(tp) in (Union, types.UnionType):
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return None


def _is_enum(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, Enum)


def _zero(tp: Any) -> Any:
    origin = get_origin(tp)
    if origin is list:
        return []
    if origin is dict:
        return {}
    if is_dataclass(tp):
        return tp()
    if _is_enum(tp):
        return next(iter(tp))
    return tp()


def _type_error(value: Any, where: str) -> ValueError:
    return ValueError(f"cannot unmarshal {value!r} into {where}")


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _decode(tp: Any, value: Any, current: Any, where: str) -> Any:
    inner = _optional_inner(tp)
    if inner is not None:
        if value is None:
            return None
        return _decode(inner, value, current, where)
    if value is None:
        return _zero(tp)

    origin = get_origin(tp)
    if origin is list:
        (elem_tp,) = get_args(tp)
        if not isinstance(value, list):
            raise _type_error(value, where)
        return [_decode(elem_tp, item, None, f"{where}[{i}]") for i, item in enumerate(value)]
    if origin is dict:
        _, value_tp = get_args(tp)
        if not isinstance(value, dict):
            raise _type_error(value, where)
        merged = dict(current or {})
        for raw_key, item in value.items():
            key = _scalar_text(raw_key)
            merged[key] = _decode(value_tp, item, None, f"{where}.{key}")
        return merged
    if is_dataclass(tp):
        return _decode_struct(tp, value, current if current is not None else tp(), where)
    if _is_enum(tp):
        try:
            return tp(value)
        except ValueError:
            raise _type_error(value, where) from None
    if tp is bool:
        if isinstance(value, bool):
            return value
        raise _type_error(value, where)
    if tp is int:
        if isinstance(value, bool):
            raise _type_error(value, where)
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise _type_error(value, where)
    if tp is str:
        if isinstance(value, (list, dict)):
            raise _type_error(value, where)
        return _scalar_text(value)
    raise _type_error(value, where)


def _decode_struct(cls: Any, value: Any, current: Any, where: str) -> Any:
    if not isinstance(value, dict):
        raise _type_error(value, where)
    updates = {}
    for f in fields(cls):
        key = f.metadata.get("yaml", f.name)
        if key in value:
            updates[f.name] = _decode(f.type, value[key], getattr(current, f.name), f"{where}.{key}")
    return replace(current, **updates)


def config_from_dict(data: Any, base: Optional[Config] = None) -> Config:
    """Overlay a parsed YAML mapping onto ``base`` (the defaults if omitted)."""
    config = copy.deepcopy(base) if base is not None else default_config()
    if data is None:
        return config
    return _decode_struct(Config, data, config, "config")


def _is_zero(tp: Any, value: Any) -> bool:
    if _optional_inner(tp) is not None:
        return value is None
    if is_dataclass(value):
        return all(_is_zero(f.type, getattr(value, f.name)) for f in fields(value))
    if isinstance(value, Enum):
        return value.value == ""
    return not value


def _encode(tp: Any, value: Any) -> Any:
    inner = _optional_inner(tp)
    if inner is not None:
        return None if value is None else _encode(inner, value)
    if is_dataclass(value):
        out = {}
        for f in fields(value):
            item = getattr(value, f.name)
            if f.metadata.get("omitempty") and _is_zero(f.type, item):
                continue
            out[f.metadata.get("yaml", f.name)] = _encode(f.type, item)
        return out
    if isinstance(value, Enum):
        return value.value
    origin = get_origin(tp)
    if origin is list:
        (elem_tp,) = get_args(tp)
        return [_encode(elem_tp, item) for item in value]
    if origin is dict:
        _, value_tp = get_args(tp)
        return {key: _encode(value_tp, item) for key, item in value.items()}
    return value


def config_to_dict(config: Config) -> dict[str, Any]:
    """Plain mapping of ``config`` as it is written to YAML."""
    return _encode(Config, config)


def default_config_yaml() -> str:
    """YAML text of the default configuration."""
    return yaml.safe_dump(
        config_to_dict(default_config()),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


def _violation(namespace: str, name: str, tag: str) -> str:
    return f"Key: '{namespace}' Error:Field validation for '{name}' failed on the '{tag}' tag"


def validate_config(config: Config) -> None:
    """Raise ValueError listing every constraint ``config`` breaks."""
    problems = []
    layout = config.defaults.layout
    for group_name, group in (("prs", layout.prs), ("issues", layout.issues)):
        for f in fields(group):
            column = getattr(group, f.name)
            if column.width is not None and column.width <= 0:
                namespace = f"Config.defaults.layout.{group_name}.{f.metadata['yaml']}.width"
                problems.append(_violation(namespace, "width", "gt"))

    if config.theme is not None and config.theme.colors is not None:
        colors = config.theme.colors
        for part_field in fields(colors):
            part = getattr(colors, part_field.name)
            for color_field in fields(part):
                if not _HEX_COLOR.fullmatch(getattr(part, color_field.name)):
                    key = color_field.metadata["yaml"]
                    namespace = f"Config.theme.colors.{part_field.metadata['yaml']}.{key}"
                    problems.append(_violation(namespace, key, "hexcolor"))

    if problems:
        raise ValueError("\n".join(problems))


def _environ(environ: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def _xdg_config_dir(env: Mapping[str, str]) -> Path:
    xdg = env.get("XDG_CONFIG_HOME", "")
    if xdg:
        return Path(xdg)
    home = env.get("HOME") or str(Path.home())
    return Path(home) / DEFAULT_XDG_CONFIG_DIRNAME


def find_existing_config_file(environ: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """First existing file among $GH_DASH_CONFIG and the XDG config locations."""
    env = _environ(environ)
    dash_dir = _xdg_config_dir(env) / DASH_DIR
    candidates = (
        env.get("GH_DASH_CONFIG", ""),
        str(dash_dir / CONFIG_YML_FILE_NAME),
        str(dash_dir / CONFIG_YAML_FILE_NAME),
    )
    for candidate in candidates:
        if candidate and Path(candidate).exists():
            return Path(candidate)
    return None


def _create_config_file_if_missing(path: Path) -> None:
    if not path.exists():
        with path.open("x", encoding="utf-8") as handle:
            handle.write(default_config_yaml())


def default_config_file_or_create(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Path of the default config file, writing the defaults there if it is missing."""
    env = _environ(environ)
    override = env.get("GH_DASH_CONFIG", "")
    if override:
        config_file = Path(override)
    else:
        config_file = _xdg_config_dir(env) / DASH_DIR / CONFIG_YML_FILE_NAME

    config_dir = config_file.parent
    if not config_dir.exists():
        try:
            config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise ConfigError(str(config_dir), err) from err

    try:
        _create_config_file_if_missing(config_file)
    except OSError as err:
        raise ConfigError(str(config_dir), err) from err
    return config_file


def read_config_file(path: Union[str, Path]) -> Config:
    """Load ``path`` over the defaults and validate the result."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigError(str(path), err) from err
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise ValueError(f"yaml: {err}") from err
    config = config_from_dict(data, default_config())
    validate_config(config)
    return config


def parse_config(
    path: Union[str, Path, None] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """Load the configuration from ``path`` or from the default location."""
    if path:
        config_file: Union[str, Path] = path
    else:
        try:
            config_file = default_config_file_or_create(environ)
        except ConfigError as err:
            raise ParsingError(err) from err
    try:
        return read_config_file(config_file)
    except (ConfigError, ValueError) as err:
        raise ParsingError(err) from err


def merge_column_configs(default_cfg: ColumnConfig, section_cfg: ColumnConfig) -> ColumnConfig:
    """Section settings win over the defaults wherever they are set."""
    merged = replace(default_cfg)
    if section_cfg.width is not None:
        merged.width = section_cfg.width
    if section_cfg.hidden is not None:
        merged.hidden = section_cfg.hidden
    return merged
import pytest
import yaml

from ghdash.config import (
    CONFIG_YAML_FILE_NAME,
    CONFIG_YML_FILE_NAME,
    DASH_DIR,
    ColorTheme,
    ColorThemeBackground,
    ColorThemeBorder,
    ColorThemeText,
    ColumnConfig,
    Config,
    ConfigError,
    IssuesSectionConfig,
    Pager,
    ParsingError,
    PreviewConfig,
    PrsLayoutConfig,
    PrsSectionConfig,
    ThemeConfig,
    ViewType,
    config_from_dict,
    config_to_dict,
    default_config,
    default_config_file_or_create,
    default_config_yaml,
    find_existing_config_file,
    merge_column_configs,
    parse_config,
    read_config_file,
    validate_config,
)


def _valid_colors():
    return ColorTheme(
        text=ColorThemeText(
            primary="#E2E1ED",
            secondary="#666CA6",
            inverted="#242347",
            faint="#3E4057",
            warning="#F23D5C",
            success="#3DF294",
        ),
        background=ColorThemeBackground(selected="#39386B"),
        border=ColorThemeBorder(primary="#383B5B", secondary="#39386B", faint="#2B2B40"),
    )


def test_default_sections():
    cfg = default_config()
    assert [s.title for s in cfg.pr_sections] == ["My Pull Requests", "Needs My Review", "Involved"]
    assert [s.title for s in cfg.issues_sections] == ["My Issues", "Assigned", "Involved"]
    assert cfg.pr_sections[0].filters == "is:open author:@me"
    assert cfg.defaults.view is ViewType.PRS
    assert cfg.theme.ui.table.show_separator is True


def test_default_widths_follow_text_width():
    layout = default_config().defaults.layout
    assert layout.prs.updated_at.width == len("2mo ago")
    assert layout.prs.lines.width == len("123450 / -123450")
    assert layout.prs.assignees.hidden is True
    assert layout.prs.title == ColumnConfig()


def test_default_yaml_round_trip():
    data = yaml.safe_load(default_config_yaml())
    assert config_from_dict(data, Config()) == default_config()


def test_config_to_dict_omits_empty_values():
    data = config_to_dict(default_config())
    assert "limit" not in data["prSections"][0]
    assert "layout" not in data["prSections"][0]
    assert "colors" not in data["theme"]
    assert data["repoPaths"] == {}
    assert data["keybindings"] == {"issues": [], "prs": []}
    assert data["defaults"]["view"] == "prs"
    assert "title" not in data["defaults"]["layout"]["prs"]
    assert data["pager"] == {"diff": ""}


def test_overlay_keeps_unset_defaults():
    cfg = config_from_dict({"defaults": {"preview": {"width": 80}}})
    defaults = default_config().defaults
    assert cfg.defaults.preview.width == 80
    assert cfg.defaults.preview.open is defaults.preview.open
    assert cfg.defaults.prs_limit == defaults.prs_limit
    assert cfg.pr_sections == default_config().pr_sections


def test_sections_replace_defaults():
    cfg = config_from_dict(
        {"prSections": [{"title": "Mine", "filters": "is:open", "limit": 5, "layout": {"repo": {"hidden": True}}}]}
    )
    assert len(cfg.pr_sections) == 1
    section = cfg.pr_sections[0]
    assert section.limit == 5
    assert section.layout.repo.hidden is True
    assert section.layout.repo.width is None
    assert section.to_section_config().title == "Mine"


def test_null_resets_to_zero_value():
    cfg = config_from_dict({"defaults": {"preview": None}, "theme": None})
    assert cfg.defaults.preview == PreviewConfig()
    assert cfg.theme is None


def test_repo_paths_merge_into_base():
    base = default_config()
    base.repo_paths = {"user/repo": "/path/to/user/repo"}
    cfg = config_from_dict({"repoPaths": {"user_2/*": "/path/to/user_2/*"}}, base)
    assert cfg.repo_paths == {"user/repo": "/path/to/user/repo", "user_2/*": "/path/to/user_2/*"}
    assert base.repo_paths == {"user/repo": "/path/to/user/repo"}


def test_wrong_type_raises():
    with pytest.raises(ValueError):
        config_from_dict({"defaults": {"prsLimit": "many"}})
    with pytest.raises(ValueError):
        config_from_dict({"prSections": {"title": "not a list"}})
    with pytest.raises(ValueError):
        config_from_dict(["not", "a", "mapping"])


def test_scalar_into_string_field():
    assert config_from_dict({"pager": {"diff": 5}}).pager.diff == "5"


def test_view_type_parsing():
    assert config_from_dict({"defaults": {"view": "issues"}}).defaults.view is ViewType.ISSUES
    with pytest.raises(ValueError):
        config_from_dict({"defaults": {"view": "board"}})


def test_keybindings_parsed():
    cfg = config_from_dict({"keybindings": {"prs": [{"key": "v", "command": "code {{.RepoPath}}"}]}})
    assert cfg.keybindings.prs[0].key == "v"
    assert cfg.keybindings.prs[0].command == "code {{.RepoPath}}"
    assert cfg.keybindings.issues == []


def test_validate_rejects_non_positive_width():
    cfg = config_from_dict({"defaults": {"layout": {"prs": {"repo": {"width": 0}}}}})
    with pytest.raises(ValueError, match="'gt' tag"):
        validate_config(cfg)


def test_validate_colors():
    cfg = default_config()
    cfg.theme = ThemeConfig(colors=_valid_colors())
    validate_config(cfg)
    assert cfg.theme.colors.text.primary == "#E2E1ED"
    cfg.theme.colors.text.primary = "blue"
    with pytest.raises(ValueError, match="hexcolor"):
        validate_config(cfg)


def test_read_config_file(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("pager:\n  diff: delta\nrepoPaths:\n  user/repo: /src/repo\n", encoding="utf-8")
    cfg = read_config_file(path)
    assert cfg.pager.diff == "delta"
    assert cfg.repo_paths == {"user/repo": "/src/repo"}
    assert cfg.defaults == default_config().defaults


def test_read_missing_file_raises_config_error(tmp_path):
    missing = tmp_path / "nope.yml"
    with pytest.raises(ConfigError) as info:
        read_config_file(missing)
    assert info.value.config_dir == str(missing)
    assert "Create one under:" in str(info.value)
    assert default_config_yaml() in str(info.value)


def test_parse_config_wraps_errors(tmp_path):
    with pytest.raises(ParsingError) as info:
        parse_config(tmp_path / "nope.yml")
    assert isinstance(info.value.err, ConfigError)
    assert str(info.value).startswith("failed parsing config.yml: ")


def test_parse_config_invalid_yaml(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("defaults: [unclosed\n", encoding="utf-8")
    with pytest.raises(ParsingError):
        parse_config(path)


def test_parse_config_creates_default_file(tmp_path):
    cfg = parse_config(None, {"XDG_CONFIG_HOME": str(tmp_path)})
    created = tmp_path / DASH_DIR / CONFIG_YML_FILE_NAME
    assert created.read_text(encoding="utf-8") == default_config_yaml()
    assert cfg == default_config()


def test_gh_dash_config_env_creates_nested_file(tmp_path):
    target = tmp_path / "a" / "b" / "dash.yml"
    path = default_config_file_or_create({"GH_DASH_CONFIG": str(target)})
    assert path == target
    assert target.exists()


def test_existing_file_is_not_overwritten(tmp_path):
    target = tmp_path / "dash.yml"
    target.write_text("pager:\n  diff: less\n", encoding="utf-8")
    default_config_file_or_create({"GH_DASH_CONFIG": str(target)})
    assert target.read_text(encoding="utf-8") == "pager:\n  diff: less\n"


def test_find_existing_config_file(tmp_path):
    env = {"XDG_CONFIG_HOME": str(tmp_path), "GH_DASH_CONFIG": ""}
    assert find_existing_config_file(env) is None

    dash_dir = tmp_path / DASH_DIR
    dash_dir.mkdir()
    yaml_file = dash_dir / CONFIG_YAML_FILE_NAME
    yaml_file.write_text("", encoding="utf-8")
    assert find_existing_config_file(env) == yaml_file

    yml_file = dash_dir / CONFIG_YML_FILE_NAME
    yml_file.write_text("", encoding="utf-8")
    assert find_existing_config_file(env) == yml_file

    override = tmp_path / "custom.yml"
    override.write_text("", encoding="utf-8")
    env["GH_DASH_CONFIG"] = str(override)
    assert find_existing_config_file(env) == override


def test_pager_env_defaults_to_less():
    env = Config().full_screen_diff_pager_env({"PATH": "/bin"})
    assert env == {"PATH": "/bin", "LESS": "CRX", "GH_PAGER": "less"}


def test_pager_env_delta_and_custom():
    delta = Config(pager=Pager(diff="delta")).full_screen_diff_pager_env({})
    assert delta["GH_PAGER"] == "delta --paging always"
    custom = Config(pager=Pager(diff="bat")).full_screen_diff_pager_env({"GH_PAGER": "old"})
    assert custom["GH_PAGER"] == "bat"


def test_merge_column_configs():
    default = ColumnConfig(width=15, hidden=True)
    assert merge_column_configs(default, ColumnConfig()) == default
    assert merge_column_configs(default, ColumnConfig(hidden=False)) == ColumnConfig(width=15, hidden=False)
    assert merge_column_configs(default, ColumnConfig(width=3)) == ColumnConfig(width=3, hidden=True)
    assert default == ColumnConfig(width=15, hidden=True)


def test_to_section_config():
    prs = PrsSectionConfig(title="T", filters="is:open", limit=7, layout=PrsLayoutConfig())
    issues = IssuesSectionConfig(title="I", filters="label:bug")
    assert prs.to_section_config().limit == 7
    assert prs.to_section_config().filters == "is:open"
    assert issues.to_section_config().limit is None
    assert issues.to_section_config().title == "I"
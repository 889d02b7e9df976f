from dataclasses import replace
from datetime import datetime

from ghdash.config import SectionConfig, default_config
from ghdash.context import ProgramContext
from ghdash.data import Assignee, PageInfo
from ghdash.section import Section, SectionMsg, add_assignees, remove_assignees
from ghdash.table import Column


def make_section(width=100, height=30, filters="is:open"):
    ctx = ProgramContext(config=default_config(), main_content_width=width, main_content_height=height)
    cfg = SectionConfig(title="Mine", filters=filters)
    columns = [Column("A", width=5), Column("B", grow=True)]
    return Section(1, ctx, cfg, "pr", columns, "PR", "PRs", datetime(2023, 1, 2, 3, 4, 5))


def test_dimensions_follow_context_width():
    small = make_section(width=80).dimensions()
    large = make_section(width=90).dimensions()
    assert large.width - small.width == 10
    assert large.height == small.height


def test_filters_start_from_config_and_reset():
    section = make_section(filters="is:open author:@me")
    assert section.filters() == "is:open author:@me"
    section.search_bar.set_value("other")
    assert section.filters() == "other"
    section.reset_filters()
    assert section.filters() == "is:open author:@me"


def test_set_is_searching_toggles_focus():
    section = make_section()
    section.set_is_searching(True)
    assert section.is_searching is True
    assert section.search_bar.focused is True
    section.set_is_searching(False)
    assert section.is_searching is False
    assert section.search_bar.focused is False


def test_reset_page_info():
    section = make_section()
    section.page_info = PageInfo(has_next_page=True)
    section.reset_page_info()
    assert section.page_info is None


def test_pager_content_empty_without_items():
    assert make_section().pager_content() == ""


def test_pager_content_reports_position_and_counts():
    section = make_section()
    section.table.set_rows([["a", "b"], ["c", "d"]])
    section.total_count = 5
    content = section.pager_content()
    assert "PR 1/5" in content
    assert content.endswith("Fetched 2")
    assert "01/02 03:04:05" in content


def test_main_content_tip_before_rows_then_table():
    section = make_section()
    assert "Tip:" in section.main_content()
    section.table.set_rows([["a", "b"]])
    assert section.main_content() == section.table.view()


def test_navigation_stays_within_rows():
    section = make_section()
    section.table.set_rows([["a", "b"], ["c", "d"], ["e", "f"]])
    assert section.curr_row_index() == 0
    assert section.next_row() == 1
    assert section.next_row() == 2
    assert section.next_row() == 2
    assert section.prev_row() == 1
    assert section.first_item() == 0
    assert section.last_item() == 2


def test_view_contains_search_prompt():
    view = make_section().view()
    assert " is:pr " in view
    assert "Tip:" in view


def test_update_program_context_resizes_table():
    section = make_section()
    new_ctx = replace(section.ctx, main_content_width=60, main_content_height=20)
    section.update_program_context(new_ctx)
    dims = section.dimensions()
    assert section.ctx is new_ctx
    assert section.table.dimensions.width == dims.width
    assert section.table.dimensions.height == dims.height - 2


def test_make_section_cmd_wraps_result():
    section = make_section()
    assert section.make_section_cmd(None) is None
    cmd = section.make_section_cmd(lambda: "payload")
    assert cmd() == SectionMsg(id=1, type="pr", internal_msg="payload")


def test_add_assignees_skips_duplicates():
    current = [Assignee("alice")]
    result = add_assignees(current, [Assignee("alice"), Assignee("bob")])
    assert result == [Assignee("alice"), Assignee("bob")]
    assert current == [Assignee("alice")]


def test_remove_assignees():
    current = [Assignee("alice"), Assignee("bob"), Assignee("carol")]
    assert remove_assignees(current, [Assignee("bob")]) == [Assignee("alice"), Assignee("carol")]
    assert remove_assignees(current, []) == current
import dataclasses

import pytest

from ghdash.config import default_config
from ghdash.messages import ClearTaskMsg, Dimensions, ErrMsg, InitMsg, TaskFinishedMsg


def test_err_msg_text_is_error_text():
    err = ValueError("something broke")
    assert str(ErrMsg(err)) == "something broke"
    assert ErrMsg(err).err is err


def test_task_finished_defaults():
    msg = TaskFinishedMsg(task_id="t1")
    assert msg.section_id == 0
    assert msg.section_type == ""
    assert msg.err is None
    assert msg.msg is None


def test_task_finished_carries_inner_message():
    inner = ClearTaskMsg(task_id="t1")
    msg = TaskFinishedMsg(task_id="t1", section_id=2, section_type="pr", msg=inner)
    assert msg.msg == inner
    assert msg.section_type == "pr"


def test_dimensions_are_values():
    assert Dimensions(10, 20) == Dimensions(width=10, height=20)
    with pytest.raises(dataclasses.FrozenInstanceError):
        Dimensions(1, 2).width = 3


def test_init_msg_holds_config():
    config = default_config()
    assert InitMsg(config).config is config
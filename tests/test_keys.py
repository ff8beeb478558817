import pytest

from rakukan.actions import UserAction, UserActionKind
from rakukan.keys import (
    CandidateN,
    KeyAction,
    KeySpec,
    name_to_vk,
    parse_action,
    to_user_action,
)


@pytest.mark.parametrize(
    "name, vk",
    [
        ("space", 0x20),
        ("enter", 0x0D),
        ("return", 0x0D),
        ("f10", 0x79),
        ("henkan", 0x1C),
        ("muhenkan", 0x1D),
        ("hiragana_key", 0xF2),
        ("caps", 0x14),
    ],
)
def test_name_to_vk_known(name, vk):
    assert name_to_vk(name) == vk


def test_zenkaku_aliases_share_code():
    assert {name_to_vk(n) for n in ("zenkaku", "hankaku", "kanji")} == {0xF3}


def test_function_keys_are_consecutive():
    codes = [name_to_vk(f"f{i}") for i in range(1, 13)]
    assert codes == list(range(codes[0], codes[0] + 12))


def test_name_to_vk_unknown_and_case_sensitive():
    assert name_to_vk("j") is None
    assert name_to_vk("Space") is None


def test_parse_with_modifiers():
    assert KeySpec.parse("Ctrl+Space") == KeySpec(vk=0x20, ctrl=True)
    assert KeySpec.parse(" shift + tab ") == KeySpec(vk=0x09, shift=True)
    assert KeySpec.parse("CONTROL+ALT+caps") == KeySpec(vk=0x14, ctrl=True, alt=True)


def test_parse_plain_key():
    assert KeySpec.parse("Escape") == KeySpec(vk=0x1B)


@pytest.mark.parametrize("text", ["Ctrl+J", "Ctrl+Shift", "Ctrl+", "", "Bogus"])
def test_parse_rejects(text):
    assert KeySpec.parse(text) is None


def test_keyspec_hashable_as_dict_key():
    table = {KeySpec.parse("Shift+Left"): "shrink"}
    assert table[KeySpec(vk=0x25, shift=True)] == "shrink"


def test_parse_action_names():
    assert parse_action("convert") is KeyAction.CONVERT
    assert parse_action("segment_extend") is KeyAction.SEGMENT_EXTEND


def test_parse_action_candidate_n():
    assert parse_action({"candidate_n": 3}) == CandidateN(3)


@pytest.mark.parametrize(
    "value",
    ["candidate_n", "bogus", {"candidate_n": 300}, {"candidate_n": "3"}, {"other": 1}, 5],
)
def test_parse_action_rejects(value):
    with pytest.raises(ValueError):
        parse_action(value)


def test_parse_action_round_trip_values():
    assert [parse_action(a.value) for a in KeyAction] == list(KeyAction)


def test_candidate_n_range():
    with pytest.raises(ValueError):
        CandidateN(256)
    with pytest.raises(ValueError):
        CandidateN(-1)


@pytest.mark.parametrize("action", list(KeyAction))
def test_to_user_action_same_name(action):
    result = to_user_action(action)
    assert result.kind.name == action.name
    assert result.char is None and result.number is None


def test_to_user_action_candidate():
    assert to_user_action(CandidateN(4)) == UserAction.candidate_select(4)
    assert to_user_action(CandidateN(4)).kind is UserActionKind.CANDIDATE_SELECT


def test_to_user_action_rejects_other():
    with pytest.raises(TypeError):
        to_user_action("convert")
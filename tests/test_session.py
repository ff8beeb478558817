import pytest

from rakukan.session import PAGE_SIZE, SessionKind, SessionState


def selecting(candidates, **kwargs):
    s = SessionState()
    s.activate_selecting(candidates, "へんかん", **kwargs)
    return s


CANDS = [f"c{i}" for i in range(20)]


def test_initial_state_is_idle():
    s = SessionState()
    assert s.kind is SessionKind.IDLE
    assert s.preedit_text() is None
    assert s.original_preedit() is None
    assert s.keys_captured is False
    assert s.current_candidate() is None


def test_preedit_and_waiting():
    s = SessionState()
    s.set_preedit("かな")
    assert s.kind is SessionKind.PREEDIT
    assert s.preedit_text() == "かな"
    assert s.waiting_info() is None
    s.set_waiting("かな", 10, 20)
    assert s.is_waiting()
    assert s.waiting_info() == ("かな", 10, 20)
    assert s.original_preedit() == "かな"
    assert s.keys_captured is False


def test_split_preedit_captures_keys():
    s = SessionState()
    s.set_split_preedit("きょう", "は")
    assert s.is_split_preedit()
    assert s.keys_captured is True
    assert s.split_target() == "きょう"
    assert s.split_remainder() == "は"
    assert s.preedit_text() == "きょう"


def test_split_shrink_and_extend_round_trip():
    s = SessionState()
    s.set_split_preedit("きょう", "は")
    assert s.split_shrink() is True
    assert s.split_target() == "きょ"
    assert s.split_remainder() == "うは"
    assert s.split_extend() is True
    assert (s.split_target(), s.split_remainder()) == ("きょう", "は")


def test_split_shrink_keeps_one_character():
    s = SessionState()
    s.set_split_preedit("き", "ょう")
    assert s.split_shrink() is False
    assert s.split_target() == "き"


def test_split_extend_empty_remainder():
    s = SessionState()
    s.set_split_preedit("きょう", "")
    assert s.split_extend() is False
    assert s.split_target() == "きょう"


def test_split_ops_outside_split_state():
    s = SessionState()
    s.set_preedit("あ")
    assert s.split_shrink() is False
    assert s.split_extend() is False
    assert s.split_target() is None


def test_activate_selecting():
    s = selecting(["今日", "京"], pos_x=3, pos_y=4, remainder="は")
    assert s.is_selecting()
    assert s.keys_captured is True
    assert s.current_candidate() == "今日"
    assert s.original_preedit() == "へんかん"
    assert s.selecting_pos() == (3, 4)
    assert s.selecting_remainder() == "は"
    assert s.take_selecting_remainder() == "は"
    assert s.selecting_remainder() == ""


def test_set_idle_clears_capture():
    s = selecting(CANDS)
    s.set_idle()
    assert s.kind is SessionKind.IDLE
    assert s.keys_captured is False
    assert s.take_selecting_remainder() == ""


def test_paging_basics():
    s = selecting(CANDS)
    assert s.page_candidates() == CANDS[:PAGE_SIZE]
    assert s.current_page() == 0
    assert s.page_info() == "1/3"
    s.next_page()
    assert s.current_candidate() == CANDS[PAGE_SIZE]
    assert s.page_candidates() == CANDS[PAGE_SIZE : 2 * PAGE_SIZE]


def test_single_page_has_no_info():
    s = selecting(CANDS[:3])
    assert s.total_pages() == 1
    assert s.page_info() == ""


def test_next_page_then_prev_page_returns():
    s = selecting(CANDS)
    s.next_page()
    s.prev_page()
    assert s.current_candidate() == CANDS[0]


def test_prev_page_wraps_to_last_page():
    s = selecting(CANDS)
    s.prev_page()
    assert s.current_page() == s.total_pages() - 1
    assert s.current_candidate() in s.page_candidates()


def test_next_page_wraps_to_first():
    s = selecting(CANDS)
    for _ in range(s.total_pages()):
        s.next_page()
    assert s.current_candidate() == CANDS[0]


def test_prev_wraps_to_last_candidate():
    s = selecting(CANDS)
    s.prev()
    assert s.current_candidate() == CANDS[-1]


def test_next_with_page_wrap_crosses_page():
    s = selecting(CANDS)
    for _ in range(PAGE_SIZE):
        s.next_with_page_wrap()
    assert s.current_candidate() == CANDS[PAGE_SIZE]
    assert s.page_selected() == 0


def test_next_with_page_wrap_cycles_all():
    s = selecting(CANDS)
    seen = []
    for _ in range(len(CANDS)):
        seen.append(s.current_candidate())
        s.next_with_page_wrap()
    assert seen == CANDS
    assert s.current_candidate() == CANDS[0]


def test_select_nth_in_page():
    s = selecting(CANDS)
    s.next_page()
    assert s.select_nth_in_page(2) is True
    assert s.current_candidate() == CANDS[PAGE_SIZE + 1]
    assert s.select_nth_in_page(0) is False


def test_select_nth_beyond_candidates():
    s = selecting(CANDS[:3])
    assert s.select_nth_in_page(4) is False
    assert s.current_candidate() == CANDS[0]


def test_empty_candidates_movement_is_noop():
    s = selecting([])
    s.next_with_page_wrap()
    s.prev()
    s.next_page()
    s.prev_page()
    assert s.total_pages() == 0
    assert s.page_candidates() == []
    assert s.current_candidate() is None


def test_punct_pending():
    s = selecting(CANDS)
    assert s.take_punct_pending() is None
    s.set_punct_pending("。")
    assert s.take_punct_pending() == "。"
    assert s.take_punct_pending() is None


def test_punct_pending_rejects_strings():
    s = selecting(CANDS)
    with pytest.raises(ValueError):
        s.set_punct_pending("。。")


def test_punct_pending_ignored_outside_selecting():
    s = SessionState()
    s.set_preedit("あ")
    s.set_punct_pending("、")
    assert s.take_punct_pending() is None
    assert s.selecting_pos() is None
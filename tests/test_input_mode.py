import pytest

from rakukan.input_mode import InputMode


@pytest.mark.parametrize("mode", [InputMode.HIRAGANA, InputMode.KATAKANA])
def test_kana_modes_are_kana(mode):
    assert mode.is_kana() is True


def test_alphanumeric_is_not_kana():
    assert InputMode.ALPHANUMERIC.is_kana() is False


@pytest.mark.parametrize(
    "mode, label",
    [
        (InputMode.HIRAGANA, "あ"),
        (InputMode.KATAKANA, "ア"),
        (InputMode.ALPHANUMERIC, "A"),
    ],
)
def test_labels(mode, label):
    assert mode.label() == label


def test_labels_are_distinct_single_characters():
    hiragana = InputMode.HIRAGANA.label()
    katakana = InputMode.KATAKANA.label()
    alphanumeric = InputMode.ALPHANUMERIC.label()
    labels = [hiragana, katakana, alphanumeric]
    assert len(set(labels)) == 3
    assert len(hiragana) == 1
    assert len(katakana) == 1
    assert len(alphanumeric) == 1


def test_round_trip_through_value():
    for mode in InputMode:
        assert InputMode(mode.value) is mode
import pytest

from hidpi_fixer.errors import ValidationError
from hidpi_fixer.models import Display, Resolution


def test_parse_valid():
    res = Resolution.parse("1920x1080")
    assert res == Resolution(1920, 1080)
    assert str(res) == "1920x1080"


def test_parse_strips_whitespace():
    assert Resolution.parse(" 2560x1440\n") == Resolution(2560, 1440)


@pytest.mark.parametrize("text", [
    "1920", "0x0", "abcxdef", "1920x1080x60", "-1920x1080", "x", "",
    "1_920x1_080", "+1920x 1080", "1920X1080", "\uff11\uff19\uff12\uff10x1080",
])
def test_parse_rejects_malformed(text):
    with pytest.raises(ValidationError):
        Resolution.parse(text)


def test_usable_floor():
    assert Resolution(640, 480).is_usable
    assert not Resolution(639, 1080).is_usable
    assert not Resolution(1920, 479).is_usable


def test_add_resolution_skips_duplicates_and_small_modes():
    d = Display(name="eDP-1")
    assert d.add_resolution(Resolution(1920, 1080))
    assert not d.add_resolution(Resolution(1920, 1080))
    assert not d.add_resolution(Resolution(320, 200))
    assert d.add_resolution(Resolution(1280, 720))
    assert d.resolution_labels == ["1920x1080", "1280x720"]

import pytest

from snowglobe.colors import darken, hex_to_bgr, lighten, parse_color


def test_hex_to_bgr_orders_channels():
    assert hex_to_bgr("#ff0000") == (0, 0, 255)
    assert hex_to_bgr("#0f0") == (0, 255, 0)


def test_parse_color_forms():
    assert parse_color("#78350f") == ((15, 53, 120), 1.0)
    assert parse_color("rgb(10, 20, 30)") == ((30, 20, 10), 1.0)
    assert parse_color("rgba(255,255,255,0.5)") == ((255, 255, 255), 0.5)
    assert parse_color("white")[0] == (255, 255, 255)


@pytest.mark.parametrize("bad", ["", "#12", "rgb(1,2)", "notacolor", "#gggggg"])
def test_parse_color_rejects(bad):
    with pytest.raises(ValueError):
        parse_color(bad)


def test_lighten_darken_stay_in_range():
    c = (100, 150, 200)
    assert all(0 <= v <= 255 for v in lighten(c, 0.9))
    assert all(0 <= v <= 255 for v in darken(c, 0.9))
    assert sum(lighten(c, 0.2)) > sum(c) > sum(darken(c, 0.2))

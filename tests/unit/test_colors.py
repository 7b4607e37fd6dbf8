import pytest
from pyrsistent import pmap

from furni_compositor.catalog.colors import (
    ColorTable,
    normalize_color_code,
    parse_hex_color,
)
from furni_compositor.types import SizeClass


@pytest.mark.parametrize(
    "code, expected",
    [
        ("FF8000", (255, 128, 0)),
        ("#ff8000", (255, 128, 0)),
        ("  00ff00 ", (0, 255, 0)),
        ("F80", (255, 136, 0)),
        ("", None),
        ("FF80", None),
        ("GGGGGG", None),
        ("FF800000", None),
    ],
)
def test_parse_hex_color(code: str, expected) -> None:
    assert parse_hex_color(code) == expected


@pytest.mark.parametrize(
    "color, expected",
    [
        ("ffcc00", "FFCC00"),
        ("#ffcc00", "FFCC00"),
        ("0xFFCC00", "FFCC00"),
        (0xFFCC00, "FFCC00"),
        (255, "0000FF"),
        ("", None),
        (None, None),
        (True, None),
        (1.5, None),
    ],
)
def test_normalize_color_code(color, expected) -> None:
    assert normalize_color_code(color) == expected


def test_table_lookup_is_keyed_by_size_color_and_layer() -> None:
    table = ColorTable(
        entries=pmap(
            {
                (SizeClass.LARGE, 1, 0): "FF0000",
                (SizeClass.LARGE, 2, 0): "00FF00",
                (SizeClass.SMALL, 3, 0): "0000FF",
                (SizeClass.LARGE, 1, 1): "nope",
            }
        )
    )
    assert table.tint_for(SizeClass.LARGE, 1, 0) == (255, 0, 0)
    assert table.tint_for(SizeClass.SMALL, 1, 0) is None
    assert table.tint_for(SizeClass.LARGE, 1, 2) is None
    assert table.lookup(SizeClass.LARGE, 1, 1) == "nope"
    assert table.tint_for(SizeClass.LARGE, 1, 1) is None
    assert table.color_ids(SizeClass.LARGE) == frozenset({1, 2})
    assert table.color_ids(SizeClass.SMALL) == frozenset({3})
    assert table.color_ids(SizeClass.ICON) == frozenset()

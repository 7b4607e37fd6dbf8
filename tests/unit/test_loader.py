import io
from typing import Any, Dict

import pytest
from PIL import Image

from furni_compositor.catalog.fragment import LayerAttributes
from furni_compositor.errors import MissingMetadataError
from furni_compositor.images import ImageCache
from furni_compositor.loader import (
    load_furniture,
    read_animation_state,
    read_attribute_tables,
    read_color_table,
    read_fragment_descriptors,
    read_timeline,
    to_image_cache,
    visualizations_by_size,
)
from furni_compositor.types import SizeClass
from tests.test_utils import SPRITE, solid


def document() -> Dict[str, Any]:
    return {
        "assets": {
            "chair_64_a_0_0": {"x": 32, "y": 60},
            "chair_64_b_0_0": {"x": "4", "y": 2, "flipH": "1"},
            "chair_64_a_2_0": {"flipH": True, "source": "chair_64_a_0_0"},
            "chair_64_sd_0_0": {"x": 10, "y": 10},
            "chair_icon_a": {},
            "chair_bogus": {},
        },
        "visualization": {
            "64": {
                "layers": {"1": {"z": 5, "ink": "ADD", "alpha": 128}},
                "directions": {"2": {"layers": {"0": {"z": 2}}}},
                "colors": {
                    "1": [{"layerId": 0, "color": "ffcc00"}],
                    "2": {"layers": {"1": {"color": "#00ff00"}}},
                },
                "animations": {
                    "1": {"layers": {"0": {"frameRepeat": 2, "frames": [0, 1, 2]}}}
                },
            },
            "1": {"colors": {"1": [{"layerId": 0, "color": "0000FF"}]}},
        },
    }


def test_visualizations_by_size_accepts_keyed_and_listed_forms() -> None:
    keyed = visualizations_by_size({"64": {"a": 1}, "32": {"b": 2}, "99": {}})
    assert set(keyed) == {SizeClass.LARGE, SizeClass.SMALL}
    listed = visualizations_by_size(
        {"visualizations": [{"size": 64, "a": 1}, {"size": 1}, {"size": 7}]}
    )
    assert set(listed) == {SizeClass.LARGE, SizeClass.ICON}
    assert visualizations_by_size(None) == {}


def test_read_fragment_descriptors() -> None:
    descriptors = {d.name: d for d in read_fragment_descriptors(document()["assets"])}
    assert descriptors["chair_64_a_0_0"].x == 32
    assert descriptors["chair_64_a_0_0"].y == 60
    assert descriptors["chair_64_b_0_0"].x == 4
    assert descriptors["chair_64_b_0_0"].flip_h is True
    assert descriptors["chair_64_a_2_0"].source == "chair_64_a_0_0"
    assert descriptors["chair_64_a_0_0"].flip_h is False


def test_bad_asset_entries_are_skipped() -> None:
    descriptors = read_fragment_descriptors(
        [{"name": "chair_64_a_0_0", "x": 1}, {"name": "chair_64_b_0_0", "x": 1.5}, "junk"]
    )
    assert [d.name for d in descriptors] == ["chair_64_a_0_0"]


def test_read_attribute_tables() -> None:
    tables = read_attribute_tables(visualizations_by_size(document()["visualization"]))
    assert tables.layers[(SizeClass.LARGE, 1)] == LayerAttributes(
        z=5, ink="ADD", alpha=128
    )
    assert tables.directions[(SizeClass.LARGE, 2, 0)].z == 2
    assert (SizeClass.ICON, 0) not in tables.layers


def test_read_color_table() -> None:
    colors = read_color_table(visualizations_by_size(document()["visualization"]))
    assert colors.lookup(SizeClass.LARGE, 1, 0) == "FFCC00"
    assert colors.lookup(SizeClass.LARGE, 2, 1) == "00FF00"
    assert colors.lookup(SizeClass.ICON, 1, 0) == "0000FF"
    assert colors.color_ids(SizeClass.LARGE) == frozenset({1, 2})


def test_read_animation_state_forms() -> None:
    plain = read_animation_state({"frames": [0, {"id": 3}], "frameRepeat": 2})
    assert plain.frames == (0, 3)
    assert plain.frame_repeat == 2
    nested = read_animation_state(
        {"frameSequence": [{"frames": [{"id": 4}, {"id": 5}]}, {"frames": [9]}]}
    )
    assert nested.frames == (4, 5)
    assert nested.frame_repeat is None
    assert read_animation_state({}).frames == ()


def test_read_timeline_keeps_first_declaration() -> None:
    timeline = read_timeline(
        {
            "animations": [
                {"id": 1, "layers": [{"id": 0, "frames": [0, 1]}, {"id": 0, "frames": [7]}]},
                {"id": "x", "layers": {"0": {"frames": [3]}}},
                {"id": 2, "layers": {"1": {"frames": ["bad"]}, "2": {"frames": [4]}}},
            ]
        }
    )
    state = timeline.get(0, 1)
    assert state is not None
    assert state.frames == (0, 1)
    assert timeline.get(1, 2) is None
    assert timeline.get(2, 2) is not None
    assert timeline.max_states == 3


def test_to_image_cache_decodes_bytes() -> None:
    buffer = io.BytesIO()
    solid(2, 2).save(buffer, format="PNG")
    cache = to_image_cache({"64_a_0_0": buffer.getvalue()}, SPRITE)
    assert f"{SPRITE}_64_a_0_0" in cache
    existing = ImageCache()
    assert to_image_cache(existing, SPRITE) is existing


def test_load_furniture() -> None:
    images = {
        "64_a_0_0": solid(4, 4),
        "64_b_0_0": solid(2, 2),
        "64_sd_0_0": solid(3, 3),
        "icon_a": solid(1, 1),
    }
    furniture = load_furniture(SPRITE, document(), images)
    assert furniture.sprite == SPRITE
    assert len(furniture.catalog) == 5
    assert furniture.catalog.highest_layer == 19  # shadow layer "s"
    # derived, flipped copy of layer a
    assert f"{SPRITE}_64_a_2_0" in furniture.images
    assert furniture.list_available_color_variants() == frozenset({1, 2})
    assert furniture.timeline_for(SizeClass.LARGE).max_states == 2
    assert furniture.timeline_for(SizeClass.SMALL).max_states == 1


@pytest.mark.parametrize(
    "data",
    [
        {"visualization": {"64": {}}},
        {"assets": {}, "visualization": {"64": {}}},
        {"assets": {"chair_64_a_0_0": {}}},
        {"assets": {"chair_64_a_0_0": {}}, "visualization": {"99": {}}},
    ],
)
def test_missing_metadata(data) -> None:
    with pytest.raises(MissingMetadataError):
        load_furniture(SPRITE, data, {"64_a_0_0": Image.new("RGBA", (1, 1))})


def test_bad_color_layer_does_not_drop_its_siblings() -> None:
    colors = read_color_table(
        visualizations_by_size(
            {
                "64": {
                    "colors": {
                        "3": [
                            {"layerId": "x", "color": "FF0000"},
                            {"layerId": 1, "color": "00FF00"},
                            "junk",
                        ],
                        "bad": [{"layerId": 0, "color": "0000FF"}],
                    }
                }
            }
        )
    )
    assert colors.lookup(SizeClass.LARGE, 3, 1) == "00FF00"
    assert colors.color_ids(SizeClass.LARGE) == frozenset({3})


def test_non_string_source_skips_only_that_asset() -> None:
    data = {
        "assets": {
            "chair_64_a_0_0": {},
            "chair_64_a_2_0": {"source": 7},
        },
        "visualization": {"64": {}},
    }
    furniture = load_furniture(SPRITE, data, {"64_a_0_0": solid(2, 2)})
    assert [f.name for f in furniture.catalog.fragments] == ["chair_64_a_0_0"]
    assert f"{SPRITE}_64_a_2_0" not in furniture.images

from typing import Any, Dict

import pytest
from PIL import Image

from furni_compositor import (
    Furniture,
    RenderConfiguration,
    RenderSettings,
    load_furniture,
    render_plan,
)
from furni_compositor.render.trim import BoundingBox
from furni_compositor.types import SizeClass
from tests.test_utils import SPRITE, fragment, make_furniture, make_timeline, solid

RED = (255, 0, 0, 255)
BLACK = (0, 0, 0, 255)


def document() -> Dict[str, Any]:
    return {
        "assets": {
            "chair_64_a_0_0": {"x": 0, "y": 0},
            "chair_64_a_0_1": {"x": -5, "y": 0},
            "chair_64_b_0_0": {"x": -20, "y": -5},
            "chair_64_sd_0_0": {"x": 0, "y": -10},
            "chair_64_a_2_0": {"x": 0, "flipH": True, "source": "chair_64_a_0_0"},
            "chair_64_a_2_1": {"x": -5, "source": "chair_64_a_0_1"},
            "chair_icon_a": {},
        },
        "visualization": {
            "64": {
                "layers": {"1": {"z": 5}},
                "colors": {"3": [{"layerId": 1, "color": "FF8000"}]},
                "animations": {
                    "1": {"layers": {"0": {"frameRepeat": 2, "frames": [0, 1]}}}
                },
            },
            "1": {"colors": {"3": [{"layerId": 0, "color": "00FF00"}]}},
        },
    }


def images() -> Dict[str, Image.Image]:
    return {
        "64_a_0_0": solid(10, 10, RED),
        "64_a_0_1": solid(10, 10, RED),
        "64_b_0_0": solid(6, 4),
        "64_sd_0_0": solid(10, 2, BLACK),
        "icon_a": solid(3, 3),
    }


@pytest.fixture
def furniture() -> Furniture:
    return load_furniture(SPRITE, document(), images())


def test_static_render_is_trimmed_to_content(furniture: Furniture) -> None:
    result = furniture.render_static(RenderConfiguration(shadows=False))
    assert result is not None
    assert result.box == BoundingBox(250, 250, 26, 10)
    assert result.offset == (0, 0)
    assert result.image.size == (26, 10)
    assert result.image.getpixel((0, 0)) == RED
    assert result.image.getpixel((20, 5)) == (255, 255, 255, 255)
    assert result.image.getpixel((12, 0))[3] == 0


def test_shadows_are_drawn_faded(furniture: Furniture) -> None:
    result = furniture.render_static(RenderConfiguration())
    assert result is not None
    assert result.box == BoundingBox(250, 250, 26, 12)
    assert result.image.getpixel((0, 10)) == (0, 0, 0, 102)


def test_color_variant(furniture: Furniture) -> None:
    assert furniture.list_available_color_variants() == frozenset({3})
    assert furniture.list_available_color_variants(SizeClass.ICON) == frozenset({3})
    result = furniture.render_static(RenderConfiguration(color_id=3, shadows=False))
    assert result is not None
    assert result.image.getpixel((0, 0)) == RED
    assert result.image.getpixel((20, 5)) == (255, 128, 0, 255)


def test_icon(furniture: Furniture) -> None:
    result = furniture.render_static(RenderConfiguration(color_id=3).as_icon())
    assert result is not None
    assert result.image.size == (3, 3)
    assert result.image.getpixel((1, 1)) == (0, 255, 0, 255)


def test_derived_flipped_direction(furniture: Furniture) -> None:
    result = furniture.render_static(RenderConfiguration(direction=2))
    assert result is not None
    assert result.box == BoundingBox(240, 250, 10, 10)
    assert result.offset == (-10, 0)


def test_empty_direction_renders_nothing(furniture: Furniture) -> None:
    assert furniture.render_static(RenderConfiguration(direction=4)) is None


def test_out_of_range_state_is_clamped(furniture: Furniture) -> None:
    config = RenderConfiguration(state_id=7)
    assert furniture.clamp_state(config).state_id == 0
    assert furniture.clamp_state(RenderConfiguration(state_id=1)).state_id == 1
    assert furniture.clamp_state(RenderConfiguration(state_id=-1)).state_id == 0
    clamped = furniture.render_static(config)
    plain = furniture.render_static(RenderConfiguration())
    assert clamped is not None and plain is not None
    assert clamped.box == plain.box


def test_animation(furniture: Furniture) -> None:
    sequence = furniture.render_animation(RenderConfiguration(direction=0))
    assert sequence is not None
    assert len(sequence) == 2
    assert sequence.box == BoundingBox(250, 250, 26, 12)
    assert sequence.delay == 8
    assert sequence.frames[0].getpixel((0, 0)) == RED
    assert sequence.frames[1].getpixel((0, 0)) == (0, 0, 0, 0)
    assert sequence.frames[1].getpixel((5, 0)) == RED


def test_animation_frames_are_trimmed_individually(furniture: Furniture) -> None:
    frames = furniture.render_animation_frames(RenderConfiguration(shadows=False))
    assert [frame.box for frame in frames] == [
        BoundingBox(250, 250, 26, 10),
        BoundingBox(255, 250, 21, 10),
    ]
    assert [frame.offset for frame in frames] == [(0, 0), (5, 0)]


def test_no_animation_when_only_one_frame_renders() -> None:
    furniture = make_furniture(
        [fragment("64_a_0_0")],
        {"64_a_0_0": solid(2, 2)},
        timeline=make_timeline({0: {1: ([0, 5], None)}}),
    )
    assert furniture.render_animation(RenderConfiguration()) is None
    assert furniture.render_animation_frames(RenderConfiguration()) != []


def test_uncropped_render() -> None:
    furniture = make_furniture(
        [fragment("64_a_0_0")],
        {"64_a_0_0": solid(2, 2)},
        settings=RenderSettings(canvas_width=100, canvas_height=80, crop=False),
    )
    result = furniture.render_static(RenderConfiguration())
    assert result is not None
    assert result.image.size == (100, 80)
    assert result.box == BoundingBox(0, 0, 100, 80)
    assert result.offset == (-50, -40)
    assert result.image.getpixel((50, 40))[3] == 255


def test_render_plan(furniture: Furniture) -> None:
    plan = render_plan(furniture)
    assert set(plan.static) == {
        "chair_dir_0_3",
        "chair_dir_2_3",
        "chair_dir_0_3_no_sd",
        "chair_dir_2_3_no_sd",
        "chair_icon_3",
    }
    assert set(plan.animations) == {"chair_animation_3", "chair_animation_3_no_sd"}
    assert plan.failed == []
    assert plan.offsets["chair_dir_2_3"] == (-10, 0)
    assert plan.offsets["chair_dir_0_3"] == (0, 0)
    assert plan.animations["chair_animation_3"].box == BoundingBox(240, 250, 25, 10)


def test_render_plan_without_colors() -> None:
    furniture = make_furniture([fragment("64_a_0_0")], {"64_a_0_0": solid(2, 2)})
    plan = render_plan(furniture)
    assert set(plan.static) == {"chair_dir_0", "chair_dir_0_no_sd"}
    assert plan.animations == {}


def test_render_plan_isolates_failures(
    furniture: Furniture, monkeypatch: pytest.MonkeyPatch
) -> None:
    render_static = Furniture.render_static

    def failing(self: Furniture, config: RenderConfiguration):
        if config.direction == 2:
            raise ValueError("boom")
        return render_static(self, config)

    monkeypatch.setattr(Furniture, "render_static", failing)
    plan = render_plan(furniture)
    assert plan.failed == ["chair_dir_2_3", "chair_dir_2_3_no_sd"]
    assert "chair_dir_0_3" in plan.static
    assert "chair_icon_3" in plan.static
    assert "chair_animation_3" in plan.animations


def test_render_plan_isolates_unexpected_errors(
    furniture: Furniture, monkeypatch: pytest.MonkeyPatch
) -> None:
    render_animation = Furniture.render_animation

    def failing(self: Furniture, config: RenderConfiguration):
        if not config.shadows:
            raise RuntimeError("boom")
        return render_animation(self, config)

    monkeypatch.setattr(Furniture, "render_animation", failing)
    plan = render_plan(furniture)
    assert plan.failed == ["chair_animation_3_no_sd"]
    assert "chair_animation_3" in plan.animations
    assert "chair_dir_0_3_no_sd" in plan.static
    assert "chair_icon_3" in plan.static

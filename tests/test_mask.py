"""
Tests for matrix_rain/mask.py and matrix_rain/renderer.py - Mask Overlay

Tests cover:
- Stripping color codes from renderer output
- Suppression inside/outside the grid, offsets, inversion
- Background loading, stale generations, failures
- Pillow image-to-text rendering and sizing
"""

import os
import sys
import threading

import pytest
from PIL import Image, ImageDraw

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from matrix_rain.mask import MaskLoader, MaskOverlay, strip_ansi
from matrix_rain.renderer import GlyphArtRenderer, PillowRenderer, fit_size
from matrix_rain.utils.error_handling import MaskRenderError


class StaticRenderer(GlyphArtRenderer):
    """Returns fixed text and records its calls."""

    def __init__(self, text):
        self.text = text
        self.calls = []

    def render(self, path, width, height, font_ratio):
        self.calls.append((path, width, height, font_ratio))
        return self.text


class FailingRenderer(GlyphArtRenderer):
    def render(self, path, width, height, font_ratio):
        raise OSError("cannot identify image file")


class GatedRenderer(GlyphArtRenderer):
    """Blocks renders at the first requested width until released."""

    def __init__(self, blocked_width):
        self.blocked_width = blocked_width
        self.release = threading.Event()

    def render(self, path, width, height, font_ratio):
        if width == self.blocked_width:
            self.release.wait(5)
        return f"w{width}"


class GatedFailingRenderer(GatedRenderer):
    """Like GatedRenderer, but the blocked render fails once released."""

    def render(self, path, width, height, font_ratio):
        if width == self.blocked_width:
            self.release.wait(5)
            raise OSError("slow render failed")
        return f"w{width}"


class TestStripAnsi:
    """Tests for removing escape sequences."""

    @pytest.mark.unit
    def test_strips_colors(self):
        assert strip_ansi("\x1b[32;1m# \x1b[0m#") == "# #"

    @pytest.mark.unit
    def test_plain_text_unchanged(self):
        assert strip_ansi("  ## ") == "  ## "


class TestMaskOverlay:
    """Tests for opacity lookups."""

    @pytest.mark.unit
    def test_from_text_strips_and_splits(self):
        overlay = MaskOverlay.from_text("\x1b[31m# \x1b[0m\n ##")
        assert overlay.grid == ("# ", " ##")
        assert overlay.width == 3
        assert overlay.height == 2

    @pytest.mark.unit
    def test_empty_text(self):
        overlay = MaskOverlay.from_text("")
        assert overlay.grid == ()
        assert overlay.suppresses(0, 0) is False

    @pytest.mark.unit
    def test_all_blank_grid_suppresses_everything_inside(self):
        overlay = MaskOverlay(grid=("   ",) * 3)
        for row in range(3):
            for col in range(3):
                assert overlay.suppresses(row, col)

    @pytest.mark.unit
    @pytest.mark.parametrize("row,col", [(-1, 0), (0, -1), (3, 0), (0, 3)])
    def test_outside_grid_never_suppresses(self, row, col):
        overlay = MaskOverlay(grid=("   ",) * 3)
        assert overlay.suppresses(row, col) is False

    @pytest.mark.unit
    def test_offsets_shift_grid(self):
        overlay = MaskOverlay(grid=(" ",), offset_row=4, offset_col=9)
        assert overlay.suppresses(4, 9) is True
        assert overlay.suppresses(0, 0) is False

    @pytest.mark.unit
    def test_ragged_rows(self):
        """Cells past the end of a short row are outside the grid."""
        overlay = MaskOverlay(grid=("#", "   "))
        assert overlay.suppresses(0, 2) is False
        assert overlay.suppresses(1, 2) is True

    @pytest.mark.unit
    def test_invert_flips_sentinel(self):
        overlay = MaskOverlay(grid=("# ",), invert=True)
        assert overlay.blank == "#"
        assert overlay.suppresses(0, 0) is True
        assert overlay.suppresses(0, 1) is False


class TestMaskLoader:
    """Tests for background mask computation."""

    @pytest.mark.unit
    def test_compute_passes_options(self):
        renderer = StaticRenderer(" #")
        loader = MaskLoader(renderer, "logo.png", font_ratio=3, invert=True,
                            offset_row=1, offset_col=2)

        overlay = loader.compute(40, 10)

        assert renderer.calls == [("logo.png", 40, 10, 3)]
        assert overlay == MaskOverlay(grid=(" #",), offset_row=1, offset_col=2, invert=True)

    @pytest.mark.unit
    def test_request_then_poll(self):
        loader = MaskLoader(StaticRenderer("# "), "logo.png")
        assert loader.poll() is None

        generation = loader.request(80, 24)
        loader.wait(5)

        overlay = loader.poll()
        assert overlay is not None
        assert overlay.grid == ("# ",)
        assert loader.latest_generation == generation
        # Delivered once
        assert loader.poll() is None

    @pytest.mark.unit
    def test_failure_raised_on_poll(self):
        loader = MaskLoader(FailingRenderer(), "broken.png")
        loader.request(80, 24)
        loader.wait(5)

        with pytest.raises(MaskRenderError, match="broken.png"):
            loader.poll()
        assert loader.poll() is None

    @pytest.mark.unit
    def test_compute_wraps_failure(self):
        loader = MaskLoader(FailingRenderer(), "broken.png")
        with pytest.raises(MaskRenderError):
            loader.compute(10, 10)

    @pytest.mark.unit
    def test_stale_generation_discarded(self):
        loader = MaskLoader(StaticRenderer(""), "logo.png")
        newer = MaskOverlay(grid=("new",))
        older = MaskOverlay(grid=("old",))

        assert loader.deliver(2, newer) is True
        assert loader.deliver(1, older) is False
        assert loader.poll() is newer

    @pytest.mark.integration
    def test_slow_first_render_does_not_win(self):
        renderer = GatedRenderer(blocked_width=80)
        loader = MaskLoader(renderer, "logo.png")

        loader.request(80, 24)
        loader.request(100, 30)
        # Let the second render finish before the first
        for thread in list(loader._threads):
            if thread.name.endswith("-2"):
                thread.join(5)
        renderer.release.set()
        loader.wait(5)

        assert loader.poll().grid == ("w100",)
        assert loader.latest_generation == 2

    @pytest.mark.integration
    def test_stale_failure_discarded(self):
        """An older render failing after a newer mask arrived does not stop the rain."""
        renderer = GatedFailingRenderer(blocked_width=80)
        loader = MaskLoader(renderer, "logo.png")

        loader.request(80, 24)
        loader.request(100, 30)
        for thread in list(loader._threads):
            if thread.name.endswith("-2"):
                thread.join(5)
        assert loader.poll().grid == ("w100",)

        renderer.release.set()
        loader.wait(5)

        assert loader.poll() is None

    @pytest.mark.unit
    def test_newer_mask_clears_older_failure(self):
        loader = MaskLoader(FailingRenderer(), "logo.png")
        loader.request(80, 24)
        loader.wait(5)

        assert loader.deliver(2, MaskOverlay(grid=("new",))) is True

        assert loader.poll().grid == ("new",)
        assert loader.poll() is None

    @pytest.mark.unit
    def test_failure_reported_without_newer_mask(self):
        loader = MaskLoader(FailingRenderer(), "logo.png")
        loader.request(80, 24)
        loader.request(100, 30)
        loader.wait(5)

        with pytest.raises(MaskRenderError):
            loader.poll()


class TestFitSize:
    """Tests for sizing the rendered image."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "image,box,ratio,expected",
        [
            ((200, 100), (80, 24), 2, (80, 20)),
            ((100, 100), (80, 24), 2, (48, 24)),
            ((100, 100), (80, 24), 1, (24, 24)),
            ((0, 100), (80, 24), 2, (0, 0)),
            ((100, 100), (0, 24), 2, (0, 0)),
        ],
        ids=["wide", "square-ratio-2", "square-ratio-1", "empty-image", "empty-box"],
    )
    def test_fit(self, image, box, ratio, expected):
        assert fit_size(image[0], image[1], box[0], box[1], ratio) == expected


class TestPillowRenderer:
    """Tests for the Pillow image-to-text renderer."""

    @pytest.mark.unit
    def test_renders_ink_and_background(self, tmp_path):
        path = tmp_path / "square.png"
        img = Image.new("RGB", (40, 20), (255, 255, 255))
        ImageDraw.Draw(img).rectangle([0, 0, 19, 19], fill=(0, 0, 0))
        img.save(path)

        text = PillowRenderer().render(str(path), 20, 10, 2)
        lines = text.split("\n")

        assert len(lines) == 5
        assert all(len(line) == 20 for line in lines)
        assert lines[2].startswith("#")
        assert lines[2].endswith(" ")

    @pytest.mark.unit
    def test_fits_requested_box(self, tmp_path):
        path = tmp_path / "tall.png"
        Image.new("L", (10, 200), 0).save(path)

        lines = PillowRenderer().render(str(path), 80, 24, 2).split("\n")

        assert len(lines) <= 24
        assert all(len(line) <= 80 for line in lines)
        assert set("".join(lines)) == {"#"}

    @pytest.mark.unit
    def test_transparent_is_background(self, tmp_path):
        path = tmp_path / "clear.png"
        Image.new("RGBA", (16, 16), (0, 0, 0, 0)).save(path)

        text = PillowRenderer().render(str(path), 8, 8, 2)

        assert set(text.replace("\n", "")) == {" "}

    @pytest.mark.unit
    def test_missing_image_raises_through_loader(self, tmp_path):
        loader = MaskLoader(PillowRenderer(), str(tmp_path / "missing.png"))
        with pytest.raises(MaskRenderError):
            loader.compute(10, 10)

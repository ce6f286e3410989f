"""
Unit tests for the path renderer.
"""

import pytest

from geotrail.core.path import PathAccumulator
from geotrail.core.renderer import DrawSink, PathRenderer, PathStyle, render
from geotrail.domain.models import GeoPoint
from geotrail.infrastructure.display.recording import DrawCall, RecordingSink


def P(lat: float, lon: float) -> GeoPoint:
    return GeoPoint(latitude=lat, longitude=lon)


L_SHAPE = [P(0, 0), P(0, 0.001), P(0.001, 0.001)]


class TestRender:
    """Tests for the render function."""

    def test_recording_sink_satisfies_protocol(self):
        assert isinstance(RecordingSink(), DrawSink)

    def test_empty_path_only_clears(self):
        sink = RecordingSink()
        frame = render([], 800, 400, sink)
        assert frame is None
        assert sink.calls == [DrawCall("clear_surface", (800, 400))]

    def test_single_point_centered_start_marker_only(self):
        sink = RecordingSink()
        render([P(37.0, 127.0)], 800, 400, sink)

        assert sink.ops() == [
            "clear_surface",
            "begin_shape",
            "move_to",
            "stroke",
            "begin_shape",
            "fill_circle",
        ]
        assert sink.find("move_to")[0].args == (400, 200)
        circles = sink.find("fill_circle")
        assert len(circles) == 1
        assert circles[0].args == (400, 200, 6, "#28a745")

    def test_identical_points_all_centered(self):
        sink = RecordingSink()
        render([P(5, 5)] * 3, 300, 100, sink)

        moves = sink.find("move_to") + sink.find("line_to")
        assert [c.args for c in moves] == [(150, 50)] * 3
        circles = sink.find("fill_circle")
        assert [c.args[:2] for c in circles] == [(150, 50), (150, 50)]

    def test_l_shape_draw_sequence(self):
        sink = RecordingSink()
        style = PathStyle()
        render(L_SHAPE, 800, 400, sink, style)

        assert sink.ops() == [
            "clear_surface",
            "begin_shape",
            "move_to",
            "line_to",
            "line_to",
            "stroke",
            "begin_shape",
            "fill_circle",
            "begin_shape",
            "fill_circle",
        ]
        assert sink.find("move_to")[0].args == pytest.approx((210, 390))
        lines = sink.find("line_to")
        assert lines[0].args == pytest.approx((590, 390))
        assert lines[1].args == pytest.approx((590, 10))
        assert sink.find("stroke")[0].args == ("#007bff", 4)

        start, end = sink.find("fill_circle")
        assert start.args[:2] == pytest.approx((210, 390))
        assert start.args[2:] == (6, "#28a745")
        assert end.args[:2] == pytest.approx((590, 10))
        assert end.args[2:] == (6, "#dc3545")

    def test_clear_comes_first(self):
        sink = RecordingSink()
        render(L_SHAPE, 800, 400, sink)
        assert sink.calls[0].op == "clear_surface"

    def test_idempotent(self):
        first, second = RecordingSink(), RecordingSink()
        render(L_SHAPE, 640, 480, first)
        render(L_SHAPE, 640, 480, second)
        assert first.calls == second.calls

    def test_custom_style(self):
        sink = RecordingSink()
        style = PathStyle(line_color="#000000", line_width=2, start_color="#111111",
                          end_color="#222222", marker_radius=3)
        render(L_SHAPE, 800, 400, sink, style)
        assert sink.find("stroke")[0].args == ("#000000", 2)
        assert [c.args[2:] for c in sink.find("fill_circle")] == [
            (3, "#111111"),
            (3, "#222222"),
        ]

    def test_zero_surface_does_not_raise(self):
        sink = RecordingSink()
        render(L_SHAPE, 0, 0, sink)
        assert sink.calls[0] == DrawCall("clear_surface", (0, 0))
        assert len(sink.find("fill_circle")) == 2


class TestPathRenderer:
    """Tests for the reactive PathRenderer."""

    def test_attach_draws_current_state(self):
        acc = PathAccumulator()
        acc.add_sample(P(0, 0))
        sink = RecordingSink()
        renderer = PathRenderer(sink, 800, 400)

        renderer.attach(acc)

        assert renderer.frames_rendered == 1
        assert sink.find("move_to")[-1].args == (400, 200)

    def test_redraws_on_every_change(self):
        acc = PathAccumulator()
        sink = RecordingSink()
        renderer = PathRenderer(sink, 800, 400)
        renderer.attach(acc)

        for p in L_SHAPE:
            acc.add_sample(p)
        acc.reset()

        # attach + 3 samples + reset
        assert renderer.frames_rendered == 5
        assert sink.ops().count("clear_surface") == 5
        assert renderer.last_frame is None

    def test_last_render_matches_stateless_render(self):
        acc = PathAccumulator()
        sink = RecordingSink()
        renderer = PathRenderer(sink, 800, 400)
        renderer.attach(acc)
        for p in L_SHAPE:
            sink.reset()
            acc.add_sample(p)

        expected = RecordingSink()
        render(L_SHAPE, 800, 400, expected)
        assert sink.calls == expected.calls

    def test_resize_rerenders_with_new_size(self):
        acc = PathAccumulator()
        for p in L_SHAPE:
            acc.add_sample(p)
        sink = RecordingSink()
        renderer = PathRenderer(sink, 800, 400)
        renderer.attach(acc)
        small_scale = renderer.last_frame.scale

        sink.reset()
        renderer.resize(1600, 800)

        assert sink.calls[0] == DrawCall("clear_surface", (1600, 800))
        assert renderer.last_frame.scale == pytest.approx(2 * small_scale)

    def test_detach_stops_updates(self):
        acc = PathAccumulator()
        renderer = PathRenderer(RecordingSink(), 100, 100)
        renderer.attach(acc)
        renderer.detach()
        acc.add_sample(P(0, 0))
        assert renderer.frames_rendered == 1

    def test_renderer_does_not_mutate_path(self):
        acc = PathAccumulator()
        renderer = PathRenderer(RecordingSink(), 100, 100)
        renderer.attach(acc)
        for p in L_SHAPE:
            acc.add_sample(p)
        version = acc.version
        renderer.redraw()
        renderer.resize(50, 50)
        assert acc.version == version
        assert list(acc.path) == L_SHAPE

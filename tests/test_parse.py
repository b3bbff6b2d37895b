"""导出请求解析测试。"""

from __future__ import annotations

import json

import pytest

from kaleido_scope.scope.parse import parse


def test_shorthand_request_defaults(bar_figure: dict) -> None:
    parsed = parse(bar_figure, {})
    assert parsed.code == 0
    assert parsed.message is None
    request = parsed.result
    assert request is not None
    assert request.format == "png"
    assert request.width == 700
    assert request.height == 500
    assert request.scale == 1
    assert request.encoded is False
    assert request.fid is None
    assert request.figure.data[0]["type"] == "bar"


def test_serve_request_reads_options_from_body(bar_figure: dict) -> None:
    body = {
        "figure": bar_figure,
        "format": "svg",
        "scale": "2",
        "width": 300,
        "height": 200,
        "encoded": 1,
        "fid": "fig-1",
    }
    request = parse(body, {"format": "jpeg", "width": 999}).result
    assert request is not None
    assert request.format == "svg"
    assert request.scale == 2
    assert (request.width, request.height) == (300, 200)
    assert request.encoded is True
    assert request.fid == "fig-1"


def test_missing_data_and_layout_is_rejected() -> None:
    parsed = parse({"config": {}}, {})
    assert parsed.code == 400
    assert parsed.result is None
    assert "no 'data' and no 'layout'" in parsed.message


@pytest.mark.parametrize("fmt", ["bmp", "PNG", "gif", 5])
def test_unknown_format_is_rejected(bar_figure: dict, fmt: object) -> None:
    parsed = parse(bar_figure, {"format": fmt})
    assert parsed.code == 400
    assert "wrong format" in parsed.message


@pytest.mark.parametrize("opts", [{}, {"format": None}, {"format": ""}])
def test_omitted_format_uses_default(bar_figure: dict, opts: dict) -> None:
    assert parse(bar_figure, opts).result.format == "png"


def test_non_object_figure() -> None:
    assert parse([1, 2, 3], {}).code == 400
    assert "non-object figure" in parse("figure", {}).message


def test_non_array_data_and_non_object_layout() -> None:
    assert "non-array figure data" in parse({"data": {"x": 1}}, {}).message
    assert "non-object figure layout" in parse({"data": [], "layout": []}, {}).message


def test_layout_only_figure_gets_empty_data() -> None:
    request = parse({"layout": {"title": "t"}}, {}).result
    assert request is not None
    assert request.figure.data == ()


def test_data_only_figure_gets_empty_layout() -> None:
    request = parse({"data": []}, {}).result
    assert request is not None
    assert request.figure.layout == {}


def test_explicit_width_wins_over_layout() -> None:
    figure = {"data": [], "layout": {"width": 900, "autosize": False}}
    assert parse(figure, {"width": 300}).result.width == 300


def test_layout_width_used_when_not_autosized() -> None:
    figure = {"data": [], "layout": {"width": 900, "height": 650, "autosize": False}}
    request = parse(figure, {}).result
    assert request.width == 900
    assert request.height == 650


def test_autosize_layout_falls_back_to_default() -> None:
    figure = {"data": [], "layout": {"width": 900, "autosize": True}}
    assert parse(figure, {}).result.width == 700


def test_invalid_scale_falls_back_to_default(bar_figure: dict) -> None:
    assert parse(bar_figure, {"scale": -2}).result.scale == 1
    assert parse(bar_figure, {"scale": "abc"}).result.scale == 1
    assert parse(bar_figure, {"scale": 0.5}).result.scale == 0.5


def test_config_is_kept_only_when_plain_object() -> None:
    kept = parse({"data": [], "config": {"displaylogo": False}}, {}).result
    dropped = parse({"data": [], "config": "nope"}, {}).result
    assert kept.figure.config == {"displaylogo": False}
    assert dropped.figure.config is None


def test_safe_mode_rejects_too_many_traces() -> None:
    figure = {"data": [{"type": "scatter", "y": [1]} for _ in range(201)]}
    assert parse(figure, {}).code == 0
    parsed = parse(figure, {}, safe_mode=True)
    assert parsed.code == 400
    assert "likely to make exporter hang" in parsed.message


def test_safe_mode_point_budget() -> None:
    small = {"data": [{"type": "scatter", "x": list(range(40_000))}]}
    large = {"data": [{"type": "scatter", "x": list(range(60_000))}]}
    assert parse(small, {}, safe_mode=True).code == 0
    assert parse(large, {}, safe_mode=True).code == 400


def test_parse_is_idempotent_and_detached_from_input(bar_figure: dict) -> None:
    first = parse(bar_figure, {"width": 320})
    second = parse(bar_figure, {"width": 320})
    assert first == second

    bar_figure["data"][0]["y"].append(7)
    bar_figure["layout"]["title"] = "changed"
    assert list(first.result.figure.data[0]["y"]) == [4, 5, 6]
    assert "title" not in first.result.figure.layout


def test_canonical_request_is_frozen(bar_figure: dict) -> None:
    request = parse(bar_figure, {}).result
    with pytest.raises(AttributeError):
        request.format = "svg"  # type: ignore[misc]


def test_canonical_figure_is_read_only_all_the_way_down(bar_figure: dict) -> None:
    bar_figure["config"] = {"modeBarButtonsToRemove": ["zoom2d"]}
    request = parse(bar_figure, {}).result

    with pytest.raises(TypeError):
        request.figure.layout["title"] = "mutated"  # type: ignore[index]
    with pytest.raises(TypeError):
        request.figure.data[0]["x"] = [9]  # type: ignore[index]
    with pytest.raises(AttributeError):
        request.figure.data[0]["x"].append(4)  # type: ignore[union-attr]
    with pytest.raises(TypeError):
        request.figure.config["displaylogo"] = False  # type: ignore[index]

    assert request.figure.layout == {}
    assert request.figure.to_dict() == {
        "data": [{"type": "bar", "x": [1, 2, 3], "y": [4, 5, 6]}],
        "layout": {},
    }
    assert request.figure.config_dict() == {"modeBarButtonsToRemove": ["zoom2d"]}


@pytest.mark.parametrize("key", ["width", "height", "scale"])
def test_integer_beyond_float_range_falls_back_to_default(key: str) -> None:
    opts = json.loads('{"%s": %s}' % (key, "9" * 400))
    parsed = parse({"data": [], "layout": {}}, opts)
    assert parsed.code == 0
    assert getattr(parsed.result, key) == {"width": 700, "height": 500, "scale": 1}[key]


def test_layout_dimension_beyond_float_range_is_ignored() -> None:
    huge = "9" * 400
    body = json.loads(
        '{"figure": {"data": [], "layout": {"width": %s}}, "scale": %s}' % (huge, huge)
    )
    parsed = parse(body, safe_mode=True)
    assert parsed.code == 0
    assert parsed.result.width == 700
    assert parsed.result.scale == 1

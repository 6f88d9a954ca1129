import pytest

from inkreel.core.annotations import (
    HighlightAnnotation,
    InkAnnotation,
    IssueSeverity,
    TextAnnotation,
    normalize_annotations,
)


def test_valid_records_pass_through_cleanly():
    raw = [
        {
            "id": "hl-1",
            "type": "highlight",
            "page": 1,
            "start": 0,
            "end": 0,
            "mode": "quads",
            "quads": [{"x": 0.1, "y": 0.15, "w": 0.6, "h": 0.03}],
            "style": {"color": "rgba(255,255,0,0.3)"},
        },
        {
            "id": "txt-1",
            "type": "text",
            "page": 2,
            "start": 1,
            "end": 4,
            "x": 0.1,
            "y": 0.2,
            "w": 0.3,
            "h": 0.1,
            "content": "Hello",
            "style": {"bg": "#ffffff", "color": "black"},
        },
    ]
    result = normalize_annotations(raw)

    assert result.is_clean
    assert isinstance(result.normalized[0], HighlightAnnotation)
    assert result.normalized[0].quads[0].w == pytest.approx(0.6)
    assert isinstance(result.normalized[1], TextAnnotation)
    assert result.normalized[1].content == "Hello"


def test_invalid_base_fields_are_repaired():
    result = normalize_annotations(
        [{"type": "text", "page": 0, "start": -3, "end": "soon", "content": "x", "style": {}}]
    )
    annotation = result.normalized[0]

    assert annotation.id.startswith("anno-")
    assert annotation.page == 1
    assert annotation.start == 0
    assert annotation.end == 0
    assert result.info[0].severity == IssueSeverity.INFO
    assert result.warnings


def test_end_before_start_is_clamped_to_start():
    result = normalize_annotations(
        [{"id": "a", "type": "text", "start": 5, "end": 2, "content": "x", "style": {}}]
    )

    assert result.normalized[0].start == 5
    assert result.normalized[0].end == 5


def test_highlight_defaults():
    result = normalize_annotations([{"id": "h", "type": "highlight", "mode": "box", "quads": []}])
    annotation = result.normalized[0]

    assert annotation.mode == "quads"
    assert len(annotation.quads) == 1
    assert annotation.style["color"] == "rgba(255, 255, 0, 0.3)"


def test_coordinates_are_clamped_and_colors_checked():
    result = normalize_annotations(
        [
            {
                "id": "t",
                "type": "text",
                "x": 1.4,
                "y": -0.2,
                "w": "0.5",
                "h": "tall",
                "content": "  ",
                "style": {"bg": "not-a-color", "color": "#abc"},
            }
        ]
    )
    annotation = result.normalized[0]

    assert annotation.x == 1.0
    assert annotation.y == 0.0
    assert annotation.w == pytest.approx(0.5)
    assert annotation.h == pytest.approx(0.1)
    assert annotation.content == "[No content]"
    assert annotation.style == {"bg": "rgba(255, 255, 255, 0.9)", "color": "#abc"}


def test_ink_points_are_made_monotonic():
    result = normalize_annotations(
        [
            {
                "id": "ink",
                "type": "ink",
                "strokes": [
                    {
                        "color": "red",
                        "size": -2,
                        "points": [
                            {"t": 0.5, "x": 0.1, "y": 0.1},
                            {"t": 0.2, "x": 0.2, "y": 0.2},
                            {"t": -1, "x": 0.3, "y": 0.3},
                            {"t": 2.0, "x": 0.4, "y": 0.4},
                        ],
                    }
                ],
            }
        ]
    )
    stroke = result.normalized[0].strokes[0]

    assert [p.t for p in stroke.points] == [0.5, 0.5, 0.5, 2.0]
    assert stroke.size == 3.0
    assert stroke.color == "red"


def test_empty_strokes_get_a_default_stroke():
    result = normalize_annotations([{"id": "ink", "type": "ink", "strokes": []}])

    assert isinstance(result.normalized[0], InkAnnotation)
    assert len(result.normalized[0].strokes[0].points) == 2


def test_unroutable_records_are_skipped():
    result = normalize_annotations(
        [None, "text", {"id": "x"}, {"id": "y", "type": "arrow"}, {"id": "z", "type": "ink"}]
    )

    assert len(result.normalized) == 1
    assert len(result.skipped) == 4
    assert all(i.severity == IssueSeverity.DATA_SKIPPED for i in result.skipped)
    assert "Unsupported type" in result.skipped[3].message


def test_strict_mode_raises_on_unroutable_record():
    with pytest.raises(ValueError):
        normalize_annotations([{"id": "y", "type": "arrow"}], skip_invalid=False)


def test_non_list_input_returns_empty_result():
    result = normalize_annotations({"id": "a"})

    assert result.normalized == []
    assert result.warnings


def test_out_of_range_integers_fall_back_to_defaults():
    huge = 10**400
    result = normalize_annotations(
        [
            {
                "id": "big",
                "type": "highlight",
                "page": huge,
                "start": huge,
                "end": huge,
                "quads": [{"x": huge, "y": 0.1, "w": 0.2, "h": 0.1}],
                "style": {"color": "red"},
            }
        ]
    )
    annotation = result.normalized[0]

    assert annotation.page == 1
    assert annotation.start == 0
    assert annotation.end == 0
    assert annotation.quads[0].x == pytest.approx(0.1)
    assert len(result.warnings) >= 4

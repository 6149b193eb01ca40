"""Unit tests for the dispatcher's request parameter parsing."""

import pytest

from cmsbase.application.services import parse_ids, parse_page_param, parse_redaction_request
from cmsbase.domain.entities import BlurArea, CropBounds
from cmsbase.domain.services import QueryError, RedactionError


class TestParsePageParam:
    @pytest.mark.parametrize(
        "raw, expected",
        [("2", 2), ("3rd", 3), (" 4", 4), (5, 5)],
    )
    def test_leading_digits(self, raw, expected):
        assert parse_page_param(raw, 1) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", "0", "-2"])
    def test_falls_back_to_default(self, raw):
        assert parse_page_param(raw, 1) == 1
        assert parse_page_param(raw, None) is None


class TestParseIds:
    def test_json_string(self):
        assert parse_ids('["a", "b"]') == ["a", "b"]

    def test_list(self):
        assert parse_ids(["a", 3]) == ["a", "3"]

    def test_missing(self):
        assert parse_ids(None) == []

    @pytest.mark.parametrize("raw", ["not json", '{"a": 1}', "42"])
    def test_invalid(self, raw):
        with pytest.raises(QueryError):
            parse_ids(raw)


class TestParseRedactionRequest:
    def test_full_request(self):
        request = parse_redaction_request(
            {
                "name": "photo",
                "width": "200",
                "height": 100,
                "crop_left": "5",
                "crop_top": 0,
                "crop_right": 10.4,
                "crop_bottom": "",
                "rotate": "90",
                "blur_areas": [{"left": "1", "top": 2, "width": 3, "height": 4}],
            }
        )

        assert request.name == "photo"
        assert (request.width, request.height) == (200, 100)
        assert request.crop == CropBounds(left=5, top=0, right=10, bottom=0)
        assert request.rotate == 90
        assert request.blur_areas == (BlurArea(1, 2, 3, 4),)
        assert request.region_frame == "canvas"

    def test_blur_areas_as_json_text(self):
        request = parse_redaction_request(
            {"name": "x", "width": 10, "height": 10, "blur_areas": '[{"left":0,"top":0,"width":1,"height":1}]'}
        )

        assert request.blur_areas == (BlurArea(0, 0, 1, 1),)

    def test_rotated_region_frame(self):
        request = parse_redaction_request({"name": "x", "width": 10, "height": 10, "region_frame": "rotated"})

        assert request.region_frame == "rotated"

    @pytest.mark.parametrize(
        "fields",
        [
            {"name": "x", "height": 10},
            {"name": "x", "width": "wide", "height": 10},
            {"name": "x", "width": 10, "height": 10, "blur_areas": "nope"},
            {"name": "x", "width": 10, "height": 10, "blur_areas": [{"left": 0}]},
            {"name": "x", "width": 10, "height": 10, "region_frame": "sideways"},
            {"name": "x", "width": True, "height": 10},
        ],
    )
    def test_invalid(self, fields):
        with pytest.raises(RedactionError):
            parse_redaction_request(fields)

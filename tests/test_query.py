"""Tests for geodata.query."""

from urllib.parse import parse_qsl

from geodata.query import build_query, shape_params


class TestBuildQuery:
    """Tests for build_query."""

    def test_round_trip_reconstructs_pairs(self):
        """Decoding the encoded query gives back the original pairs."""
        params = {
            "id": "users/alice/image one",
            "json": '{"type": "Invocation", "args": {"a": [1, 2]}}',
            "palette": "ff0000,00ff00",
            "region": "[[1.5,-2],[3&4]]",
            "unicode": "Zürich=✓",
            "count": 3,
        }

        decoded = parse_qsl(build_query(params), keep_blank_values=True)

        assert decoded == [(k, str(v)) for k, v in params.items()]

    def test_keeps_insertion_order(self):
        assert build_query({"b": "2", "a": "1", "c": "3"}) == "b=2&a=1&c=3"

    def test_reserved_characters_are_encoded(self):
        query = build_query({"q": "a&b=c d"})
        assert query == "q=a%26b%3Dc+d"

    def test_none_values_are_omitted(self):
        assert build_query({"id": "x", "starttime": None}) == "id=x"

    def test_booleans_are_lowercase(self):
        assert build_query({"a": True, "b": False}) == "a=true&b=false"

    def test_empty_params(self):
        assert build_query({}) == ""
        assert build_query(None) == ""


class TestShapeParams:
    """Tests for shape_params."""

    def test_scalar_sequences_are_comma_joined(self):
        shaped = shape_params({"bands": ["B4", "B3", "B2"], "min": (0, 0.5, 1)})
        assert shaped == {"bands": "B4,B3,B2", "min": "0,0.5,1"}

    def test_nested_values_become_json(self):
        shaped = shape_params({
            "region": [[0, 0], [1, 1]],
            "bands": [{"id": "B1", "scale": 30}],
            "crs_info": {"crs": "EPSG:4326"},
        })
        assert shaped["region"] == "[[0,0],[1,1]]"
        assert shaped["bands"] == '[{"id":"B1","scale":30}]'
        assert shaped["crs_info"] == '{"crs":"EPSG:4326"}'

    def test_scalars_pass_through(self):
        assert shape_params({"format": "png", "version": 3}) == {"format": "png", "version": 3}

    def test_caller_mapping_is_not_modified(self):
        params = {"bands": ["B1", "B2"]}
        shape_params(params)
        assert params == {"bands": ["B1", "B2"]}

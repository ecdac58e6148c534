"""
Tests for deck manifest parsing and animation group ordering
"""

import json

import pytest

from slidecast_core.manifest import (
    AnimationGroup,
    ManifestError,
    load_manifest,
    parse_manifest,
    sort_animation_groups,
)


class TestSortAnimationGroups:

    def test_sorted_by_order(self):
        """Test groups are put in ascending order."""
        groups = [
            AnimationGroup(order=1, element_ids=["a"]),
            AnimationGroup(order=0, element_ids=["b", "c"]),
        ]
        result = sort_animation_groups(groups)
        assert [g.element_ids for g in result] == [["b", "c"], ["a"]]

    def test_equal_order_is_stable(self):
        """Test groups sharing an order keep manifest position."""
        groups = [
            AnimationGroup(order=1, element_ids=["x"]),
            AnimationGroup(order=0, element_ids=["first"]),
            AnimationGroup(order=0, element_ids=["second"]),
        ]
        result = sort_animation_groups(groups)
        assert [g.element_ids for g in result] == [["first"], ["second"], ["x"]]

    def test_duplicate_ids_stay_with_first_group(self, caplog):
        """Test an element listed twice belongs to the earliest group only."""
        groups = [
            AnimationGroup(order=2, element_ids=["a", "b"]),
            AnimationGroup(order=1, element_ids=["a"]),
        ]
        result = sort_animation_groups(groups, "slide-2.html")
        assert [g.element_ids for g in result] == [["a"], ["b"]]
        assert "slide-2.html" in caplog.text

    def test_input_not_mutated(self):
        """Test the caller's groups are left untouched."""
        groups = [AnimationGroup(order=0, element_ids=["a"]), AnimationGroup(order=1, element_ids=["a"])]
        sort_animation_groups(groups)
        assert groups[1].element_ids == ["a"]


class TestParseManifest:

    def test_valid_manifest(self, sample_manifest):
        """Test filenames, titles and groups of a well-formed manifest."""
        manifest = parse_manifest(sample_manifest)
        assert manifest.filenames == ["slide-1.html", "slide-2.html", "slide-3.html"]
        assert manifest.titles == ["Introduction", "Architecture", "Slide 3"]
        groups = manifest.slide_groups()
        assert groups[0] == []
        assert [g.element_ids for g in groups[1]] == [["b", "c"], ["a"]]

    def test_legacy_file_key(self):
        """Test the legacy ``file`` key names the slide."""
        manifest = parse_manifest({"slides": [{"file": "intro.html"}]})
        assert manifest.filenames == ["intro.html"]
        assert manifest.titles == ["Slide 1"]

    def test_non_contiguous_filenames(self):
        """Test filenames are taken as listed, not derived from position."""
        manifest = parse_manifest({"slides": [
            {"number": 1, "filename": "slide-1.html"},
            {"number": 5, "filename": "slide-5.html"},
        ]})
        assert manifest.filenames == ["slide-1.html", "slide-5.html"]
        assert manifest.titles == ["Slide 1", "Slide 5"]

    def test_malformed_groups_mean_no_groups(self):
        """Test a non-list groups field is treated as empty."""
        manifest = parse_manifest({"slides": [
            {"filename": "slide-1.html", "animations": {"groups": "oops"}},
        ]})
        assert manifest.slide_groups() == [[]]

    def test_non_numeric_order_sorts_as_zero(self):
        """Test a group with a bad order keeps the manifest and sorts as order 0."""
        manifest = parse_manifest({"slides": [
            {"filename": "slide-1.html", "animations": {"groups": [
                {"order": 1, "elementIds": ["late"]},
                {"order": "soon", "elementIds": ["text"]},
                {"order": None, "elementIds": ["null"]},
                {"order": True, "elementIds": ["flag"]},
            ]}},
        ]})
        groups = manifest.slide_groups()[0]
        assert [g.element_ids for g in groups] == [["text"], ["null"], ["flag"], ["late"]]
        assert [g.order for g in groups] == [0, 0, 0, 1]

    def test_catalog_keeps_manifest_with_bad_order(self, temp_dir):
        """Test discovery still uses a manifest whose group order is malformed."""
        from slidecast_core.catalog import discover_slides
        slides = temp_dir / "slides"
        slides.mkdir()
        (slides / "manifest.json").write_text(json.dumps({"slides": [
            {"filename": "intro.html", "animations": {"groups": [{"order": "x", "elementIds": ["a"]}]}},
        ]}))
        deck = discover_slides(temp_dir)
        assert deck.source == "manifest"
        assert deck.files == ["intro.html"]

    @pytest.mark.parametrize("data", [
        {},
        {"slides": []},
        {"slides": "nope"},
        {"slides": [{"title": "No file"}]},
        [1, 2, 3],
    ])
    def test_invalid_manifest(self, data):
        """Test structurally invalid manifests raise ManifestError."""
        with pytest.raises(ManifestError):
            parse_manifest(data)


class TestLoadManifest:

    def test_missing_file(self, temp_dir):
        """Test a missing manifest raises ManifestError."""
        with pytest.raises(ManifestError, match="not found"):
            load_manifest(temp_dir / "manifest.json")

    def test_invalid_json(self, temp_dir):
        """Test unparsable JSON raises ManifestError."""
        path = temp_dir / "manifest.json"
        path.write_text("{not json")
        with pytest.raises(ManifestError, match="unreadable"):
            load_manifest(path)

    def test_load_from_disk(self, temp_dir, sample_manifest):
        """Test loading a manifest file."""
        path = temp_dir / "manifest.json"
        path.write_text(json.dumps(sample_manifest))
        assert len(load_manifest(path).slides) == 3

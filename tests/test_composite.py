"""
Tests for image_curation/rank/composite.py.

Covers:
  - calculate_overall_score(): weight blending and prioritisation flags
  - enrich_images(): copies, group keys, ordering
  - categorize_images(), select_diverse_images(), build_diverse_image_set()
"""
from __future__ import annotations

from dataclasses import replace

import pytest

from image_curation.io.models import DiversityAnalysis, DiversityOptions, ImageRecord
from image_curation.rank.composite import (
    build_diverse_image_set,
    calculate_overall_score,
    categorize_images,
    enrich_images,
    select_diverse_images,
)


def ranked(url: str, score: float, diversity: float = 1.0, groups=None) -> ImageRecord:
    return ImageRecord(
        url=url,
        overall_score=score,
        diversity_score=diversity,
        similarity_groups=groups if groups is not None else [],
    )


# ── overall score ─────────────────────────────────────────────────────────────

class TestOverallScore:
    def test_diversity_only(self):
        assert calculate_overall_score(ImageRecord(url="u"), 0.4, DiversityOptions()) == (
            pytest.approx(0.4)
        )

    def test_quality_blend(self, make_image):
        image = make_image("u", with_content=False, quality=0.8)
        score = calculate_overall_score(image, 0.5, DiversityOptions())
        assert score == pytest.approx((0.5 * 0.3 + 0.8 * 0.35) / 0.65)

    def test_prioritize_quality(self, make_image):
        image = make_image("u", with_content=False, quality=0.8)
        score = calculate_overall_score(image, 0.5, DiversityOptions(prioritize_quality=True))
        assert score == pytest.approx((0.5 * 0.3 + 0.8 * 0.5) / 0.8)

    def test_content_blend(self, make_image):
        image = make_image("u", product_focus=0.5, commercial_value=1.0)
        score = calculate_overall_score(image, 0.0, DiversityOptions())
        assert score == pytest.approx((0.8 * 0.35) / 0.65)

    def test_prioritize_content(self, make_image):
        image = make_image("u", product_focus=0.5, commercial_value=1.0, quality=0.2)
        options = DiversityOptions(prioritize_content=True)
        score = calculate_overall_score(image, 1.0, options)
        assert score == pytest.approx((0.3 + 0.2 * 0.35 + 0.8 * 0.5) / (0.3 + 0.35 + 0.5))

    def test_score_in_unit_interval(self, make_image):
        image = make_image("u", product_focus=1.0, commercial_value=1.0, quality=1.0)
        assert 0.0 <= calculate_overall_score(image, 1.0, DiversityOptions()) <= 1.0


# ── enrichment ────────────────────────────────────────────────────────────────

class TestEnrichImages:
    def test_returns_sorted_copies(self, make_image):
        low = make_image("low", product_focus=0.1, commercial_value=0.1)
        high = make_image("high", product_focus=0.9, commercial_value=0.9)
        images = [low, high]
        result = enrich_images(images, [["low"], ["high"]], [0.5, 0.5], DiversityOptions())

        assert [image.url for image in result] == ["high", "low"]
        assert low.overall_score is None
        assert images == [low, high]
        assert result[0].diversity_score == 0.5
        assert result[0].similarity_groups == ["high"]

    def test_group_key_joins_members(self):
        images = [ImageRecord(url="a"), ImageRecord(url="b")]
        result = enrich_images(images, [["a", "b"]], [0.2, 0.2], DiversityOptions())
        assert all(image.similarity_groups == ["a,b"] for image in result)

    def test_ties_keep_input_order(self):
        images = [ImageRecord(url=url) for url in ("x", "y", "z")]
        result = enrich_images(images, [["x"], ["y"], ["z"]], [0.3] * 3, DiversityOptions())
        assert [image.url for image in result] == ["x", "y", "z"]


# ── categorisation ────────────────────────────────────────────────────────────

class TestCategorize:
    def test_buckets_by_recommended_section(self, make_image):
        images = [
            replace(make_image("m1", section="main"), overall_score=0.4),
            replace(make_image("m2", section="main"), overall_score=0.9),
            replace(make_image("d1", section="detail"), overall_score=0.5),
            replace(make_image("o1", section="other"), overall_score=0.9),
            ImageRecord(url="bare", overall_score=1.0),
        ]
        buckets = categorize_images(images)
        assert [image.url for image in buckets["main"]] == ["m2", "m1"]
        assert [image.url for image in buckets["detail"]] == ["d1"]
        assert buckets["lifestyle"] == []
        assert buckets["specification"] == []

    def test_truncates_to_max_group_size(self, make_image):
        images = [
            replace(make_image(f"m{i}"), overall_score=i / 10) for i in range(5)
        ]
        assert [image.url for image in categorize_images(images, max_group_size=2)["main"]] == [
            "m4",
            "m3",
        ]


# ── diverse picks ─────────────────────────────────────────────────────────────

class TestSelectDiverse:
    def test_caps_at_five(self):
        images = [ranked(f"u{i}", 1 - i / 10) for i in range(7)]
        assert len(select_diverse_images(images)) == 5

    def test_one_image_per_group(self):
        images = [
            ranked("a", 0.9, 0.5, ["a,b"]),
            ranked("b", 0.8, 0.5, ["a,b"]),
            ranked("c", 0.7, 1.0, ["c"]),
        ]
        assert [image.url for image in select_diverse_images(images)] == ["a", "c"]

    def test_low_diversity_is_skipped(self):
        images = [
            ranked("a", 0.9, 0.1, ["a,b"]),
            ranked("b", 0.8, 0.4, ["a,b"]),
        ]
        assert [image.url for image in select_diverse_images(images)] == ["b"]

    def test_custom_minimum(self):
        images = [ranked("a", 0.9, 0.1, ["a"])]
        assert select_diverse_images(images, min_diversity_score=0.0) == images


# ── diverse image set ─────────────────────────────────────────────────────────

class TestDiverseImageSet:
    def test_tops_up_from_diverse_picks(self):
        m1, m2, d1 = ranked("m1", 0.9), ranked("m2", 0.8), ranked("d1", 0.7)
        extras = [ranked(f"x{i}", 0.5) for i in range(4)]
        analysis = DiversityAnalysis(
            images=[m1, m2, d1, *extras],
            diverse=[m1, *extras],
            by_category={"main": [m1, m2], "detail": [d1], "lifestyle": [], "specification": []},
        )
        image_set = build_diverse_image_set(analysis)

        assert [image.url for image in image_set.main_images] == ["m1"]
        assert [image.url for image in image_set.detail_images] == ["d1"]
        assert [image.url for image in image_set.all_images] == ["m1", "d1", "x0", "x1", "x2"]

    def test_target_categories_override(self):
        m1, m2 = ranked("m1", 0.9), ranked("m2", 0.8)
        analysis = DiversityAnalysis(
            images=[m1, m2],
            diverse=[],
            by_category={"main": [m1, m2], "detail": [], "lifestyle": [], "specification": []},
        )
        image_set = build_diverse_image_set(analysis, {"main": 2})
        assert [image.url for image in image_set.main_images] == ["m1", "m2"]

    def test_empty_analysis(self):
        image_set = build_diverse_image_set(DiversityAnalysis())
        assert image_set.all_images == []

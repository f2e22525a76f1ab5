"""
Tests for the similarity engine, single-seed grouping and diversity scores.
"""
from __future__ import annotations

import numpy as np
import pytest

from image_curation.group.clustering import group_metrics, group_similar_images
from image_curation.group.diversity import calculate_diversity_scores
from image_curation.group.similarity import (
    SimilarityFactor,
    calculate_similarity_matrix,
    combine_components,
    combined_similarity,
    pair_components,
    pairwise_scores,
)
from image_curation.io.models import ImageRecord


# ── pairwise similarity ───────────────────────────────────────────────────────

class TestPairSimilarity:
    def test_identical_records_score_one(self, make_image):
        a = make_image("a", quality=0.8, width=1000, height=800)
        b = make_image("b", quality=0.8, width=1000, height=800)
        assert combined_similarity(a, b) == pytest.approx(1.0)

    def test_disjoint_records_score_zero(self, make_image):
        a = make_image("a", tags=("korean",), color="#ffffff", main_object="bag")
        b = make_image(
            "b",
            content_type="lifestyle",
            section="lifestyle",
            tags=("scene",),
            color="#000000",
            main_object="sofa",
        )
        assert combined_similarity(a, b) == pytest.approx(0.0)

    def test_no_shared_fields_scores_zero(self):
        assert combined_similarity(ImageRecord(url="a"), ImageRecord(url="b")) == 0.0

    def test_content_factors_need_both_sides(self, make_image):
        a = make_image("a")
        b = make_image("b", with_content=False)
        assert pair_components(a, b) == {}

    def test_malformed_colour_skips_only_colour_factor(self, make_image):
        a = make_image("a", color="unknown")
        b = make_image("b")
        components = pair_components(a, b)
        assert SimilarityFactor.COLOR not in components
        assert SimilarityFactor.MAIN_OBJECT in components
        assert combine_components(components) == pytest.approx(1.0)

    def test_resolution_factor(self, make_image):
        a = make_image("a", with_content=False, quality=0.5, width=1000, height=1000)
        b = make_image("b", with_content=False, quality=0.5, width=1000, height=850)
        c = make_image("c", with_content=False, quality=0.5, width=500, height=500)
        assert pair_components(a, b) == {SimilarityFactor.RESOLUTION: 1.0}
        assert pair_components(a, c) == {SimilarityFactor.RESOLUTION: 0.0}

    def test_quality_without_resolution_adds_no_factor(self, make_image):
        a = make_image("a", with_content=False, quality=0.5)
        b = make_image("b", with_content=False, quality=0.5, width=10, height=10)
        assert pair_components(a, b) == {}

    def test_partial_tag_overlap(self, make_image):
        a = make_image("a", tags=("x", "y"))
        b = make_image("b", tags=("x", "z", "w"))
        components = pair_components(a, b)
        assert components[SimilarityFactor.TAGS] == pytest.approx(0.5)
        expected = (0.3 + 0.25 + 0.15 * 0.5 + 0.2 + 0.3) / 1.2
        assert combine_components(components) == pytest.approx(expected)


# ── matrix ────────────────────────────────────────────────────────────────────

class TestSimilarityMatrix:
    def test_empty_input(self):
        assert calculate_similarity_matrix([]).shape == (0, 0)

    def test_symmetric_with_unit_diagonal(self, make_image):
        images = [
            make_image("a"),
            make_image("b", color="#101010", tags=("korean", "minimal")),
            make_image("c", with_content=False, quality=0.4, width=100, height=100),
            make_image("d", color="garbage", section="detail"),
            ImageRecord(url="e"),
        ]
        matrix = calculate_similarity_matrix(images)
        assert matrix.shape == (5, 5)
        assert np.allclose(np.diagonal(matrix), 1.0)
        assert np.array_equal(matrix, matrix.T)
        assert matrix.min() >= 0.0
        assert matrix.max() <= 1.0

    def test_does_not_mutate_input(self, scenario_images):
        before = [image.to_dict() for image in scenario_images]
        calculate_similarity_matrix(scenario_images)
        assert [image.to_dict() for image in scenario_images] == before

    def test_pairwise_scores_lists_each_pair_once(self, scenario_images):
        matrix = calculate_similarity_matrix(scenario_images)
        pairs = list(pairwise_scores(scenario_images, matrix))
        assert len(pairs) == 3
        assert pairs[0][:2] == (scenario_images[0].url, scenario_images[1].url)


# ── grouping ──────────────────────────────────────────────────────────────────

class TestGrouping:
    def test_scenario_groups(self, scenario_images):
        matrix = calculate_similarity_matrix(scenario_images)
        groups = group_similar_images(scenario_images, matrix)
        a, b, c = (image.url for image in scenario_images)
        assert groups == [[a, b], [c]]

    def test_membership_is_decided_against_seed_only(self):
        images = [ImageRecord(url=url) for url in ("s", "m", "x")]
        matrix = np.array(
            [
                [1.0, 0.9, 0.1],
                [0.9, 1.0, 0.9],
                [0.1, 0.9, 1.0],
            ]
        )
        assert group_similar_images(images, matrix) == [["s", "m"], ["x"]]

    def test_threshold_is_strict(self):
        images = [ImageRecord(url="a"), ImageRecord(url="b")]
        matrix = np.array([[1.0, 0.75], [0.75, 1.0]])
        assert group_similar_images(images, matrix, threshold=0.75) == [["a"], ["b"]]

    def test_empty_input(self):
        assert group_similar_images([], np.eye(0)) == []

    def test_group_metrics(self):
        metrics = group_metrics([["a", "b", "c"], ["d"]], total_images=4)
        assert metrics["groups"] == 2
        assert metrics["largest_group"] == 3
        assert metrics["singletons"] == 1
        assert metrics["duplicates"] == 2


# ── diversity ─────────────────────────────────────────────────────────────────

class TestDiversityScores:
    def test_single_image_scores_zero(self):
        assert calculate_diversity_scores(np.eye(1)) == [0.0]

    def test_empty_matrix(self):
        assert calculate_diversity_scores(np.eye(0)) == []

    def test_scenario_diversity(self, scenario_images):
        scores = calculate_diversity_scores(calculate_similarity_matrix(scenario_images))
        assert scores[0] == pytest.approx(0.5)
        assert scores[1] == pytest.approx(0.5)
        assert scores[2] == pytest.approx(1.0)
        assert scores[2] > scores[0]

    def test_scores_stay_in_unit_interval(self):
        matrix = np.array([[1.0, 0.2, 0.6], [0.2, 1.0, 0.0], [0.6, 0.0, 1.0]])
        scores = calculate_diversity_scores(matrix)
        assert scores == pytest.approx([0.6, 0.9, 0.7])
        assert all(0.0 <= score <= 1.0 for score in scores)

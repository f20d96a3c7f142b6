"""Tests for the scoring function library."""

import pytest

from readiness_scorer.exceptions import ScoringConfigError
from readiness_scorer.functions import (
    apply_scoring,
    exponential_scoring,
    linear_scoring,
    threshold_scoring,
    weighted_scoring,
)
from readiness_scorer.schema import (
    ExponentialScoring,
    LinearScoring,
    Question,
    ThresholdScoring,
    WeightedScoring,
)


LINEAR = LinearScoring(weight=1.0, max_score=10)
WEIGHTED = WeightedScoring(weight=1.0, max_score=10)

SINGLE = Question(
    id="company_size",
    type="single_select",
    options=[
        {"id": "a", "value": "startup", "label": "Startup", "weight": 0.3},
        {"id": "b", "value": "enterprise", "label": "Enterprise", "weight": 0.9},
    ],
)

MULTI = Question(
    id="security_practices",
    type="multi_select",
    options=[
        {"id": "sso", "value": "sso", "label": "SSO", "weight": 2},
        {"id": "mfa", "value": "mfa", "label": "MFA", "weight": 1},
        {"id": "rbac", "value": "rbac", "label": "RBAC", "weight": 1},
    ],
)


def threshold_config(*bands) -> ThresholdScoring:
    return ThresholdScoring(
        weight=1.0,
        max_score=10,
        threshold_config={"thresholds": [{"min": lo, "max": hi, "score": s} for lo, hi, s in bands]},
    )


class TestLinearScoring:
    """Tests for linear scoring."""

    def test_endpoints(self):
        assert linear_scoring(0, LINEAR) == 0
        assert linear_scoring(1, LINEAR) == LINEAR.max_score

    def test_proportional(self):
        assert linear_scoring(0.25, LINEAR) == pytest.approx(2.5)


class TestExponentialScoring:
    """Tests for exponential scoring."""

    def config(self, base=2, multiplier=1.5, offset=0) -> ExponentialScoring:
        return ExponentialScoring(
            weight=1.0,
            max_score=10,
            exponential_config={"base": base, "multiplier": multiplier, "offset": offset},
        )

    def test_full_value_reaches_max(self):
        assert exponential_scoring(1, self.config()) == pytest.approx(10)

    def test_zero_value(self):
        assert exponential_scoring(0, self.config()) == 0

    def test_rewards_high_values(self):
        """Half the input earns less than half the score."""
        config = self.config(base=2, multiplier=1.5)
        expected = (0.5 * 2) ** 1.5 / 2 ** 1.5 * 10
        assert exponential_scoring(0.5, config) == pytest.approx(expected)
        assert exponential_scoring(0.5, config) < 5

    def test_offset(self):
        config = self.config(base=2, multiplier=1, offset=2)
        assert exponential_scoring(0, config) == pytest.approx(5)

    def test_negative_offset_is_clamped_to_zero(self):
        config = self.config(base=2, multiplier=1, offset=-1)
        assert exponential_scoring(0, config) == 0

    def test_missing_exponential_config_rejected(self):
        with pytest.raises(ValueError):
            ExponentialScoring(weight=1.0, max_score=10)


class TestThresholdScoring:
    """Tests for threshold scoring."""

    BANDS = threshold_config((0, 3, 2), (3, 7, 6), (7, 10, 10))

    def test_band_lookup(self):
        assert threshold_scoring(0.1, self.BANDS) == 2
        assert threshold_scoring(0.5, self.BANDS) == 6
        assert threshold_scoring(0.9, self.BANDS) == 10

    @pytest.mark.parametrize("value,expected", [
        (0.0, 2),   # lower edge of first band
        (0.3, 2),   # shared edge resolves to the lower band
        (0.7, 6),
        (1.0, 10),  # upper edge of last band
    ])
    def test_boundaries(self, value, expected):
        assert threshold_scoring(value, self.BANDS) == expected

    def test_every_value_maps_to_one_score(self):
        scores = {threshold_scoring(i / 100, self.BANDS) for i in range(101)}
        assert scores == {2, 6, 10}

    def test_unsorted_bands_are_sorted_without_mutation(self):
        config = threshold_config((7, 10, 10), (0, 3, 2), (3, 7, 6))
        assert threshold_scoring(0.3, config) == 2
        assert config.threshold_config.thresholds[0].min == 7

    def test_no_match_scores_zero(self):
        config = threshold_config((0, 0, 2), (1, 2, 6), (3, 10, 10))
        assert threshold_scoring(0.05, config) == 0

    def test_score_above_max_rejected(self):
        with pytest.raises(ValueError):
            threshold_config((0, 10, 12))

    def test_inverted_band_rejected(self):
        with pytest.raises(ValueError):
            threshold_config((5, 1, 2))


class TestWeightedScoring:
    """Tests for weighted scoring on select questions."""

    def test_single_select_by_value(self):
        assert weighted_scoring("enterprise", SINGLE, WEIGHTED) == pytest.approx(10)
        assert weighted_scoring("startup", SINGLE, WEIGHTED) == pytest.approx(0.3 / 0.9 * 10)

    def test_single_select_by_id(self):
        assert weighted_scoring("b", SINGLE, WEIGHTED) == pytest.approx(10)

    def test_single_select_unknown_option(self):
        assert weighted_scoring("mega-corp", SINGLE, WEIGHTED) == 0

    def test_single_select_without_weights(self):
        question = Question(id="q", type="single_select",
                            options=[{"id": "x", "value": "x", "label": "X"}])
        assert weighted_scoring("x", question, WEIGHTED) == 0

    def test_multi_select_none(self):
        assert weighted_scoring([], MULTI, WEIGHTED) == 0

    def test_multi_select_all(self):
        assert weighted_scoring(["sso", "mfa", "rbac"], MULTI, WEIGHTED) == pytest.approx(10)

    def test_multi_select_partial(self):
        assert weighted_scoring(["sso", "mfa"], MULTI, WEIGHTED) == pytest.approx(7.5)

    def test_multi_select_duplicates_count_once(self):
        assert weighted_scoring(["sso", "sso", "sso"], MULTI, WEIGHTED) == pytest.approx(5)

    def test_multi_select_unknown_ids_ignored(self):
        assert weighted_scoring(["sso", "vpn"], MULTI, WEIGHTED) == pytest.approx(5)


class TestApplyScoring:
    """Tests for scoring function dispatch."""

    def test_dispatches_weighted_with_raw_value(self):
        assert apply_scoring("enterprise", WEIGHTED, SINGLE, "enterprise") == pytest.approx(10)

    def test_dispatches_linear(self):
        question = Question(id="q", type="percentage")
        assert apply_scoring(0.5, LINEAR, question, 50) == pytest.approx(5)

    def test_select_with_numeric_function_is_config_error(self):
        with pytest.raises(ScoringConfigError, match="require weighted scoring"):
            apply_scoring("enterprise", LINEAR, SINGLE, "enterprise")

    def test_unknown_function_is_config_error(self):
        bogus = LinearScoring.model_construct(weight=1.0, max_score=10, scoring_function="quadratic")
        question = Question(id="q", type="percentage")
        with pytest.raises(ScoringConfigError, match="Unknown scoring function"):
            apply_scoring(0.5, bogus, question, 50)


class TestBoundedness:
    """Scores never leave [0, max_score]."""

    @pytest.mark.parametrize("value", [i / 20 for i in range(21)])
    def test_numeric_functions_bounded(self, value):
        exponential = ExponentialScoring(
            weight=1.0, max_score=10,
            exponential_config={"base": 3, "multiplier": 2, "offset": 1},
        )
        bands = threshold_config((0, 5, 4), (5, 10, 9))
        for score in (
            linear_scoring(value, LINEAR),
            exponential_scoring(value, exponential),
            threshold_scoring(value, bands),
        ):
            assert 0 <= score <= 10

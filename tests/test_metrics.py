"""
Metric derivation edge cases.

Pure functions only, no database.
"""
import pytest

from backoffice.utils.metrics import (
    average,
    bucketize,
    churn_rate,
    inventory_value,
    ltv_bucket,
    percentage_growth,
    product_turnover,
    round_metric,
    safe_divide,
)


class TestSafeDivide:

    def test_zero_denominator_is_zero(self):
        assert safe_divide(50, 0) == 0.0

    def test_missing_denominator_is_zero(self):
        assert safe_divide(50, None) == 0.0

    def test_default_scale_is_percent(self):
        assert safe_divide(50, 200) == 25.0

    def test_custom_scale(self):
        assert safe_divide(10, 4, scale=1) == 2.5

    def test_missing_numerator_counts_as_zero(self):
        assert safe_divide(None, 10) == 0.0


class TestPercentageGrowth:

    def test_growth(self):
        assert percentage_growth(150, 100) == 50.0

    def test_decline(self):
        assert percentage_growth(50, 100) == -50.0

    def test_no_previous_value(self):
        assert percentage_growth(150, 0) == 0.0
        assert percentage_growth(150, None) == 0.0

    def test_negative_previous_uses_magnitude(self):
        # -100 -> 100 is an improvement, reported as positive growth
        assert percentage_growth(100, -100) == 200.0


class TestBucketize:

    def test_value_below_first_threshold(self):
        assert bucketize(5, [10, 20], ["a", "b", "c"]) == "a"

    def test_threshold_is_exclusive(self):
        assert bucketize(10, [10, 20], ["a", "b", "c"]) == "b"

    def test_value_above_last_threshold(self):
        assert bucketize(1_000, [10, 20], ["a", "b", "c"]) == "c"

    def test_label_count_must_match(self):
        with pytest.raises(ValueError):
            bucketize(1, [10, 20], ["a", "b"])


class TestLtvBucket:

    @pytest.mark.parametrize("spent,label", [
        (0, "Low"),
        (99.99, "Low"),
        (100, "Medium"),
        (499.99, "Medium"),
        (500, "High"),
        (None, "Low"),
    ])
    def test_boundaries(self, spent, label):
        assert ltv_bucket(spent) == label


class TestChurnRate:

    def test_no_customers(self):
        assert churn_rate(0, 0, 0) == 0.0

    def test_everyone_is_new(self):
        assert churn_rate(5, 5, 0) == 0.0

    def test_half_of_previous_lost(self):
        # previous = 10 - 2 = 8, lost = 8 - 4 = 4
        assert churn_rate(10, 2, 4) == 50.0

    def test_all_previous_returned(self):
        assert churn_rate(10, 2, 8) == 0.0


class TestProductTurnover:

    def test_never_sold_is_none(self):
        assert product_turnover(None, 20) is None

    def test_stock_offset(self):
        # average inventory (5 + 10) / 2 = 7.5
        assert product_turnover(15, 5) == 2.0

    def test_out_of_stock_product(self):
        assert product_turnover(10, 0) == 2.0


class TestSmallHelpers:

    def test_average_ignores_none(self):
        assert average([1.0, None, 3.0]) == 2.0

    def test_average_of_nothing(self):
        assert average([]) == 0.0
        assert average([None]) == 0.0

    def test_round_metric(self):
        assert round_metric(33.33333) == 33.33
        assert round_metric(None) == 0.0
        assert round_metric(2) == 2.0

    def test_inventory_value_is_product_of_sums(self):
        assert inventory_value(55, 35.0) == 1925.0
        assert inventory_value(None, 10.0) == 0

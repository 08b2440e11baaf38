"""
Risk score arithmetic. Scores are pinned exactly: base 50 plus the
time-in-business, amount and loan-type adjustments.
"""
import itertools
import unittest

from services.risk_scoring import (
    amount_adjustment,
    calculate_risk_score,
    score_application,
    years_in_business_adjustment,
)


class TestRiskScore(unittest.TestCase):
    def test_established_small_refinance(self):
        """50 - 15 (years) - 5 (amount < 100k) - 10 (refinance) = 20."""
        self.assertEqual(calculate_risk_score(6, 50_000, "refinance"), 20)

    def test_new_large_bridge_loan(self):
        """50 + 20 (years < 1) + 15 (amount > 5M) + 10 (bridge) = 95."""
        self.assertEqual(calculate_risk_score(0, 6_000_000, "bridge_loan"), 95)

    def test_working_capital_mid_band(self):
        """50 - 8 (2-5 years) + 0 (amount) + 5 (working capital) = 47."""
        self.assertEqual(calculate_risk_score(3, 500_000, "working_capital"), 47)

    def test_unknown_loan_type_has_no_adjustment(self):
        self.assertEqual(calculate_risk_score(1.5, 500_000, "franchise"), 50)
        self.assertEqual(calculate_risk_score(1.5, 500_000, None), 50)

    def test_years_bands(self):
        self.assertEqual(years_in_business_adjustment(5), -15)
        self.assertEqual(years_in_business_adjustment(4.9), -8)
        self.assertEqual(years_in_business_adjustment(2), -8)
        self.assertEqual(years_in_business_adjustment(1.9), 0)
        self.assertEqual(years_in_business_adjustment(1), 0)
        self.assertEqual(years_in_business_adjustment(0.99), 20)
        self.assertEqual(years_in_business_adjustment(None), 0)

    def test_amount_bands(self):
        self.assertEqual(amount_adjustment(5_000_001), 15)
        self.assertEqual(amount_adjustment(5_000_000), 0)
        self.assertEqual(amount_adjustment(100_000), 0)
        self.assertEqual(amount_adjustment(99_999), -5)
        self.assertEqual(amount_adjustment(None), 0)

    def test_score_always_within_bounds(self):
        years = [None, 0, 0.5, 1, 2, 5, 30]
        amounts = [None, 1_000, 99_999, 100_000, 5_000_000, 5_000_001, 50_000_000]
        types = ["refinance", "bridge_loan", "working_capital", "other", ""]
        for y, a, t in itertools.product(years, amounts, types):
            score = calculate_risk_score(y, a, t)
            self.assertGreaterEqual(score, 0)
            self.assertLessEqual(score, 100)


class TestAutoApproval(unittest.TestCase):
    def test_low_score_and_valid_is_eligible(self):
        result = score_application(
            {"years_in_business": 6, "amount_requested": 50_000, "loan_type": "refinance"},
            is_valid=True,
        )
        self.assertEqual(result.risk_score, 20)
        self.assertTrue(result.auto_approval_eligible)

    def test_low_score_but_invalid_is_not_eligible(self):
        result = score_application(
            {"years_in_business": 6, "amount_requested": 50_000, "loan_type": "refinance"},
            is_valid=False,
        )
        self.assertFalse(result.auto_approval_eligible)

    def test_threshold_is_strict(self):
        """50 - 15 - 5 = 30 with no loan-type adjustment: not below 30."""
        result = score_application(
            {"years_in_business": 6, "amount_requested": 50_000, "loan_type": "other"},
            is_valid=True,
        )
        self.assertEqual(result.risk_score, 30)
        self.assertFalse(result.auto_approval_eligible)

    def test_high_score_is_not_eligible(self):
        result = score_application(
            {"yearsInBusiness": 0, "amountRequested": 6_000_000, "loanType": "bridge_loan"},
            is_valid=True,
        )
        self.assertEqual(result.risk_score, 95)
        self.assertFalse(result.auto_approval_eligible)

    def test_scoring_is_repeatable(self):
        data = {"years_in_business": 3, "amount_requested": 250_000, "loan_type": "bridge_loan"}
        self.assertEqual(score_application(data, True), score_application(data, True))


if __name__ == "__main__":
    unittest.main()

import pytest

from app.features.reports.services.scoring import calculate_accessibility_score, summarize


class TestAccessibilityScore:
    def test_no_violations_is_perfect(self):
        assert calculate_accessibility_score([]) == 100

    def test_single_critical_violation_two_nodes(self, make_violation):
        # weighted 2*4 = 8, possible 10*4 = 40 -> 100 - 20
        violations = [make_violation(impact="critical", node_count=2)]
        assert calculate_accessibility_score(violations) == 80

    def test_critical_and_minor_five_nodes_each(self, make_violation):
        # weighted 20 + 5 = 25, possible 40 + 10 = 50 -> 100 - 50
        violations = [
            make_violation("image-alt", impact="critical", node_count=5),
            make_violation("region", impact="minor", node_count=5),
        ]
        assert calculate_accessibility_score(violations) == 50

    @pytest.mark.parametrize("impact", [None, "", "unknown", "CRITICAL"])
    def test_unrecognized_impacts_do_not_count(self, make_violation, impact):
        violations = [make_violation(impact=impact, node_count=7)]
        assert calculate_accessibility_score(violations) == 100

    def test_missing_impact_key_does_not_count(self, make_violation):
        violation = make_violation(node_count=3)
        del violation["impact"]
        assert calculate_accessibility_score([violation]) == 100

    def test_many_nodes_clamps_to_zero(self, make_violation):
        violations = [make_violation(impact="serious", node_count=50)]
        assert calculate_accessibility_score(violations) == 0

    def test_violation_without_nodes_keeps_score_at_100(self, make_violation):
        violations = [make_violation(impact="moderate", node_count=0)]
        assert calculate_accessibility_score(violations) == 100

    def test_half_rounds_up(self, make_violation):
        # weighted 15 of possible 10 + 30 = 40 -> 100 - 37.5 = 62.5 -> 63
        violations = [
            make_violation("a", impact="minor", node_count=15),
            make_violation("b", impact="serious", node_count=0),
        ]
        assert calculate_accessibility_score(violations) == 63

    @pytest.mark.parametrize("node_count", [0, 1, 3, 9, 10, 11, 25, 100])
    @pytest.mark.parametrize("impact", ["critical", "serious", "moderate", "minor", None])
    def test_score_is_always_within_bounds(self, make_violation, impact, node_count):
        violations = [
            make_violation("x", impact=impact, node_count=node_count),
            make_violation("y", impact="minor", node_count=1),
        ]
        assert 0 <= calculate_accessibility_score(violations) <= 100

    def test_does_not_mutate_input(self, make_violation):
        violations = [make_violation(impact="critical", node_count=2)]
        snapshot = [dict(v) for v in violations]
        calculate_accessibility_score(violations)
        assert violations == snapshot


def test_summarize_counts_every_group(make_violation, make_axe_results):
    axe_results = make_axe_results(
        violations=[make_violation(impact="critical", node_count=2)],
        passes=4,
        incomplete=2,
        inapplicable=7,
    )

    summary = summarize(axe_results)

    assert summary.violations == 1
    assert summary.passes == 4
    assert summary.incomplete == 2
    assert summary.inapplicable == 7
    assert summary.accessibility_score == 80
    assert summary.model_dump(by_alias=True)["accessibilityScore"] == 80

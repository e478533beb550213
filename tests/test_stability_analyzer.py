from __future__ import annotations

import pytest

from uiheal.core.engine import SelfHealingEngine
from uiheal.core.stability import GENERAL_BEST_PRACTICES, StabilityAnalyzer
from tests.helpers import FakeNode, FakePage


@pytest.mark.parametrize(
    ("locator", "expected"),
    [
        ("#save", 80),
        ('[data-testid="save"]', 75),
        ('[aria-label="Save"]', 70),
        (".btn", 60),
        ("li:nth-child(2)", 30),
        ('//div[@class="row"][3]', 40),
        ("button", 50),
    ],
)
def test_stability_scores(locator, expected):
    assert StabilityAnalyzer.score(locator) == expected


def test_id_locators_outrank_class_and_position():
    assert StabilityAnalyzer.score("#checkout") >= StabilityAnalyzer.score(".checkout")
    assert StabilityAnalyzer.score("ul > li:nth-child(4)") < StabilityAnalyzer.score("#checkout")


def test_scores_stay_in_range():
    assert StabilityAnalyzer.score('#a[data-x="1"][aria-label="b"].c') == 100
    assert 0 <= StabilityAnalyzer.score("div:nth-child(1) span:nth-of-type(2)") <= 100


def test_recommendations_grow_as_score_drops():
    assert StabilityAnalyzer.recommendations(80) == []
    assert len(StabilityAnalyzer.recommendations(45)) == 3
    fragile = StabilityAnalyzer.recommendations(20)
    assert len(fragile) == 5
    assert "This selector is highly fragile and likely to break" in fragile


def test_analyze_stability_is_read_only():
    page = FakePage(nodes=[FakeNode("button", {"id": "save"}, locator="#save")])
    engine = SelfHealingEngine(page)

    report = engine.analyze_stability("li:nth-child(2)")

    assert report.locator == "li:nth-child(2)"
    assert report.score == 30
    assert len(report.recommendations) == 3
    assert page.calls == []
    assert engine.memory.history == []


def test_suggest_robust_locators_offers_stable_alternatives():
    save = FakeNode(
        "button",
        {"id": "save", "data-testid": "save", "aria-label": "Save", "class": "btn primary"},
        text="Save",
        locator="form > button:nth-of-type(1)",
    )
    page = FakePage(nodes=[save])

    result = StabilityAnalyzer(page).suggest_robust_locators(["form > button:nth-of-type(1)", "#missing"])

    (suggestion,) = result.suggestions
    assert suggestion.original_locator == "form > button:nth-of-type(1)"
    assert suggestion.robust_alternatives == ["#save", '[data-testid="save"]', '[aria-label="Save"]', ".btn"]
    assert suggestion.stability_score == 30
    assert len(suggestion.recommendations) == 3
    assert result.general_recommendations == list(GENERAL_BEST_PRACTICES)


def test_suggest_robust_locators_skips_stale_elements():
    stale = FakeNode("a", {"id": "gone"}, locator="#gone", stale=True)

    result = StabilityAnalyzer(FakePage(nodes=[stale])).suggest_robust_locators(["#gone"])

    assert result.suggestions == []
    assert len(result.general_recommendations) == 7


def test_suggest_robust_locators_needs_a_page():
    with pytest.raises(ValueError):
        StabilityAnalyzer().suggest_robust_locators(["#save"])

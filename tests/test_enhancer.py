"""
Tests for the Contextual Enhancer node (re-analysis pass).
"""

import pytest

from nodes.catalog import DocumentType, TagCategory
from nodes.classifier import Evidence, TagSuggestion, DocumentTypeSuggestion
from nodes.aggregator import AnalysisResult
from nodes.enhancer import (
    PREVIOUSLY_TAGGED,
    REANALYSIS_TAG_LIMIT,
    enhance_with_context,
    enhancer_node,
)


def _tag(name: str, confidence: float) -> TagSuggestion:
    return TagSuggestion(
        tag_id=name.lower(),
        name=name,
        category=TagCategory.CATEGORY,
        color="#000000",
        evidence=Evidence(confidence, "test"),
    )


@pytest.fixture
def fresh_result():
    """A first-pass result with two ranked tags."""
    return AnalysisResult(
        document_type=DocumentTypeSuggestion(DocumentType.PDF, ".pdf", Evidence(1.0, "")),
        suggested_project=None,
        suggested_tags=[_tag("Review Required", 0.2), _tag("Financial", 1 / 6)],
        extracted_content="Invoice for services rendered.",
        overall_confidence=18,
    )


@pytest.fixture
def full_result():
    """A result already holding six ranked tags."""
    return AnalysisResult(
        document_type=DocumentTypeSuggestion(DocumentType.TEXT, ".txt", Evidence(1.0, "")),
        suggested_project=None,
        suggested_tags=[
            _tag("A", 0.9), _tag("B", 0.8), _tag("C", 0.6),
            _tag("D", 0.5), _tag("E", 0.4), _tag("F", 0.1),
        ],
        extracted_content="",
        overall_confidence=55,
    )


class TestPreviouslyTagged:
    """Tests for the synthetic contextual suggestion."""

    def test_fixed_fields(self):
        assert PREVIOUSLY_TAGGED.tag_id == "previously_tagged"
        assert PREVIOUSLY_TAGGED.name == "Similar to Previous"
        assert PREVIOUSLY_TAGGED.category == TagCategory.CONTEXT
        assert PREVIOUSLY_TAGGED.confidence == 0.7
        assert "previous tagging patterns" in PREVIOUSLY_TAGGED.rationale


class TestEnhanceWithContext:
    """Tests for enhance_with_context."""

    def test_appends_when_document_has_tags(self, fresh_result):
        enhanced = enhance_with_context(fresh_result, [{"id": "1", "name": "Important"}])
        assert [t.tag_id for t in enhanced.suggested_tags] == [
            "review required", "financial", "previously_tagged",
        ]
        assert enhanced.suggested_tags[-1].confidence == 0.7

    def test_appended_after_sorting(self, fresh_result):
        """0.7 outranks every tag but is still placed last."""
        enhanced = enhance_with_context(fresh_result, [{"name": "Important"}])
        assert enhanced.suggested_tags[-1] is PREVIOUSLY_TAGGED
        assert enhanced.suggested_tags[0].confidence < PREVIOUSLY_TAGGED.confidence

    def test_exactly_one_contextual_suggestion(self, fresh_result):
        tags = [{"name": "A"}, {"name": "B"}, {"name": "C"}]
        enhanced = enhance_with_context(fresh_result, tags)
        ids = [t.tag_id for t in enhanced.suggested_tags]
        assert ids.count("previously_tagged") == 1

    @pytest.mark.parametrize("existing", [None, []])
    def test_no_contextual_suggestion_without_tags(self, fresh_result, existing):
        enhanced = enhance_with_context(fresh_result, existing)
        assert "previously_tagged" not in [t.tag_id for t in enhanced.suggested_tags]
        assert enhanced.suggested_tags == fresh_result.suggested_tags

    def test_marks_reanalysis(self, fresh_result):
        assert enhance_with_context(fresh_result, []).is_reanalysis is True

    def test_input_not_mutated(self, fresh_result):
        enhance_with_context(fresh_result, [{"name": "Important"}])
        assert len(fresh_result.suggested_tags) == 2
        assert fresh_result.is_reanalysis is False

    def test_cap_drops_lowest_confidence_first(self, full_result):
        enhanced = enhance_with_context(full_result, [{"name": "Important"}])
        assert len(enhanced.suggested_tags) == REANALYSIS_TAG_LIMIT == 6
        assert [t.name for t in enhanced.suggested_tags] == [
            "A", "B", "C", "D", "E", "Similar to Previous",
        ]

    def test_cap_drops_contextual_when_ranked_tags_score_higher(self, full_result):
        """Six ranked tags above 0.7 leave no room for the contextual one."""
        strong = full_result.with_tags([_tag(str(i), 0.9) for i in range(6)])
        enhanced = enhance_with_context(strong, [{"name": "Important"}])
        assert [t.name for t in enhanced.suggested_tags] == ["0", "1", "2", "3", "4", "5"]
        assert PREVIOUSLY_TAGGED not in enhanced.suggested_tags

    def test_cap_without_contextual(self, full_result):
        enhanced = enhance_with_context(full_result, [], limit=4)
        assert [t.name for t in enhanced.suggested_tags] == ["A", "B", "C", "D"]

    def test_other_fields_preserved(self, fresh_result):
        enhanced = enhance_with_context(fresh_result, [{"name": "x"}])
        assert enhanced.overall_confidence == fresh_result.overall_confidence
        assert enhanced.extracted_content == fresh_result.extracted_content
        assert enhanced.document_type == fresh_result.document_type


class TestEnhancerNode:
    """Tests for the pipeline node."""

    def test_node(self, fresh_result):
        state = {
            "result": fresh_result,
            "existing_tags": [{"name": "Important"}],
        }
        result = enhancer_node(state)["result"]
        assert result.is_reanalysis
        assert result.suggested_tags[-1].tag_id == "previously_tagged"

    def test_node_limit_from_state(self, full_result):
        state = {
            "result": full_result,
            "existing_tags": [{"name": "Important"}],
            "max_reanalysis_suggestions": 3,
        }
        result = enhancer_node(state)["result"]
        assert [t.name for t in result.suggested_tags] == ["A", "B", "Similar to Previous"]

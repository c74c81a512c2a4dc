"""Tests for claim extraction and its sentence-split fallback."""

from __future__ import annotations

import json
from unittest.mock import patch

from interview_eval.errors import DependencyFailure
from interview_eval.extraction.claims import extract_claims, fallback_claims
from interview_eval.rubric.normalizer import normalize_rubric

ANSWER = (
    "Normalization reduces redundancy. 1NF needs atomic values! "
    "Ok. Does 2NF remove partial dependencies? Yes"
)


class TestFallbackClaims:
    def test_sentences_over_ten_chars(self):
        result = fallback_claims(ANSWER)
        assert result.claims == [
            "Normalization reduces redundancy",
            "1NF needs atomic values",
            "Does 2NF remove partial dependencies",
        ]
        assert result.wrong_claims == []
        assert result.answer_quality.clarity == 0.5
        assert result.answer_quality.structure == 0.5
        assert result.is_fallback

    def test_empty_answer(self):
        assert fallback_claims("").claims == []


class TestExtractClaims:
    @patch("interview_eval.extraction.claims.invoke_json")
    def test_llm_reply_parsed(self, mock_invoke, sample_question):
        mock_invoke.return_value = {
            "claims": ["Normalization reduces redundancy", "  "],
            "wrongClaims": ["Normalization always speeds up queries"],
            "answerQuality": {"clarity": 0.9, "structure": 1.4},
        }
        result = extract_claims(
            sample_question, ANSWER, normalize_rubric(sample_question.rubric)
        )
        assert result.source == "llm"
        assert result.claims == ["Normalization reduces redundancy"]
        assert result.wrong_claims == ["Normalization always speeds up queries"]
        assert result.answer_quality.clarity == 0.9
        assert result.answer_quality.structure == 1.0

    @patch("interview_eval.extraction.claims.invoke_json")
    def test_prompt_lists_expected_concepts(self, mock_invoke, sample_question):
        mock_invoke.return_value = {"claims": []}
        extract_claims(sample_question, ANSWER, normalize_rubric(sample_question.rubric))
        messages = mock_invoke.call_args.args[0]
        request = messages[1].content
        assert "Must Cover: Normalization reduces data redundancy" in request
        assert "Incorrect Statements to Watch For: Normalization always improves" in request

    @patch("interview_eval.extraction.claims.invoke_json")
    def test_missing_quality_defaults_to_neutral(self, mock_invoke, sample_question):
        mock_invoke.return_value = {"claims": ["x is y"], "answerQuality": "great"}
        result = extract_claims(sample_question, ANSWER, [])
        assert result.answer_quality.clarity == 0.5
        assert result.wrong_claims == []

    @patch("interview_eval.extraction.claims.invoke_json")
    def test_non_numeric_quality_defaults_to_neutral(self, mock_invoke, sample_question):
        mock_invoke.return_value = {"answerQuality": {"clarity": "high", "structure": None}}
        result = extract_claims(sample_question, ANSWER, [])
        assert result.answer_quality.clarity == 0.5
        assert result.answer_quality.structure == 0.5

    @patch("interview_eval.extraction.claims.invoke_json")
    def test_dependency_failure_falls_back(self, mock_invoke, sample_question):
        mock_invoke.side_effect = DependencyFailure("llm", "timeout")
        result = extract_claims(sample_question, ANSWER, [])
        assert result.is_fallback
        assert len(result.claims) == 3

    @patch("interview_eval.extraction.claims.invoke_json")
    def test_malformed_reply_falls_back(self, mock_invoke, sample_question):
        mock_invoke.side_effect = json.JSONDecodeError("Expecting value", "junk", 0)
        result = extract_claims(sample_question, ANSWER, [])
        assert result.is_fallback

    @patch("interview_eval.extraction.claims.invoke_json")
    def test_blank_answer_skips_llm(self, mock_invoke, sample_question):
        result = extract_claims(sample_question, "   ", [])
        mock_invoke.assert_not_called()
        assert result.claims == []

    def test_no_provider_configured_falls_back(self, sample_question):
        result = extract_claims(sample_question, ANSWER, [])
        assert result.is_fallback

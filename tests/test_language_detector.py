"""Tests for LanguageDetector."""

import pytest

from com.kizuna.app.services.language_services.language_detector.language_detector import LanguageDetector
from com.kizuna.app.services.language_services.language_detector.language_detector_schema import Language


def test_english_support_request(detector: LanguageDetector):
    result = detector.detect("Hello, I need help with my bill")
    assert result.primary_language == Language.EN
    assert result.confidence >= 0.3
    assert result.local_terms == []
    assert result.suggested_response == Language.EN


def test_luganda_with_local_term(detector: LanguageDetector):
    result = detector.detect("Nkulamuse, sente zange ziggweewo")
    assert result.primary_language == Language.LG
    assert len(result.local_terms) == 1
    term = result.local_terms[0]
    assert term.term == "sente"
    assert term.meaning == "money"
    assert term.language == Language.LG
    assert result.suggested_response == Language.LG


def test_swahili_with_local_term(detector: LanguageDetector):
    result = detector.detect("Habari, nataka pesa")
    assert result.primary_language == Language.SW
    assert [term.term for term in result.local_terms] == ["pesa"]
    assert result.confidence == 1.0


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_blank_input_defaults_to_english(detector: LanguageDetector, text: str):
    result = detector.detect(text)
    assert result.primary_language == Language.EN
    assert result.confidence == 0.5
    assert result.local_terms == []
    assert result.detected_languages == []


def test_detection_is_deterministic(detector: LanguageDetector):
    text = "webale asante sente pesa simu, please help"
    assert detector.detect(text) == detector.detect(text)
    assert detector.detect(text) == LanguageDetector().detect(text)


def test_close_candidates_are_mixed(detector: LanguageDetector):
    result = detector.detect("webale asante")
    assert result.primary_language == Language.MIXED
    assert result.suggested_response == Language.EN
    assert {candidate.language for candidate in result.detected_languages} == {Language.LG, Language.SW}


def test_clear_leader_wins_over_other_candidates(detector: LanguageDetector):
    result = detector.detect("nkulamuse webale kale bambi siibo sawa")
    assert len(result.detected_languages) == 2
    assert result.primary_language == Language.LG
    assert result.confidence == 1.0


def test_local_terms_override_mixed(detector: LanguageDetector):
    result = detector.detect("webale asante sente pesa simu")
    # lg keywords and sw keywords score equally, but the glossary leans Luganda
    assert [term.language for term in result.local_terms] == [Language.LG, Language.SW, Language.LG]
    assert result.primary_language == Language.LG
    assert result.confidence == 1.0


def test_balanced_local_terms_keep_statistical_result(detector: LanguageDetector):
    result = detector.detect("sente pesa")
    assert result.primary_language == Language.MIXED


def test_punctuation_is_stripped_from_tokens(detector: LanguageDetector):
    result = detector.detect("Nkulamuse!")
    assert result.primary_language == Language.LG
    lg = next(candidate for candidate in result.detected_languages if candidate.language == Language.LG)
    assert lg.words == ["nkulamuse"]


def test_ambiguous_term_follows_default_priority(detector: LanguageDetector):
    result = detector.detect("oda yange")
    assert result.local_terms[0].term == "oda"
    assert result.local_terms[0].language == Language.LG
    assert result.primary_language == Language.LG


def test_ambiguous_term_priority_is_configurable():
    detector = LanguageDetector(term_priority=("sw", "lg"))
    result = detector.detect("oda yange")
    assert result.local_terms[0].language == Language.SW
    assert result.primary_language == Language.SW


def test_every_glossary_hit_is_recorded(detector: LanguageDetector):
    result = detector.detect("sente sente sente")
    assert len(result.local_terms) == 3


def test_confidence_stays_in_range(detector: LanguageDetector):
    for text in ["simu simu simu simu", "the and or but", "????", "boda mita looni amazzi"]:
        result = detector.detect(text)
        assert 0.0 <= result.confidence <= 1.0


def test_language_helpers(detector: LanguageDetector):
    assert detector.get_greeting(Language.LG).startswith("Nkulamuse")
    assert detector.get_greeting(Language.MIXED) == "Hello! How can I help you today?"
    assert detector.get_response_phrases(Language.SW)["thanks"] == "Asante"
    assert detector.get_response_phrases(Language.MIXED)["thanks"] == "Thank you"
    assert detector.get_language_name("sw") == "Swahili"
    assert detector.get_language_name("fr") == "Unknown"


def test_result_serializes_with_camel_case_keys(detector: LanguageDetector):
    payload = detector.detect("Nkulamuse, sente zange").model_dump(mode="json", by_alias=True)
    assert payload["primaryLanguage"] == "lg"
    assert payload["suggestedResponse"] == "lg"
    assert payload["localTerms"][0] == {"term": "sente", "meaning": "money", "language": "lg"}

import re
import string
import logging
from typing import Dict, List, Optional, Sequence, Tuple
from com.kizuna.app.services.language_services.language_detector.language_detector_schema import (
    Language, DetectedLanguage, LocalTerm, LanguageDetectionResult
)
from com.kizuna.app.services.language_services.language_utils.dictionary_utils.language_dictionary import (
    LUGANDA_KEYWORDS, SWAHILI_KEYWORDS, ENGLISH_PATTERNS, ENGLISH_WORDS, SENTENCE_PUNCTUATION,
    LOCAL_TERMS_GLOSSARY, GREETINGS, RESPONSE_PHRASES, LANGUAGE_NAMES, flatten_keywords
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.5
ENGLISH_CANDIDATE_FLOOR = 0.3
MIXED_MARGIN = 0.3
LOCAL_TERM_BOOST = 0.2
_TOKEN_STRIP = string.punctuation.replace("'", "") + "‘’“”"

class LanguageDetector:
    """
    Classifies text as English, Luganda, Swahili or mixed and collects
    local-term glossary hits.

    Detection is a pure function of the keyword tables and the input:
    no I/O, no randomness, no state mutated between calls.
    """

    def __init__(
        self,
        luganda_keywords: Optional[Dict[str, List[str]]] = None,
        swahili_keywords: Optional[Dict[str, List[str]]] = None,
        glossary: Optional[Dict[str, List[Tuple[str, str]]]] = None,
        term_priority: Sequence[str] = ("lg", "sw")
    ):
        self.language_keywords: List[Tuple[Language, List[str]]] = [
            (Language.LG, flatten_keywords(luganda_keywords or LUGANDA_KEYWORDS)),
            (Language.SW, flatten_keywords(swahili_keywords or SWAHILI_KEYWORDS)),
        ]
        self.english_patterns = [re.compile(pattern) for pattern in ENGLISH_PATTERNS]
        self.glossary = glossary if glossary is not None else LOCAL_TERMS_GLOSSARY
        self.term_priority = [Language(code) for code in term_priority]
        logger.debug(f"LanguageDetector initialized with term priority {[lang.value for lang in self.term_priority]}")

    def detect(self, text: str) -> LanguageDetectionResult:
        """Detect the primary language of ``text``"""
        normalized_text = (text or "").lower().strip()
        raw_tokens = normalized_text.split()
        if not raw_tokens:
            logger.debug("Empty input, defaulting to English")
            return self._default_result()

        tokens = [token.strip(_TOKEN_STRIP) for token in raw_tokens]
        tokens = [token for token in tokens if token]
        token_count = len(raw_tokens)

        local_terms = self._find_local_terms(tokens)

        detected_languages: List[DetectedLanguage] = []
        for language, keywords in self.language_keywords:
            matches = self._count_language_matches(tokens, keywords)
            if matches:
                detected_languages.append(DetectedLanguage(
                    language=language,
                    confidence=min(len(matches) / token_count * 2, 1.0),
                    words=matches
                ))

        english_confidence = self._detect_english(normalized_text, token_count)
        if english_confidence > ENGLISH_CANDIDATE_FLOOR:
            detected_languages.append(DetectedLanguage(
                language=Language.EN,
                confidence=english_confidence,
                words=[token for token in tokens if token in ENGLISH_WORDS]
            ))

        primary_language, confidence = self._select_primary(detected_languages)

        if local_terms:
            confidence = min(confidence + len(local_terms) * LOCAL_TERM_BOOST, 1.0)
            lg_terms = sum(1 for term in local_terms if term.language == Language.LG)
            sw_terms = sum(1 for term in local_terms if term.language == Language.SW)
            if lg_terms > sw_terms:
                primary_language = Language.LG
            elif sw_terms > lg_terms:
                primary_language = Language.SW

        suggested = Language.EN if primary_language == Language.MIXED else primary_language
        logger.debug(f"Detected {primary_language.value} ({confidence:.2f}) with {len(local_terms)} local terms")

        return LanguageDetectionResult(
            primary_language=primary_language,
            confidence=confidence,
            detected_languages=detected_languages,
            local_terms=local_terms,
            suggested_response=suggested
        )

    def _default_result(self) -> LanguageDetectionResult:
        return LanguageDetectionResult(
            primary_language=Language.EN,
            confidence=DEFAULT_CONFIDENCE,
            detected_languages=[],
            local_terms=[],
            suggested_response=Language.EN
        )

    @staticmethod
    def _select_primary(candidates: List[DetectedLanguage]) -> Tuple[Language, float]:
        if not candidates:
            return Language.EN, DEFAULT_CONFIDENCE
        if len(candidates) == 1:
            return candidates[0].language, candidates[0].confidence

        ranked = sorted(candidates, key=lambda candidate: candidate.confidence, reverse=True)
        if ranked[0].confidence - ranked[1].confidence > MIXED_MARGIN:
            return ranked[0].language, ranked[0].confidence
        return Language.MIXED, ranked[0].confidence

    @staticmethod
    def _count_language_matches(tokens: List[str], keywords: List[str]) -> List[str]:
        token_set = set(tokens)
        phrase_text = " ".join(tokens)
        matches = []
        for keyword in keywords:
            if " " in keyword:
                if re.search(rf"(?<!\S){re.escape(keyword)}(?!\S)", phrase_text):
                    matches.append(keyword)
            elif keyword in token_set:
                matches.append(keyword)
        return matches

    def _detect_english(self, normalized_text: str, token_count: int) -> float:
        score = 0.0
        for pattern in self.english_patterns:
            score += len(pattern.findall(normalized_text))
        if any(mark in normalized_text for mark in SENTENCE_PUNCTUATION):
            score += 0.5
        return min(score / token_count, 1.0)

    def _find_local_terms(self, tokens: List[str]) -> List[LocalTerm]:
        hits = []
        for token in tokens:
            entries = self.glossary.get(token)
            if not entries:
                continue
            meaning, language = self._resolve_term(token, entries)
            hits.append(LocalTerm(term=token, meaning=meaning, language=Language(language)))
        return hits

    def _resolve_term(self, term: str, entries: List[Tuple[str, str]]) -> Tuple[str, str]:
        """Pick one interpretation of a glossary term shared by several languages"""
        if len(entries) == 1:
            return entries[0]
        for preferred in self.term_priority:
            for meaning, language in entries:
                if language == preferred.value:
                    logger.debug(f"Ambiguous term '{term}' resolved to {language} by priority")
                    return meaning, language
        return entries[0]

    def get_greeting(self, language: Language) -> str:
        """Opening line in the given language"""
        return GREETINGS.get(Language(language).value, GREETINGS["en"])

    def get_response_phrases(self, language: Language) -> Dict[str, str]:
        return dict(RESPONSE_PHRASES.get(Language(language).value, RESPONSE_PHRASES["en"]))

    @staticmethod
    def get_language_name(code: str) -> str:
        return LANGUAGE_NAMES.get((code or "").lower(), "Unknown")

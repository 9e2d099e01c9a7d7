from enum import Enum
from typing import List
from pydantic import Field
from com.kizuna.app.common.schema_base import FrozenCamelModel

class Language(str, Enum):
    EN = "en"
    LG = "lg"
    SW = "sw"
    MIXED = "mixed"

class DetectedLanguage(FrozenCamelModel):
    """A candidate language with the keywords that voted for it"""
    language: Language
    confidence: float = Field(..., ge=0.0, le=1.0)
    words: List[str] = []

class LocalTerm(FrozenCamelModel):
    """Glossary hit for a Luganda or Swahili domain word"""
    term: str
    meaning: str
    language: Language

class LanguageDetectionResult(FrozenCamelModel):
    primary_language: Language
    confidence: float = Field(..., ge=0.0, le=1.0)
    detected_languages: List[DetectedLanguage] = []
    local_terms: List[LocalTerm] = []
    suggested_response: Language

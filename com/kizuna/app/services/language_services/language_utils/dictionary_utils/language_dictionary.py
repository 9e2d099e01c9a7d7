import logging
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)

# Luganda keyword families
LUGANDA_KEYWORDS: Dict[str, List[str]] = {
    "greetings": ["oli otya", "webale", "nkulamuse", "siibo", "kale", "bambi"],
    "questions": ["ki", "wa", "lwaki", "ddi", "ani", "nga bw'otya"],
    "responses": ["nedda", "ye", "simanyi", "kituufu", "nkwagala"],
    "business": ["sente", "simu", "bundles", "netiweki", "bili", "akaunt"],
    "actions": ["nkwagala", "njagala", "ndi", "nja", "nkola", "ntegeeza"],
    "common": ["ku", "mu", "ne", "era", "naye", "oba", "nga", "bw'o", "gw'o"],
}

# Swahili keyword families
SWAHILI_KEYWORDS: Dict[str, List[str]] = {
    "greetings": ["hujambo", "habari", "mambo", "poa", "sawa", "asante"],
    "questions": ["nini", "wapi", "lini", "kwa nini", "vipi", "namna gani"],
    "responses": ["ndiyo", "hapana", "sijui", "kweli", "nakupenda"],
    "business": ["pesa", "simu", "data", "mtandao", "bili", "akaunti"],
    "actions": ["nataka", "nina", "nita", "nafanya", "naelewa"],
    "common": ["na", "ya", "wa", "za", "kwa", "au", "lakini", "pia"],
}

# English function words, auxiliaries, courtesy words and question words
ENGLISH_PATTERNS: List[str] = [
    r"\b(the|and|or|but|in|on|at|to|for|of|with|by)\b",
    r"\b(is|are|was|were|have|has|had|do|does|did|will|would|can|could)\b",
    r"\b(hello|hi|help|please|thank|thanks|sorry|yes|no|ok|okay)\b",
    r"\b(what|where|when|why|how|who|which)\b",
]

SENTENCE_PUNCTUATION = ("?", ".", "!")

ENGLISH_WORDS = frozenset([
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "is", "are", "was", "were", "have", "has", "had", "do", "does", "did",
    "will", "would", "can", "could", "should", "may", "might", "must",
    "hello", "hi", "help", "please", "thank", "thanks", "sorry", "yes", "no",
    "what", "where", "when", "why", "how", "who", "which",
    "data", "network", "account", "money", "phone", "bill", "payment",
    "service", "problem", "issue",
])

# term -> [(meaning, language)], one entry per language using that spelling
LOCAL_TERMS_GLOSSARY: Dict[str, List[Tuple[str, str]]] = {
    # Luganda
    "sente": [("money", "lg")],
    "simu": [("phone", "lg")],
    "bundles": [("data packages", "lg")],
    "netiweki": [("network", "lg")],
    "bili": [("bill", "lg")],
    "akaunt": [("account", "lg")],
    "masanyu": [("electricity", "lg")],
    "amazzi": [("water", "lg")],
    "boda": [("motorcycle taxi", "lg")],
    "akawuka": [("small money", "lg")],
    "looni": [("loan", "lg")],
    "mita": [("meter", "lg")],
    "okusasula": [("payment", "lg")],
    # Swahili
    "pesa": [("money", "sw")],
    "mtandao": [("network", "sw")],
    "akaunti": [("account", "sw")],
    "mkopo": [("loan", "sw")],
    "maji": [("water", "sw")],
    "umeme": [("electricity", "sw")],
    "malipo": [("payment", "sw")],
    "pikipiki": [("motorcycle", "sw")],
    # Shared spelling
    "oda": [("order", "lg"), ("order", "sw")],
}

GREETINGS: Dict[str, str] = {
    "lg": "Nkulamuse! Nkuyinza okukuyamba otya?",
    "sw": "Hujambo! Naweza kukusaidia vipi?",
    "en": "Hello! How can I help you today?",
}

RESPONSE_PHRASES: Dict[str, Dict[str, str]] = {
    "lg": {
        "understanding": "Ntegeeza",
        "helping": "Ka nkuyambe",
        "wait": "Lindawo katono",
        "thanks": "Webale",
        "sorry": "Nsonyiwa",
    },
    "sw": {
        "understanding": "Naelewa",
        "helping": "Hebu nikusaidie",
        "wait": "Subiri kidogo",
        "thanks": "Asante",
        "sorry": "Pole",
    },
    "en": {
        "understanding": "I understand",
        "helping": "Let me help you",
        "wait": "Please wait a moment",
        "thanks": "Thank you",
        "sorry": "I apologize",
    },
}

LANGUAGE_NAMES: Dict[str, str] = {
    "en": "English",
    "english": "English",
    "lg": "Luganda",
    "luganda": "Luganda",
    "sw": "Swahili",
    "swahili": "Swahili",
    "mixed": "Mixed",
}

def flatten_keywords(keyword_families: Dict[str, List[str]]) -> List[str]:
    """Distinct keywords across all families, in table order"""
    seen = set()
    ordered = []
    for family in keyword_families.values():
        for keyword in family:
            if keyword not in seen:
                seen.add(keyword)
                ordered.append(keyword)
    logger.debug(f"Flattened {len(ordered)} distinct keywords from {len(keyword_families)} families")
    return ordered

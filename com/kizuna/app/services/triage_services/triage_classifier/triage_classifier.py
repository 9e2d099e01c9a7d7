import logging
from typing import List, Optional
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import (
    Priority, EscalationType, TriageRule, TriageResult, ActionRule, BusinessTypeRule, SIMPLE_ACTIONS
)
from com.kizuna.app.services.triage_services.triage_utils.dictionary_utils.triage_dictionary import (
    TRIAGE_RULES, ACTION_RULES, DEFAULT_ACTION, ALWAYS_REVIEW_KEYWORDS,
    BUSINESS_TYPE_RULES, GENERAL_BUSINESS_TYPE, find_keyword
)

logger = logging.getLogger(__name__)

class TriageClassifier:
    """Keyword-tier urgency classification. No scoring, first tier hit wins."""

    def __init__(
        self,
        rules: Optional[List[TriageRule]] = None,
        action_rules: Optional[List[ActionRule]] = None,
        business_type_rules: Optional[List[BusinessTypeRule]] = None
    ):
        self.rules = rules if rules is not None else TRIAGE_RULES
        self.action_rules = action_rules if action_rules is not None else ACTION_RULES
        self.business_type_rules = business_type_rules if business_type_rules is not None else BUSINESS_TYPE_RULES
        logger.debug(f"TriageClassifier initialized with {len(self.rules)} tiers")

    def classify(self, *texts: str) -> TriageResult:
        """
        Classify one or more texts together.

        Each tier is checked against every text before falling to the next
        tier, so the result is the highest tier hit by any of them.
        """
        for rule in self.rules:
            for text in texts:
                keyword = find_keyword(text, rule.keywords)
                if keyword:
                    logger.debug(f"Triage tier {rule.priority.value} matched '{keyword}'")
                    return TriageResult(
                        priority=rule.priority,
                        escalation_type=rule.escalation_type,
                        matched_keyword=keyword
                    )
        return TriageResult(priority=Priority.LOW, escalation_type=EscalationType.NONE)

    def calculate_priority(self, *texts: str) -> Priority:
        return self.classify(*texts).priority

    def determine_suggested_action(self, message: str) -> str:
        for rule in self.action_rules:
            if find_keyword(message, rule.keywords):
                return rule.action
        return DEFAULT_ACTION

    def requires_approval(self, message: str, suggested_action: str, business_type: str) -> bool:
        """Whether a human has to review the reply before it is sent"""
        keyword = find_keyword(message, ALWAYS_REVIEW_KEYWORDS)
        if keyword:
            logger.debug(f"Approval required, sensitive keyword '{keyword}'")
            return True

        if suggested_action == "TECHNICAL_SUPPORT" and business_type == "banking":
            return True

        if suggested_action == "LOAN_APPLICATION_INFO" and "apply" in (message or "").lower():
            return True

        if suggested_action in SIMPLE_ACTIONS:
            return False

        return True

    def detect_business_type(self, message: str) -> str:
        for rule in self.business_type_rules:
            if find_keyword(message, rule.keywords):
                return rule.business_type
        return GENERAL_BUSINESS_TYPE

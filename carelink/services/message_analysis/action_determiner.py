"""Required follow-up actions derived from urgency and intents.

Rules are evaluated independently and their tags concatenated in rule
order. The aggregate list is not deduplicated across rules; consumers
that need a set must dedupe themselves.
"""
from typing import List, Optional, Sequence, Tuple

from carelink.shared.models import Intent, IntentCategory
from .config import UrgencyThresholds

IMMEDIATE_RESPONSE_REQUIRED = "immediate_response_required"
NOTIFY_CRISIS_TEAM = "notify_crisis_team"
DOCUMENT_INCIDENT = "document_incident"
NOTIFY_SCHOOL_NURSE = "notify_school_nurse"
CONTACT_PARENT = "contact_parent"
LOG_BEHAVIOR_INCIDENT = "log_behavior_incident"
REVIEW_INTERVENTION_PLAN = "review_intervention_plan"
ESCALATE_TO_SUPERVISOR = "escalate_to_supervisor"

CATEGORY_ACTIONS: Tuple[Tuple[IntentCategory, Tuple[str, ...]], ...] = (
    (IntentCategory.CRISIS, (NOTIFY_CRISIS_TEAM, DOCUMENT_INCIDENT)),
    (IntentCategory.MEDICAL, (NOTIFY_SCHOOL_NURSE, CONTACT_PARENT)),
    (IntentCategory.BEHAVIORAL, (LOG_BEHAVIOR_INCIDENT, REVIEW_INTERVENTION_PLAN)),
)


class ActionDeterminer:
    """Maps an analysis outcome to workflow action tags."""

    def __init__(self, thresholds: Optional[UrgencyThresholds] = None):
        self.thresholds = thresholds or UrgencyThresholds()

    def derive_actions(self, intents: Sequence[Intent], urgency_score: int) -> List[str]:
        actions: List[str] = []

        if urgency_score >= self.thresholds.IMMEDIATE_RESPONSE_MIN:
            actions.append(IMMEDIATE_RESPONSE_REQUIRED)

        categories = {intent.category for intent in intents}
        for category, tags in CATEGORY_ACTIONS:
            if category in categories:
                actions.extend(tags)

        if urgency_score >= self.thresholds.ESCALATION_MIN:
            actions.append(ESCALATE_TO_SUPERVISOR)

        return actions

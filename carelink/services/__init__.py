"""carelink services.

- message_analysis: rule-based classification of caregiver messages
  (intents, entities, sentiment, urgency, suggested response, actions)
- All services hash student identifiers before logging (shared.utils.pii)
"""

"""Message analysis engine - orchestrates the rule-based pipeline.

Lifecycle:
    UNINITIALIZED --initialize()--> READY

initialize() loads (and if necessary seeds) the knowledge catalog. It is
idempotent; when it fails the engine stays UNINITIALIZED and the next
call tries again.

analyze() never raises for faults inside the pipeline. Any exception
while recognizing, extracting, scoring or retrieving is logged and the
fixed neutral fallback result is returned instead.
"""
import logging
import threading
import time
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from carelink.shared.models import (
    AnalysisContext,
    AnalysisResult,
    Entity,
    Intent,
    KnowledgeItem,
    Sentiment,
)
from carelink.shared.storage import KeyValueStore
from carelink.shared.utils import hash_student_id, hash_text_for_audit
from .action_determiner import ActionDeterminer
from .config import AnalysisConfig, UrgencyThresholds
from .entity_extractor import EntityExtractor
from .intent_recognizer import IntentRecognizer
from .knowledge_catalog import KnowledgeCatalog
from .migration import collect_migration_items
from .reporting import build_analytics_report, export_training_data
from .response_retriever import retrieve_response
from .sentiment_analyzer import LexiconSentimentAnalyzer
from .urgency_scorer import UrgencyScorer

logger = logging.getLogger(__name__)

ContextInput = Union[AnalysisContext, Mapping[str, Any], None]


class EngineState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


def fallback_result() -> AnalysisResult:
    """Neutral result returned when the pipeline faults."""
    return AnalysisResult(
        intents=[],
        entities=[],
        sentiment=Sentiment.NEUTRAL,
        urgency_score=UrgencyThresholds.BASE_SCORE,
        suggested_response=None,
        required_actions=[],
    )


class MessageAnalysisEngine:
    """Classifies caregiver messages and recommends follow-up actions.

    Construct one per process with an injected store and share it by
    reference. Components can be swapped for tests.
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: Optional[AnalysisConfig] = None,
        thresholds: Optional[UrgencyThresholds] = None,
        intent_recognizer: Optional[IntentRecognizer] = None,
        entity_extractor: Optional[EntityExtractor] = None,
        sentiment_analyzer: Optional[LexiconSentimentAnalyzer] = None,
    ):
        self.store = store
        self.config = config or AnalysisConfig()
        self.thresholds = thresholds or UrgencyThresholds()

        self.catalog = KnowledgeCatalog(store, self.config.catalog_key)
        self.intent_recognizer = intent_recognizer or IntentRecognizer()
        self.entity_extractor = entity_extractor or EntityExtractor()
        self.sentiment_analyzer = sentiment_analyzer or LexiconSentimentAnalyzer()
        self.urgency_scorer = UrgencyScorer(self.thresholds)
        self.action_determiner = ActionDeterminer(self.thresholds)

        self._state = EngineState.UNINITIALIZED
        self._init_lock = threading.Lock()

        logger.info(
            "MESSAGE_ANALYSIS_ENGINE_CREATED",
            extra={
                "rules_version": self.config.rules_version,
                "catalog_key": self.config.catalog_key,
                "intent_rule_count": len(self.intent_recognizer.rules),
                "entity_rule_count": len(self.entity_extractor.rules),
            }
        )

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is EngineState.READY

    def initialize(self) -> None:
        """Load the knowledge catalog. Safe to call repeatedly.

        Raises:
            StorageUnavailableError: If the catalog cannot be loaded or
                seeded; the engine stays UNINITIALIZED
        """
        if self._state is EngineState.READY:
            return

        with self._init_lock:
            if self._state is EngineState.READY:
                return

            try:
                self.catalog.load()
            except Exception as e:
                logger.error(
                    "MESSAGE_ANALYSIS_INIT_FAILED",
                    extra={"error": str(e), "error_type": type(e).__name__}
                )
                raise

            self._state = EngineState.READY

        logger.info(
            "MESSAGE_ANALYSIS_ENGINE_READY",
            extra={"catalog_size": len(self.catalog.items)}
        )

    def analyze(self, text: str, context: ContextInput = None) -> AnalysisResult:
        """Analyze one caregiver message.

        Args:
            text: Raw message text
            context: AnalysisContext or its dict form (student_id,
                sender_role, previous_messages)

        Returns:
            AnalysisResult; the neutral fallback if the pipeline faults

        Raises:
            StorageUnavailableError: Only when lazy initialization fails
        """
        self.initialize()

        start_time = time.perf_counter()
        try:
            analysis_context = self._coerce_context(context)
            result = self._run_pipeline(text, self.catalog.items)
        except Exception as e:
            logger.error(
                "MESSAGE_ANALYSIS_FAILED",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "action": "RETURNING_NEUTRAL_FALLBACK",
                }
            )
            return fallback_result()

        latency_ms = (time.perf_counter() - start_time) * 1000
        self._log_analysis(text, analysis_context, result, latency_ms)
        return result

    def _coerce_context(self, context: ContextInput) -> AnalysisContext:
        if isinstance(context, AnalysisContext):
            return context
        return AnalysisContext.from_dict(context)

    def _run_pipeline(self, text: str, catalog: Sequence[KnowledgeItem]) -> AnalysisResult:
        lowered = text.lower()

        intents = self.intent_recognizer.recognize(lowered)
        entities = self.entity_extractor.extract(text)
        sentiment = self.sentiment_analyzer.analyze(lowered)

        urgency_score = self.urgency_scorer.score(lowered, intents, entities)

        suggested_response = None
        if intents:
            suggested_response = retrieve_response(intents[0], entities, catalog)

        required_actions = self.action_determiner.derive_actions(intents, urgency_score)

        return AnalysisResult(
            intents=intents,
            entities=entities,
            sentiment=sentiment,
            urgency_score=urgency_score,
            suggested_response=suggested_response,
            required_actions=required_actions,
        )

    def _log_analysis(
        self,
        text: str,
        context: AnalysisContext,
        result: AnalysisResult,
        latency_ms: float,
    ) -> None:
        student_id_hash = hash_student_id(context.student_id)

        logger.info(
            "MESSAGE_ANALYZED",
            extra={
                "student_id_hash": student_id_hash,
                "text_hash": hash_text_for_audit(text),
                "text_length": len(text),
                "intent_count": len(result.intents),
                "entity_count": len(result.entities),
                "urgency_score": result.urgency_score,
                "latency_ms": latency_ms,
            }
        )

        if result.urgency_score >= self.thresholds.IMMEDIATE_RESPONSE_MIN:
            logger.warning(
                "MESSAGE_ANALYSIS_HIGH_URGENCY",
                extra={
                    "student_id_hash": student_id_hash,
                    "urgency_score": result.urgency_score,
                    "required_actions": result.required_actions,
                }
            )

    def ingest(self, items: Iterable[Mapping[str, Any]]) -> List[KnowledgeItem]:
        """Add knowledge items built from {content, category, keywords?} dicts.

        Raises:
            KnowledgeItemError: If any item is invalid (nothing is written)
            StorageUnavailableError: If initialization or persistence fails
        """
        self.initialize()
        return self.catalog.ingest(items)

    def get_suggested_response(
        self,
        intent: Intent,
        entities: Sequence[Entity],
        context: ContextInput = None,
    ) -> Optional[str]:
        """Best knowledge-base response for an intent, or None.

        context is accepted for parity with analyze() and not consulted.
        """
        self.initialize()
        return retrieve_response(intent, entities, self.catalog.items)

    def migrate_existing_records(self) -> List[KnowledgeItem]:
        """Ingest stored message records and behavior logs as knowledge items.

        Returns:
            The newly created items (empty when nothing qualified)

        Raises:
            StorageUnavailableError: If the store cannot be read or written
        """
        self.initialize()
        messages = self.store.get(self.config.messages_key) or []
        behavior_logs = self.store.get(self.config.behavior_logs_key) or []
        if not isinstance(messages, list):
            messages = []
        if not isinstance(behavior_logs, list):
            behavior_logs = []

        items = collect_migration_items(messages, behavior_logs)
        created = self.catalog.ingest(items) if items else []

        logger.info(
            "KNOWLEDGE_MIGRATION_COMPLETED",
            extra={
                "messages_scanned": len(messages),
                "behavior_logs_scanned": len(behavior_logs),
                "items_migrated": len(created),
            }
        )
        return created

    def export_training_data(self) -> Dict[str, List[Dict[str, Any]]]:
        """Framework-neutral intents/entities/responses export of the catalog."""
        self.initialize()
        return export_training_data(self.catalog.items)

    def analytics_report(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Catalog and analysis summary over stored message records.

        Raises:
            StorageUnavailableError: If the store cannot be read
        """
        self.initialize()
        messages = self.store.get(self.config.messages_key) or []
        return build_analytics_report(self.catalog.items, messages, now=now)

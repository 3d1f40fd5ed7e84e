"""Message Analysis HTTP handler.

HTTP interface consumed by the messaging feature. Every caregiver message
is posted to /analyze and the returned analysis is attached to the
message record by the caller.

Student identifiers in request context are only ever logged hashed.
"""
import logging
import os

from flask import Flask, jsonify, request

from carelink.shared.models import Entity, Intent
from carelink.shared.storage import StorageUnavailableError, build_store
from carelink.shared.utils import configure_pii_salt
from .config import AnalysisConfig
from .engine import MessageAnalysisEngine
from .knowledge_catalog import KnowledgeItemError

logger = logging.getLogger(__name__)

app = Flask(__name__)

pii_salt = os.getenv("PII_HASH_SALT", "default_dev_salt_change_in_production_32chars")
configure_pii_salt(pii_salt)

config = AnalysisConfig.from_env()
engine = MessageAnalysisEngine(store=build_store(config.store_backend), config=config)


def _storage_unavailable(e: StorageUnavailableError, operation: str):
    logger.error(
        "STORAGE_UNAVAILABLE",
        extra={"operation": operation, "error": str(e)}
    )
    return jsonify({"error": "Knowledge store unavailable"}), 503


@app.route("/health", methods=["GET"])
def health():
    """Liveness check."""
    return jsonify({
        "status": "healthy",
        "service": "message-analysis",
        "rules_version": config.rules_version,
    }), 200


@app.route("/ready", methods=["GET"])
def ready():
    """Readiness check - loads the knowledge catalog on first call.

    Returns:
        200 when the catalog is loaded, 503 when the store is unreachable
    """
    try:
        engine.initialize()
    except StorageUnavailableError as e:
        logger.warning("READINESS_CHECK_FAILED", extra={"error": str(e)})
        return jsonify({"status": "not_ready", "reason": "storage_unavailable"}), 503

    return jsonify({
        "status": "ready",
        "catalog_size": len(engine.catalog.items),
    }), 200


@app.route("/analyze", methods=["POST"])
def analyze_message():
    """Analyze a caregiver message.

    Request Body:
        {
            "message": "Caregiver message text",
            "context": {
                "student_id": "student_123",
                "sender_role": "teacher",
                "previous_messages": ["..."]
            } (optional)
        }

    Response:
        {
            "intents": [{"type", "confidence", "category"}, ...],
            "entities": [{"type", "value", "confidence", "start", "end"}, ...],
            "sentiment": "positive" | "negative" | "neutral",
            "urgency_score": 0-10,
            "suggested_response": "..." | null,
            "required_actions": ["notify_crisis_team", ...]
        }

    Pipeline faults never surface here; the engine returns a neutral
    result instead.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        logger.warning("ANALYZE_REQUEST_INVALID", extra={"reason": "empty_body"})
        return jsonify({"error": "Request body required"}), 400

    message = data.get("message")
    if not isinstance(message, str) or not message:
        logger.warning("ANALYZE_REQUEST_INVALID", extra={"reason": "missing_message"})
        return jsonify({"error": "Missing required field: message"}), 400

    try:
        result = engine.analyze(message, data.get("context"))
    except StorageUnavailableError as e:
        return _storage_unavailable(e, "analyze")

    return jsonify(result.to_dict()), 200


@app.route("/knowledge", methods=["POST"])
def ingest_knowledge():
    """Ingest knowledge items.

    Request Body:
        {"items": [{"content": "...", "category": "...", "keywords": [...]}]}
    """
    data = request.get_json(silent=True)
    items = data.get("items") if isinstance(data, dict) else None
    if not isinstance(items, list) or not items:
        logger.warning("INGEST_REQUEST_INVALID", extra={"reason": "missing_items"})
        return jsonify({"error": "Missing required field: items"}), 400

    try:
        created = engine.ingest(items)
    except KnowledgeItemError as e:
        logger.warning("INGEST_REQUEST_INVALID", extra={"reason": str(e)})
        return jsonify({"error": str(e)}), 400
    except StorageUnavailableError as e:
        return _storage_unavailable(e, "ingest")

    return jsonify({
        "ingested": len(created),
        "catalog_size": len(engine.catalog.items),
    }), 201


@app.route("/suggest", methods=["POST"])
def suggest_response():
    """Suggested response for an already-classified intent.

    Request Body:
        {"intent": {"type", "confidence", "category"}, "entities": [...]}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get("intent"), dict):
        return jsonify({"error": "Missing required field: intent"}), 400

    try:
        intent = Intent.from_dict(data["intent"])
        entities = [Entity.from_dict(e) for e in data.get("entities") or []]
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("SUGGEST_REQUEST_INVALID", extra={"reason": str(e)})
        return jsonify({"error": f"Invalid intent or entities: {e}"}), 400

    try:
        suggestion = engine.get_suggested_response(intent, entities)
    except StorageUnavailableError as e:
        return _storage_unavailable(e, "suggest")

    return jsonify({"suggested_response": suggestion}), 200


@app.route("/knowledge/export", methods=["GET"])
def export_knowledge():
    """Framework-neutral training data export of the catalog."""
    try:
        return jsonify(engine.export_training_data()), 200
    except StorageUnavailableError as e:
        return _storage_unavailable(e, "export")


@app.route("/knowledge/report", methods=["GET"])
def knowledge_report():
    """Catalog and recent-analysis summary."""
    try:
        return jsonify(engine.analytics_report()), 200
    except StorageUnavailableError as e:
        return _storage_unavailable(e, "report")


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    port = int(os.getenv("PORT", "8010"))
    app.run(host="0.0.0.0", port=port, debug=False)

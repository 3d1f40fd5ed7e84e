#!/usr/bin/env python3
"""Bootstrap the knowledge catalog with the standard care-strategy set.

Ingests BOOTSTRAP_KNOWLEDGE, prints a catalog summary, then runs a few
sample messages through the analysis engine as a smoke check.

Usage:
    python -m carelink.scripts.init_knowledge_base
    CARELINK_STORE_BACKEND=postgres python -m carelink.scripts.init_knowledge_base
    python -m carelink.scripts.init_knowledge_base --skip-samples
    python -m carelink.scripts.init_knowledge_base --migrate
"""
import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Sequence

from carelink.services.message_analysis import AnalysisConfig, MessageAnalysisEngine
from carelink.shared.storage import StorageUnavailableError, build_store
from carelink.shared.utils import configure_pii_salt

logger = logging.getLogger(__name__)

BOOTSTRAP_KNOWLEDGE: List[Dict[str, Any]] = [
    {
        "category": "crisis",
        "content": "When a student is having a meltdown, prioritize safety, reduce environmental stimuli, use calming voice, avoid physical restraint unless absolutely necessary for safety",
        "keywords": ["meltdown", "crisis", "emergency", "overwhelmed", "aggressive", "self-harm"],
    },
    {
        "category": "crisis",
        "content": "De-escalation techniques: speak slowly and calmly, offer choices when possible, use visual supports, create physical space, remove triggers",
        "keywords": ["de-escalation", "calm", "safety", "triggers", "space"],
    },
    {
        "category": "sensory",
        "content": "Sensory overload management: dim lights, reduce noise, provide quiet space, offer noise-canceling headphones, use weighted blankets or fidget tools",
        "keywords": ["sensory", "overload", "stimming", "noise", "lights", "fidget", "weighted"],
    },
    {
        "category": "sensory",
        "content": "Sensory seeking behaviors: provide appropriate sensory input through movement breaks, textured materials, chewable items, compression activities",
        "keywords": ["sensory-seeking", "movement", "texture", "chewing", "compression", "input"],
    },
    {
        "category": "communication",
        "content": "Support non-verbal communication through visual schedules, picture cards (PECS), sign language, communication devices (AAC), gestures",
        "keywords": ["non-verbal", "visual", "PECS", "sign-language", "AAC", "pictures"],
    },
    {
        "category": "communication",
        "content": "Improve expressive language: use simple clear language, give processing time, model appropriate responses, use social stories",
        "keywords": ["expressive", "language", "processing", "social-stories", "modeling"],
    },
    {
        "category": "behavioral",
        "content": "Address repetitive behaviors: understand the function (self-regulation, communication, sensory needs), provide alternatives, maintain routines",
        "keywords": ["repetitive", "stimming", "self-regulation", "routine", "function", "alternatives"],
    },
    {
        "category": "behavioral",
        "content": "Manage challenging behaviors: identify triggers, use positive reinforcement, implement consistent boundaries, track patterns",
        "keywords": ["challenging", "triggers", "reinforcement", "boundaries", "patterns", "consequences"],
    },
    {
        "category": "social",
        "content": "Develop social skills: practice turn-taking, teach social cues recognition, use role-playing, facilitate structured peer interactions",
        "keywords": ["social-skills", "turn-taking", "cues", "role-playing", "peers", "interaction"],
    },
    {
        "category": "social",
        "content": "Support social anxiety: prepare for changes, use gradual exposure, provide safe retreat spaces, teach coping strategies",
        "keywords": ["social-anxiety", "changes", "exposure", "retreat", "coping", "strategies"],
    },
    {
        "category": "academic",
        "content": "Learning support strategies: break tasks into smaller steps, use visual instructions, provide extra processing time, offer multiple ways to demonstrate knowledge",
        "keywords": ["learning", "tasks", "visual-instructions", "processing-time", "demonstration"],
    },
    {
        "category": "academic",
        "content": "Executive function support: use checklists, timers, organization systems, teach planning strategies, provide structure and routine",
        "keywords": ["executive-function", "checklists", "timers", "organization", "planning", "structure"],
    },
    {
        "category": "transition",
        "content": "Transition support: give advance warning, use visual schedules, practice new routines, provide transition objects or activities",
        "keywords": ["transition", "warning", "schedules", "routines", "objects", "change"],
    },
    {
        "category": "medical",
        "content": "Monitor for medical needs: seizures, medication effects, sleep issues, digestive problems, allergies, dietary restrictions",
        "keywords": ["medical", "seizures", "medication", "sleep", "digestive", "allergies", "diet"],
    },
    {
        "category": "medical",
        "content": "Coordinate with healthcare providers: share observations, follow medical protocols, document symptoms, communicate with parents",
        "keywords": ["healthcare", "protocols", "symptoms", "documentation", "coordination"],
    },
]

SAMPLE_MESSAGES: List[str] = [
    "The student is having a meltdown and needs immediate help",
    "Everything went well today, great progress with communication",
    "Student seems overwhelmed by noise in the classroom",
    "Need advice on managing repetitive behaviors during lessons",
]


def bootstrap(
    engine: MessageAnalysisEngine,
    samples: Optional[Sequence[str]] = None,
    migrate: bool = False,
) -> Dict[str, Any]:
    """Ingest the bootstrap set and analyze sample messages.

    With migrate, stored message records and behavior logs are ingested
    after the bootstrap set.

    Returns:
        Dictionary with ingested and migrated counts, analytics report
        and per-sample primary category and urgency
    """
    created = engine.ingest(BOOTSTRAP_KNOWLEDGE)
    migrated = engine.migrate_existing_records() if migrate else []
    report = engine.analytics_report()

    sample_results = []
    for message in samples or []:
        result = engine.analyze(message)
        primary = result.primary_intent
        sample_results.append({
            "message": message,
            "primary_category": primary.category.value if primary else None,
            "urgency_score": result.urgency_score,
        })

    return {
        "ingested": len(created),
        "migrated": len(migrated),
        "report": report,
        "samples": sample_results,
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Initialize the carelink knowledge catalog")
    parser.add_argument(
        "--skip-samples", action="store_true",
        help="Do not run sample messages after ingesting"
    )
    parser.add_argument(
        "--migrate", action="store_true",
        help="Also ingest stored messages and behavior logs"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    configure_pii_salt(os.getenv("PII_HASH_SALT", "default_dev_salt_change_in_production_32chars"))

    config = AnalysisConfig.from_env()
    engine = MessageAnalysisEngine(store=build_store(config.store_backend), config=config)

    try:
        summary = bootstrap(
            engine,
            samples=None if args.skip_samples else SAMPLE_MESSAGES,
            migrate=args.migrate,
        )
    except StorageUnavailableError as e:
        logger.error("KNOWLEDGE_BOOTSTRAP_FAILED", extra={"error": str(e)})
        print(f"Failed to initialize knowledge base: {e}", file=sys.stderr)
        return 1

    report = summary["report"]
    print(f"Ingested {summary['ingested']} knowledge items")
    if args.migrate:
        print(f"Migrated {summary['migrated']} existing records")
    print(f"  Total items: {report['total_knowledge_items']}")
    print(f"  Categories: {', '.join(sorted(report['category_counts']))}")

    for sample in summary["samples"]:
        print(f"  Message: \"{sample['message']}\"")
        print(f"    -> Intent: {sample['primary_category'] or 'none'}, Urgency: {sample['urgency_score']}/10")

    return 0


if __name__ == "__main__":
    sys.exit(main())

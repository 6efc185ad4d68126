"""CLI script to index consultation records and ask the assistant questions.

Usage:
    cd backend
    uv run python ../scripts/index_consultations.py --user patient-1 --file ../data/sample_consultations.json
    uv run python ../scripts/index_consultations.py --user patient-1 --ask "What was my last diagnosis?"
    uv run python ../scripts/index_consultations.py --user patient-1 --clear
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add backend/ to path so imports work when run from backend/
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from consult_assistant.config import settings
from consult_assistant.database import async_session, engine, init_models
from consult_assistant.models.consultation import ConsultationRecord
from consult_assistant.services.assistant_service import build_assistant, build_models
from consult_assistant.services.kv_store import SqlKeyValueStore


def load_consultations(path: Path) -> list[ConsultationRecord]:
    """Read a JSON list of consultations (or ``{"consultations": [...]}``)."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("consultations", [])
    return [ConsultationRecord.model_validate(item) for item in data]


async def run(args: argparse.Namespace) -> None:
    await init_models()
    models = build_models(settings)
    assistant = build_assistant(
        args.user, SqlKeyValueStore(async_session), settings, models
    )

    if not assistant.available:
        print("Warning: GOOGLE_API_KEY is not set, the assistant is unavailable.")

    if args.clear:
        await assistant.clear_index()
        print(f"Cleared passage cache for {args.user}")

    if args.file:
        consultations = load_consultations(args.file)
        print(f"Indexing {len(consultations)} consultations from {args.file.name}...")
        report = await assistant.index_batch(consultations)
        print(f"  Indexed: {len(report.indexed)}")
        for failure in report.failed:
            print(f"  Failed:  {failure.record_id} ({failure.reason})")

    stats = await assistant.index_stats()
    last = stats.last_indexed_at.isoformat() if stats.last_indexed_at else "never"
    print(f"Index for {args.user}: {stats.count} passages, last indexed {last}")

    if args.ask:
        result = await assistant.answer_question(args.ask, args.name)
        print(f"\nQ: {args.ask}\n")
        print(result.answer_text)
        print(f"\n[needs escalation: {result.needs_escalation}]")

    if models is not None:
        await models.aclose()
    await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Index consultations and query the assistant")
    parser.add_argument("--user", required=True, help="User id that owns the passage cache")
    parser.add_argument("--file", type=Path, help="JSON file of consultation records to index")
    parser.add_argument("--ask", type=str, default=None, help="Question to answer after indexing")
    parser.add_argument("--name", type=str, default=None, help="User display name for the prompt")
    parser.add_argument("--clear", action="store_true", help="Clear the user's cache first")
    args = parser.parse_args()

    if args.file and not args.file.exists():
        print(f"Error: File not found: {args.file}")
        sys.exit(1)

    asyncio.run(run(args))


if __name__ == "__main__":
    main()

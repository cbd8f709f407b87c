#!/usr/bin/env python
"""Replay a dump of ledger storage events into the entity store.

Reads a JSON-lines file where every line is one event in ledger order:

    {"type": "greenfield.storage.EventCreateBucket",
     "attributes": {...},
     "block_height": 120,
     "block_time": "2026-01-21T10:00:00Z",
     "tx_hash": "0x..."}

Each line is projected in its own transaction. Failures are handled per the
error's disposition: "skip" failures (already applied) are logged and the
replay continues; "abort" failures stop the replay with a non-zero exit, and
so does a line that is not valid JSON or lacks a required key.

Constraints:
- Refuses to run in staging or prod (INDEXER_ENV check)
- Never runs automatically (manual invocation only)

Usage:
    DATABASE_URL=... python scripts/replay_events.py events.jsonl
"""

import json
import sys
from datetime import datetime


def main(argv: list[str]) -> int:
    if len(argv) != 2:
        print("usage: replay_events.py <events.jsonl>")
        return 2

    from indexer.config import get_settings
    from indexer.db.session import get_db
    from indexer.errors import Disposition, ProjectionError
    from indexer.ledger import LedgerContext
    from indexer.logging import configure_logging, get_logger
    from indexer.services.router import apply_raw_event

    # 1. Environment check (hard fail in staging/prod)
    settings = get_settings()
    if settings.is_production_like:
        print(f"ERROR: replay_events.py refuses to run in INDEXER_ENV={settings.indexer_env.value}")
        return 1

    configure_logging(json_format=settings.log_json, level=settings.log_level)
    logger = get_logger("replay_events")

    projected = skipped = ignored = 0

    # 2. Replay in file order
    with open(argv[1], encoding="utf-8") as fh, get_db() as db:
        for line_no, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
                event_type = record["type"]
                attributes = record.get("attributes", {})
                ctx = LedgerContext(
                    block_height=int(record["block_height"]),
                    block_time=datetime.fromisoformat(record["block_time"].replace("Z", "+00:00")),
                    tx_hash=record["tx_hash"],
                    chain_id=settings.chain_id,
                )
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                logger.error("replay_aborted", line=line_no, code="malformed_line", error=repr(e))
                return 1

            try:
                handled = apply_raw_event(db, event_type, attributes, ctx)
            except ProjectionError as e:
                if e.disposition is Disposition.SKIP:
                    logger.warning(
                        "replay_event_skipped", line=line_no, code=e.code.value, error=e.message
                    )
                    skipped += 1
                    continue
                logger.error("replay_aborted", line=line_no, code=e.code.value, error=e.message)
                return 1

            if handled:
                projected += 1
            else:
                ignored += 1

    # 3. Report
    logger.info("replay_finished", projected=projected, skipped=skipped, ignored=ignored)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))

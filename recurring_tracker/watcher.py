# recurring_tracker/watcher.py
"""Poll the store and fire due templates until interrupted.

Settings come from the environment so the loop can run unattended in a
container: CONFIG_PATH, DB_PATH, POLL_SECONDS, ENFORCE_MAX_OCCURRENCES,
RUN_ONCE and RECURBOOK_LOG_LEVEL.
"""
import logging
import os
import time

from recurring_tracker.clock import get_clock
from recurring_tracker.config import load_config
from recurring_tracker.scheduler import process_due
from recurring_tracker.stores import get_store

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _build_store():
    cfg = load_config(os.environ.get("CONFIG_PATH", "config.yaml"))
    db_path = os.environ.get("DB_PATH")
    if db_path:
        cfg["db_path"] = db_path
    return cfg, get_store(cfg["store"], cfg)


def run_once(store, enforce_max_occurrences: bool = False) -> int:
    generated = process_due(
        store,
        now=get_clock().now(),
        enforce_max_occurrences=enforce_max_occurrences,
    )
    if generated:
        logger.info("Generated %d transaction(s)", len(generated))
    return len(generated)


def main() -> int:
    logging.basicConfig(level=os.getenv("RECURBOOK_LOG_LEVEL", "INFO").upper())
    cfg, store = _build_store()
    poll_seconds = float(os.environ.get("POLL_SECONDS", "3600"))
    enforce = _env_bool(
        "ENFORCE_MAX_OCCURRENCES", bool(cfg["enforce_max_occurrences"])
    )

    if _env_bool("RUN_ONCE"):
        run_once(store, enforce)
        return 0

    while True:
        try:
            run_once(store, enforce)
        except Exception:
            logger.exception("Scheduler pass failed")
        time.sleep(poll_seconds)


if __name__ == "__main__":
    raise SystemExit(main())

"""
Scheduled sweeps, meant to be triggered once a day by cron:

    python -m adherence_engine.jobs            # all sweeps
    python -m adherence_engine.jobs status     # one sweep
"""
import sys
from typing import Callable, Dict, List, Optional

from adherence_engine.database import session_scope
from adherence_engine.exceptions import AdherenceEngineError
from adherence_engine.logging_config import configure_logging
from adherence_engine.services.engine import run_daily_status_sweep, run_decay_sweep, run_lapse_sweep
from adherence_engine.utils.clock import Clock
from adherence_engine.utils.logger import get_logger

logger = get_logger("adherence_engine.jobs")

# Lapse runs before status so a user past grace is never re-marked grace
SWEEPS: Dict[str, Callable] = {
    "lapse": run_lapse_sweep,
    "status": run_daily_status_sweep,
    "decay": run_decay_sweep,
}


def run_sweep(name: str, clock: Optional[Clock] = None):
    """Run one named sweep in its own session."""
    with session_scope() as db:
        return SWEEPS[name](db, clock)


def run_all(names: Optional[List[str]] = None, clock: Optional[Clock] = None) -> Dict[str, object]:
    results = {}
    for name in names or list(SWEEPS):
        results[name] = run_sweep(name, clock)
    return results


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    names = list(argv if argv is not None else sys.argv[1:])
    unknown = [name for name in names if name not in SWEEPS]
    if unknown:
        logger.error(f"Unknown sweep(s): {', '.join(unknown)}; expected one of {', '.join(SWEEPS)}")
        return 2

    try:
        results = run_all(names or None)
    except AdherenceEngineError as e:
        logger.error(f"Sweep run failed: {e}")
        return 1
    logger.info(f"Sweeps complete: {results}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

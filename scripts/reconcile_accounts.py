"""
Replay every user's ledger and repair drifted progression accounts.

Usage:
    python scripts/reconcile_accounts.py            # report and repair
    python scripts/reconcile_accounts.py --dry-run  # report only
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()

from sqlmodel import Session, select

from repforge.core.logging import configure_logging
from repforge.db.session import engine
from repforge.models.progression_account import ProgressionAccount
from repforge.services.progression_service import ProgressionService

logger = logging.getLogger("repforge.scripts.reconcile")


def main(dry_run: bool) -> int:
    drifted = 0
    with Session(engine) as session:
        user_ids = session.exec(select(ProgressionAccount.user_id)).all()
        service = ProgressionService(session)
        for user_id in user_ids:
            report = service.check(user_id) if dry_run else service.reconcile(user_id)
            if report.has_drift:
                drifted += 1
    logger.info("%d account(s) checked, %d drifted%s", len(user_ids), drifted,
                "" if dry_run else " and repaired")
    return 1 if dry_run and drifted else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--dry-run", action="store_true", help="report drift without repairing")
    args = parser.parse_args()
    configure_logging()
    sys.exit(main(args.dry_run))

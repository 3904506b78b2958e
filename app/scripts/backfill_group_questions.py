"""
Backfill Group Questions Script
Walks every group and inserts the default entry questions into groups that have
no active question, so every group stays joinable through the quiz.
Can be run manually or as part of a nightly job.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.database.supabase_client import SupabaseClient
from app.modules.groups.service import GroupService
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PAGE_SIZE = 500


def iter_group_ids(supabase: Client):
    """Yield every group id, one page at a time"""
    offset = 0
    while True:
        result = supabase.table("groups")\
            .select("id")\
            .order("created_at", desc=False)\
            .limit(PAGE_SIZE)\
            .offset(offset)\
            .execute()
        rows = result.data or []
        for row in rows:
            yield row["id"]
        if len(rows) < PAGE_SIZE:
            return
        offset += PAGE_SIZE


def backfill(supabase: Client) -> dict:
    service = GroupService(supabase)
    checked = 0
    failed = []
    for group_id in iter_group_ids(supabase):
        checked += 1
        if not service.ensure_group_has_questions(group_id):
            failed.append(group_id)
    return {"checked": checked, "failed": failed}


def main():
    """Backfill default questions for every group"""
    try:
        supabase = SupabaseClient.get_service_client()

        logger.info("Starting group question backfill...")
        stats = backfill(supabase)

        logger.info(f"Backfill completed: {stats['checked']} groups checked")
        if stats["failed"]:
            logger.warning(f"{len(stats['failed'])} groups could not be fixed: {', '.join(stats['failed'])}")
            sys.exit(1)

    except Exception as e:
        logger.error(f"Error during backfill: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

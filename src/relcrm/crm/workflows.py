"""Record workflows built on top of a RecordSource.

Each workflow reads what it needs, builds the full updated record and
writes it back through whichever source is authoritative. None of them
know whether that source is local or remote.
"""

import logging
from typing import List, Optional

from relcrm.crm.adapters.base import RecordNotFoundError, RecordSource
from relcrm.crm.collections import Collection
from relcrm.crm.ids import make_record_id, now_iso, today_iso
from relcrm.crm.models import (
    Activity,
    ActivityType,
    Contact,
    Task,
    TaskStatus,
)

logger = logging.getLogger(__name__)


def parse_tags(text: Optional[str]) -> List[str]:
    """Split a comma-separated tag string, dropping blanks."""
    if not text:
        return []
    return [tag.strip() for tag in text.split(",") if tag.strip()]


def add_activity(
    contacts: RecordSource,
    contact_id: str,
    activity_type: ActivityType,
    description: str,
    date: Optional[str] = None,
) -> Contact:
    """Log an activity against a contact.

    The activity goes to the front of the contact's list and the contact's
    ``last_contact`` is refreshed. The whole contact is written back.

    Raises:
        RecordNotFoundError: If the contact does not exist
        ValueError: If the description is blank
    """
    description = description.strip()
    if not description:
        raise ValueError("Activity description is required")

    contact = contacts.get(contact_id)
    if contact is None:
        raise RecordNotFoundError(Collection.CONTACTS, contact_id)

    now = now_iso()
    activity = Activity(
        id=make_record_id(a.id for a in contact.activities),
        type=activity_type,
        description=description,
        date=date or today_iso(),
        created_at=now,
    )
    updated = contact.model_copy(
        update={"activities": [activity] + list(contact.activities), "last_contact": now}
    )
    logger.debug(f"Adding {activity_type.value} activity to contact {contact_id}")
    return contacts.update(contact_id, updated)


def toggle_task_completion(tasks: RecordSource, task_id: str) -> Task:
    """Flip a task between completed and pending.

    ``completed``, ``completed_at`` and ``status`` always change together.

    Raises:
        RecordNotFoundError: If the task does not exist
    """
    task = tasks.get(task_id)
    if task is None:
        raise RecordNotFoundError(Collection.TASKS, task_id)

    completed = not task.completed
    updated = task.model_copy(
        update={
            "completed": completed,
            "completed_at": now_iso() if completed else None,
            "status": TaskStatus.COMPLETED if completed else TaskStatus.PENDING,
        }
    )
    return tasks.update(task_id, updated)


def build_task(task: Task, contact: Optional[Contact] = None) -> Task:
    """Attach a contact to a task draft.

    Copies the contact's name and company onto the task at save time; they
    are not refreshed when the contact changes later. Without a contact the
    link and both copies are cleared.
    """
    if contact is None:
        return task.model_copy(
            update={"contact_id": None, "contact_name": None, "company_name": None}
        )
    return task.model_copy(
        update={
            "contact_id": contact.id,
            "contact_name": contact.full_name,
            "company_name": contact.company or None,
        }
    )

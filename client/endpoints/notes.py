"""Private project notes."""

from typing import Optional, Sequence

from client.envelopes import normalize_list, normalize_record
from client.errors import raise_for_result
from client.endpoints import run_mutation
from client.models import ProjectNote
from client.session import ApiClient
from utils.notify import Notice, NotificationChannel
from utils.validation import validate_note


def list_notes(api: ApiClient, organization_id: str,
               project_reference_id: str) -> list[ProjectNote]:
    payload = api.get("/project-notes/", {"organization_id": organization_id,
                                          "project_reference_id": project_reference_id},
                      use_cache=False)
    return [ProjectNote.model_validate(item) for item in normalize_list(payload)]


def create_note(api: ApiClient, project_reference_id: str, organization_id: str,
                title: str, content: str, user_id: str, tags: Sequence[str] = (),
                notifications: Optional[NotificationChannel] = None) -> Optional[ProjectNote]:
    raise_for_result(validate_note(title, content))
    payload = {
        "project_reference_id": project_reference_id,
        "organization_id": str(organization_id),
        "title": title.strip(),
        "content": content.strip(),
        "tags": list(tags),
        "created_by": user_id,
        "user_id": user_id,
    }
    record = normalize_record(run_mutation(
        lambda: api.post("/project-notes/", payload),
        notifications,
        Notice.success("Note Saved", "Your note has been saved."),
        "Failed to save note",
    ))
    return ProjectNote.model_validate(record) if record else None

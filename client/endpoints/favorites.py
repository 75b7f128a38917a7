"""Project favorites."""

from typing import Any, Optional

from client.envelopes import normalize_list
from client.endpoints import run_mutation
from client.models import FavoriteProject
from client.session import ApiClient
from utils.filtering import FAVORITE_SEARCH_FIELDS, filter_results
from utils.notify import Notice, NotificationChannel


def add_favorite(api: ApiClient, project_reference_id: str, user_id: str,
                 organization_id: str,
                 notifications: Optional[NotificationChannel] = None) -> Any:
    payload = {
        "project_reference_id": project_reference_id,
        "organization_id": str(organization_id),
        "user_id": user_id,
        "created_by": user_id,
    }
    return run_mutation(
        lambda: api.post("/project-favorites/", payload),
        notifications,
        Notice.success("Added to Favorites", "Project added to your favorites."),
        "Failed to add favorite",
    )


def remove_favorite(api: ApiClient, project_reference_id: str, user_id: str,
                    notifications: Optional[NotificationChannel] = None) -> Any:
    params = {"project_reference_id": project_reference_id, "user_id": user_id}
    return run_mutation(
        lambda: api.delete("/project-favorites/", params),
        notifications,
        Notice.success("Removed from Favorites", "Project removed from your favorites."),
        "Failed to remove favorite",
    )


def toggle_favorite(api: ApiClient, project: Any, user_id: str, organization_id: str,
                    notifications: Optional[NotificationChannel] = None) -> bool:
    """Flip the favorite flag on *project* and return the new state."""
    reference = getattr(project, "project_reference_id", None)
    if isinstance(project, dict):
        reference = project.get("project_reference_id")
    is_favorite = bool(
        project.get("is_favorite") if isinstance(project, dict) else getattr(project, "is_favorite", False)
    )
    if is_favorite:
        remove_favorite(api, reference, user_id, notifications)
        return False
    add_favorite(api, reference, user_id, organization_id, notifications)
    return True


def list_favorite_projects(api: ApiClient, user_id: str, search: str = "",
                           skip: int = 0, limit: int = 100) -> list[FavoriteProject]:
    """The user's favorites, narrowed locally by *search*."""
    payload = api.get("/project-favorites/project-details",
                      {"user_id": user_id, "skip": skip, "limit": limit})
    favorites = [FavoriteProject.model_validate(item) for item in normalize_list(payload)]
    return filter_results(favorites, search, FAVORITE_SEARCH_FIELDS)

"""
Role checks for newsroom actions
admin: anything; editor: any article and categories; author: own articles only
"""

from typing import Any, Dict, Optional

from pznews.core.exceptions import PermissionDenied

ADMIN = "admin"
EDITOR = "editor"
AUTHOR = "author"


def has_role(user: Optional[Dict[str, Any]], *roles: str) -> bool:
    return bool(user) and user.get("role") in roles


def ensure_role(user: Optional[Dict[str, Any]], *roles: str) -> None:
    if not has_role(user, *roles):
        raise PermissionDenied("You do not have permission to perform this action")


def can_modify_article(user: Optional[Dict[str, Any]], article) -> bool:
    if has_role(user, ADMIN, EDITOR):
        return True
    return has_role(user, AUTHOR) and article.author_id is not None and article.author_id == user.get("id")


def ensure_can_modify_article(user: Optional[Dict[str, Any]], article) -> None:
    if not can_modify_article(user, article):
        raise PermissionDenied("You can only modify your own articles")


def ensure_can_delete_media(user: Optional[Dict[str, Any]], media) -> None:
    if has_role(user, ADMIN):
        return
    if user and media.uploaded_by is not None and media.uploaded_by == user.get("id"):
        return
    raise PermissionDenied("Only the uploader or an admin can delete this file")


def ensure_can_edit_media(user: Optional[Dict[str, Any]], media) -> None:
    if has_role(user, ADMIN, EDITOR):
        return
    if user and media.uploaded_by is not None and media.uploaded_by == user.get("id"):
        return
    raise PermissionDenied("You can only edit your own files")


def ensure_can_manage_categories(user: Optional[Dict[str, Any]]) -> None:
    ensure_role(user, ADMIN, EDITOR)


def ensure_can_manage_users(user: Optional[Dict[str, Any]]) -> None:
    ensure_role(user, ADMIN)

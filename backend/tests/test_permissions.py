from types import SimpleNamespace

import pytest

from pznews.core.exceptions import PermissionDenied
from pznews.core.permissions import (
    can_modify_article,
    ensure_can_delete_media,
    ensure_can_edit_media,
    ensure_can_manage_categories,
    ensure_can_manage_users,
)

ADMIN = {"id": 1, "role": "admin"}
EDITOR = {"id": 2, "role": "editor"}
AUTHOR = {"id": 3, "role": "author"}
OTHER = {"id": 4, "role": "author"}


def test_article_ownership():
    article = SimpleNamespace(author_id=3)
    assert can_modify_article(ADMIN, article)
    assert can_modify_article(EDITOR, article)
    assert can_modify_article(AUTHOR, article)
    assert not can_modify_article(OTHER, article)
    assert not can_modify_article(None, article)


def test_orphaned_article_only_for_staff():
    article = SimpleNamespace(author_id=None)
    assert can_modify_article(EDITOR, article)
    assert not can_modify_article(AUTHOR, article)


def test_media_delete_is_uploader_or_admin():
    media = SimpleNamespace(uploaded_by=3)
    ensure_can_delete_media(ADMIN, media)
    ensure_can_delete_media(AUTHOR, media)
    with pytest.raises(PermissionDenied):
        ensure_can_delete_media(EDITOR, media)
    with pytest.raises(PermissionDenied):
        ensure_can_delete_media(OTHER, media)


def test_media_edit_allows_editors():
    media = SimpleNamespace(uploaded_by=3)
    ensure_can_edit_media(EDITOR, media)
    with pytest.raises(PermissionDenied):
        ensure_can_edit_media(OTHER, media)


def test_role_gates():
    ensure_can_manage_categories(EDITOR)
    with pytest.raises(PermissionDenied):
        ensure_can_manage_categories(AUTHOR)
    ensure_can_manage_users(ADMIN)
    with pytest.raises(PermissionDenied):
        ensure_can_manage_users(EDITOR)

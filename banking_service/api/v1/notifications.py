"""Notification inbox endpoints"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response

from banking_service.api.dependencies import get_current_user_id, get_notification_store
from banking_service.api.errors import http_error
from banking_service.api.v1.schemas import MarkAllReadResponse, NotificationResponse
from banking_service.domain.exceptions import NotFoundError, StorageError
from banking_service.domain.notifications import get_user_notification
from banking_service.infrastructure.database.repositories import NotificationRepository

router = APIRouter()


@router.get("/notifications", response_model=List[NotificationResponse])
def list_notifications(
    unread_only: bool = Query(False),
    user_id: str = Depends(get_current_user_id),
    notifications: NotificationRepository = Depends(get_notification_store),
):
    try:
        items = notifications.list_notifications(user_id, unread_only=unread_only)
    except StorageError as e:
        raise http_error(503, e)

    return [NotificationResponse.model_validate(item) for item in items]


@router.post("/notifications/read-all", response_model=MarkAllReadResponse)
def mark_all_read(
    user_id: str = Depends(get_current_user_id),
    notifications: NotificationRepository = Depends(get_notification_store),
):
    try:
        updated = notifications.mark_all_read(user_id)
    except StorageError as e:
        raise http_error(503, e)

    return MarkAllReadResponse(updated=updated)


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: str,
    user_id: str = Depends(get_current_user_id),
    notifications: NotificationRepository = Depends(get_notification_store),
):
    try:
        get_user_notification(notifications, user_id, notification_id)
        notifications.mark_read(notification_id)
        notification = get_user_notification(notifications, user_id, notification_id)
    except NotFoundError as e:
        raise http_error(404, e)
    except StorageError as e:
        raise http_error(503, e)

    return NotificationResponse.model_validate(notification)


@router.delete("/notifications/{notification_id}", status_code=204)
def delete_notification(
    notification_id: str,
    user_id: str = Depends(get_current_user_id),
    notifications: NotificationRepository = Depends(get_notification_store),
):
    try:
        get_user_notification(notifications, user_id, notification_id)
        notifications.delete(notification_id)
    except NotFoundError as e:
        raise http_error(404, e)
    except StorageError as e:
        raise http_error(503, e)

    return Response(status_code=204)

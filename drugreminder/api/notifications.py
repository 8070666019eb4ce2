"""
Endpoints de notificaciones pendientes
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from drugreminder.core.clock import Clock
from drugreminder.core.database import get_db
from drugreminder.core.dependencies import (
    get_adherence_log,
    get_app_clock,
    get_current_user,
    get_notification_sink
)
from drugreminder.models.user import User
from drugreminder.schemas.adherence import AdherenceEventRecord, NotificationResponseRequest
from drugreminder.schemas.notification import NotificationResponse
from drugreminder.services.adherence_service import AdherenceResponseHandler
from drugreminder.services.notification_service import NotificationService
from drugreminder.store.base import AdherenceLog, NotificationSink

router = APIRouter()


@router.get("/", response_model=List[NotificationResponse])
async def list_pending_notifications(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Notificaciones pendientes del usuario actual
    """
    return NotificationService(db).get_pending_for_owner(current_user.email)


@router.post(
    "/{notification_id}/respond",
    response_model=AdherenceEventRecord,
    status_code=status.HTTP_201_CREATED
)
async def respond_to_notification(
        notification_id: str,
        response_data: NotificationResponseRequest,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        adherence_log: AdherenceLog = Depends(get_adherence_log),
        notification_sink: NotificationSink = Depends(get_notification_sink),
        clock: Clock = Depends(get_app_clock)
):
    """
    Responder "tomado" o "no tomado" a una notificación
    """
    notification = NotificationService(db).get_notification_by_id(notification_id)
    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notificación no encontrada"
        )

    if notification.owner_email != current_user.email:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No tienes acceso a esta notificación"
        )

    medication_name = notification.medication_name
    medication_id = notification.medication_id

    handler = AdherenceResponseHandler(adherence_log, notification_sink, clock)
    return await handler.record_response(
        medication_name=medication_name,
        owner_email=current_user.email,
        notification_id=notification_id,
        response=response_data.response,
        medication_id=medication_id
    )

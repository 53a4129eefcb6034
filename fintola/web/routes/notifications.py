"""
跨设备连接短信路由
"""

from fastapi import APIRouter, Depends

from fintola.core.exceptions import NotificationError, ValidationError
from fintola.core.notifications import SmsSender
from fintola.web.dependencies import get_current_user, get_sms_sender
from fintola.web.models import SendSmsRequest

router = APIRouter()


@router.post("/send-connection-sms")
async def send_connection_sms(
    body: SendSmsRequest,
    user_id: str = Depends(get_current_user),
    sender: SmsSender = Depends(get_sms_sender),
) -> dict:
    """发送包含连接链接的短信"""
    if not body.phone_number or not body.message:
        raise ValidationError("Phone number and message are required")

    if not await sender.send(body.phone_number, body.message):
        raise NotificationError("Failed to send SMS")

    return {"success": True, "message": "SMS sent successfully"}

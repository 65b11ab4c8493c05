# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień o zamówieniach.
    Używa Celery do asynchronicznego przetwarzania, wołany dopiero po commicie.
    Błąd kolejki nie może cofnąć zamówienia, więc jest tylko logowany.
    """

    @staticmethod
    def send_order_placed(user_id: int, order_id: str, total: str):
        try:
            send_order_placed_notification.delay(user_id, order_id, total)
        except Exception as e:
            logger.warning(f"Nie udało się zlecić powiadomienia o zamówieniu {order_id}: {e}")

    @staticmethod
    def send_status_changed(user_id: int, order_id: str, status: str):
        try:
            send_order_status_notification.delay(user_id, order_id, status)
        except Exception as e:
            logger.warning(f"Nie udało się zlecić powiadomienia o statusie {order_id}: {e}")


@celery_app.task(name="storefront.services.notification_service.send_order_placed_notification")
def send_order_placed_notification(user_id: int, order_id: str, total: str):
    """
    Celery task - w prawdziwym systemie wysłałby email/SMS/push.
    Teraz tylko loguje.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} placed, total {total}")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}


@celery_app.task(name="storefront.services.notification_service.send_order_status_notification")
def send_order_status_notification(user_id: int, order_id: str, status: str):
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} is now {status}")
    return {"user_id": user_id, "order_id": order_id, "order_status": status, "status": "sent"}

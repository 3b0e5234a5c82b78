# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Order and account emails, processed asynchronously by celery.
    Enqueue failures are logged and reported as False, never raised.
    """

    @staticmethod
    def send_order_notification(user_id: int, transaction_id: int, no_invoice: str) -> bool:
        try:
            send_order_notification_task.delay(user_id, transaction_id, no_invoice)
            return True
        except Exception as e:
            logger.warning(f"Failed to enqueue notification for transaction {transaction_id}: {e}")
            return False

    @staticmethod
    def send_password_reset_email(email: str, token: str) -> bool:
        try:
            send_password_reset_email_task.delay(email, token)
            return True
        except Exception as e:
            logger.warning(f"Failed to enqueue password reset email for {email}: {e}")
            return False


@celery_app.task(name="storefront.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, transaction_id: int, no_invoice: str):
    """
    Email delivery lives outside this service; the task records what would be sent.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {no_invoice} (transaction {transaction_id}) is on progress")
    return {"user_id": user_id, "transaction_id": transaction_id, "no_invoice": no_invoice, "status": "sent"}


@celery_app.task(name="storefront.services.notification_service.send_password_reset_email_task")
def send_password_reset_email_task(email: str, token: str):
    # the token itself is never logged
    logger.info(f"[NOTIFICATION] Password reset token sent to {email}")
    return {"email": email, "status": "sent"}

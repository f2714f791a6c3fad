import logging

from botocore.exceptions import ClientError
from celery import shared_task
from django.conf import settings
from django.template.loader import render_to_string

from accounts.utils import get_ses_client
from quiztakers.models import PREMIUM, QuizTaker

logger = logging.getLogger("quiz_platform")

ACCESS_CODE_SUBJECT = "Your Quiz Platform Access Code"


class EmailDeliveryError(Exception):
    pass


def build_access_code_message(quiz_taker):
    context = {
        "name": quiz_taker.name or quiz_taker.email,
        "email": quiz_taker.email,
        "access_code": quiz_taker.access_code,
    }
    return {
        "Subject": {"Data": ACCESS_CODE_SUBJECT},
        "Body": {
            "Text": {"Data": render_to_string("accounts/emails/access_code.txt", context)},
            "Html": {"Data": render_to_string("accounts/emails/access_code.html", context)},
        },
    }


@shared_task
def deliver_access_code(quiz_taker_id):
    """Email a premium quiz taker their current access code. Returns the SES message id."""
    quiz_taker = QuizTaker.objects.filter(pk=quiz_taker_id, account_type=PREMIUM).first()
    if quiz_taker is None or not quiz_taker.access_code:
        logger.warning(f"Quiz taker {quiz_taker_id} has no access code to send")
        return None

    ses_client = get_ses_client()
    if ses_client is None:
        raise EmailDeliveryError("No SES client available")

    try:
        response = ses_client.send_email(
            Source=settings.DEFAULT_FROM_EMAIL,
            Destination={"ToAddresses": [quiz_taker.email]},
            Message=build_access_code_message(quiz_taker),
        )
    except ClientError as e:
        logger.error(f"SES rejected the access code email for quiz taker {quiz_taker_id}: {e}")
        raise

    logger.info(f"Access code email sent to quiz taker {quiz_taker_id}")
    return response["MessageId"]

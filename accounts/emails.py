import logging
from functools import partial

from django.db import transaction

from accounts.tasks import deliver_access_code

logger = logging.getLogger("quiz_platform")


def send_access_code_email(quiz_taker):
    """
    Queue the access code notification once the surrounding transaction commits.

    Delivery is fire-and-forget: a broker failure is logged by on_commit(robust=True)
    and never undoes the taker creation. The worker reads the code from the database,
    so it never travels through the broker.
    """
    logger.info(f"Queueing access code email for quiz taker {quiz_taker.pk}")
    transaction.on_commit(partial(deliver_access_code.delay, quiz_taker.pk), robust=True)

# storefront/utils/retry.py
from sqlalchemy.exc import OperationalError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from storefront.domain.errors import ConcurrentModificationError
from storefront.utils.settings import ORDER_PLACEMENT_MAX_ATTEMPTS


#konflikt wersji albo blad serializacji/deadlock po stronie bazy
RETRYABLE_DB_ERRORS = (ConcurrentModificationError, OperationalError)


def transaction_retry(attempts: int | None = None):
    """
    Ponawia cala jednostke transakcyjna.
    Dekorowana funkcja musi sama zrobic rollback i ponownie czytac stan z bazy.
    """
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts or ORDER_PLACEMENT_MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=0.5),
        retry=retry_if_exception_type(RETRYABLE_DB_ERRORS),
    )

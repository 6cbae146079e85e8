import logging

from stockledger.core.constants import HEALTH_DEFAULT_VALUE
from stockledger.core.exceptions import LedgerError, NotFoundError
from stockledger.ledger.base import PlainStore
from stockledger.ledger.keys import HEALTH_KEY

logger = logging.getLogger(__name__)


def _read_health_value(ledger: PlainStore) -> str:
    return ledger.get(HEALTH_KEY).text()


def probe_ledger(ledger: PlainStore) -> dict:
    """
    Round-trip the ledger through the ``health:status`` key.

    A fresh store has no such key, so the probe seeds it. When seeding fails
    (another probe may have won the race) the key is read once more.
    """
    try:
        return {"connected": True, "value": _read_health_value(ledger)}
    except NotFoundError:
        pass
    except LedgerError as exc:
        logger.error("Error reading health key from ledger: %s", exc)
        return {"connected": False, "error": str(exc)}

    try:
        ledger.set(HEALTH_KEY, HEALTH_DEFAULT_VALUE)
        return {"connected": True, "value": HEALTH_DEFAULT_VALUE}
    except LedgerError as set_exc:
        try:
            return {"connected": True, "value": _read_health_value(ledger)}
        except LedgerError as retry_exc:
            logger.error(
                "Failed to set or re-read health key from ledger: %s / %s",
                set_exc,
                retry_exc,
            )
            return {"connected": False, "error": str(set_exc) or str(retry_exc)}

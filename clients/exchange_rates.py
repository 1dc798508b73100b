"""
clients/exchange_rates.py
--------------------------
Thin client for the ExchangeRate-API v6 service.

Every failure mode (transport error, timeout, non-200 status, bad JSON,
missing or non-positive rate) is reported as RateUnavailable so callers
only ever deal with one exception type.
"""

from decimal import Decimal, InvalidOperation

import httpx

from config import EXCHANGE_RATE_API_KEY, EXCHANGE_RATE_API_URL, EXCHANGE_RATE_TIMEOUT
from services.errors import RateUnavailable
from utils.logger import get_logger

logger = get_logger(__name__)


def _get_json(path: str) -> dict:
    url = f"{EXCHANGE_RATE_API_URL}/{EXCHANGE_RATE_API_KEY}/{path}"
    try:
        response = httpx.get(url, timeout=EXCHANGE_RATE_TIMEOUT)
    except httpx.HTTPError as e:
        logger.warning(f"Rate service unreachable ({path}): {e}")
        raise RateUnavailable("Exchange rate service is unreachable") from e

    if response.status_code != 200:
        logger.warning(f"Rate service returned {response.status_code} for {path}")
        raise RateUnavailable(f"Exchange rate service returned status {response.status_code}")

    try:
        data = response.json()
    except ValueError as e:
        raise RateUnavailable("Exchange rate service returned invalid JSON") from e

    if not isinstance(data, dict) or data.get("result", "success") != "success":
        raise RateUnavailable("Exchange rate service rejected the request")
    return data


def get_rate(base: str, quote: str) -> Decimal:
    """
    Fetch the conversion rate from `base` to `quote`.

    Returns:
        A positive Decimal such that `amount_in_base * rate == amount_in_quote`.

    Raises:
        RateUnavailable: When no usable rate could be obtained.
    """
    base, quote = base.upper(), quote.upper()
    if base == quote:
        return Decimal("1")

    data = _get_json(f"pair/{base}/{quote}")
    raw = data.get("conversion_rate")
    try:
        rate = Decimal(str(raw))
    except (InvalidOperation, ValueError) as e:
        raise RateUnavailable(f"No conversion rate for {base}/{quote}") from e

    if not rate.is_finite() or rate <= 0:
        raise RateUnavailable(f"No conversion rate for {base}/{quote}")

    logger.info(f"Fetched rate {base}/{quote} = {rate}")
    return rate


def get_latest(base: str) -> dict[str, float]:
    """
    Fetch every published rate for `base`.

    Returns:
        {'USD': 1.08, 'GBP': 0.85, ...}
    """
    data = _get_json(f"latest/{base.upper()}")
    rates = data.get("conversion_rates")
    if not isinstance(rates, dict) or not rates:
        raise RateUnavailable(f"No rates published for {base.upper()}")
    return rates

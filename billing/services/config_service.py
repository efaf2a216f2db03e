"""
System configuration store - holds the current platform commission rate.

Reads fall back to the default rate when the row is missing, unreadable or
the database is unavailable (fee computation must never be blocked by a
configuration read). The fallback is never written back. Writes validate
first and then upsert the single row; there is no cache in front of it.

Authorization (admin only) is the caller's job.
"""
import logging

from django.conf import settings
from django.db import DatabaseError

from billing import config
from billing.exceptions import InvalidCommissionRate
from billing.models import SystemConfig
from billing.services.commission_service import validate_rate

logger = logging.getLogger(__name__)


class ConfigurationService:
    def __init__(self, default_rate=None, key: str = config.COMMISSION_RATE_KEY):
        self._default_rate = default_rate
        self.key = key

    @property
    def default_rate(self) -> float:
        """The configured fallback rate; an out-of-range one falls back to the built-in default."""
        rate = self._default_rate
        if rate is None:
            rate = getattr(settings, "DEFAULT_COMMISSION_RATE", config.DEFAULT_COMMISSION_RATE)
        try:
            return float(validate_rate(rate))
        except InvalidCommissionRate:
            logger.warning("config: default rate %r is invalid, using %s", rate, config.DEFAULT_COMMISSION_RATE)
            return float(config.DEFAULT_COMMISSION_RATE)

    def get_commission_rate(self) -> float:
        try:
            row = SystemConfig.objects.filter(key=self.key).first()
        except DatabaseError as e:
            logger.warning("config: could not read %s, using default %s: %s", self.key, self.default_rate, e)
            return self.default_rate
        if row is None:
            return self.default_rate
        try:
            return float(validate_rate(row.value))
        except InvalidCommissionRate:
            logger.warning("config: stored %s=%r is invalid, using default %s", self.key, row.value, self.default_rate)
            return self.default_rate

    def set_commission_rate(self, rate) -> float:
        """
        Validate and store a new commission rate.

        Raises:
            InvalidCommissionRate: rate is not in [0, 1); nothing is written.
        """
        value = validate_rate(rate)
        SystemConfig.objects.update_or_create(key=self.key, defaults={"value": str(value)})
        logger.info("config: %s set to %s", self.key, value)
        return float(value)


default_service = ConfigurationService()


def get_commission_rate() -> float:
    return default_service.get_commission_rate()


def set_commission_rate(rate) -> float:
    return default_service.set_commission_rate(rate)

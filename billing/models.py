"""
Billing models. Stripe is the source of truth for payments and connected
account status; the only billing state owned here is platform configuration.
"""
from django.db import models


class SystemConfig(models.Model):
    """Singleton-by-key configuration value, e.g. COMMISSION_RATE = "0.085"."""

    key = models.CharField(max_length=100, unique=True)
    value = models.CharField(max_length=255)  # string-encoded, parsed by config_service
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "System Config"
        verbose_name_plural = "System Config"
        ordering = ["key"]

    def __str__(self):
        return f"{self.key}={self.value}"

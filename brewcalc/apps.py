"""
Django Brewcalc app configuration.
"""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class BrewcalcConfig(AppConfig):
    """Brewcalc application configuration."""

    name = "brewcalc"
    verbose_name = _("Rezeptberechnung")

    def ready(self):
        """Fail at startup, not mid-edit, on broken calibration settings."""
        from brewcalc.conf import CALIBRATION_KEYS, get_calibration

        for key in CALIBRATION_KEYS:
            get_calibration(key)

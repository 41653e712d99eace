from decimal import Decimal
from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


def money_field(**kwargs):
    """DecimalField(12, 2) defaulting to 0.00; every peso amount uses this shape."""
    opts = {"max_digits": 12, "decimal_places": 2, "default": Decimal("0.00")}
    opts.update(kwargs)
    return models.DecimalField(**opts)


class PeriodType(models.TextChoices):
    FIRST_HALF = "1st_half", "1st half (1-15)"
    SECOND_HALF = "2nd_half", "2nd half (16-end)"


class Cutoff(models.TextChoices):
    FIRST = "1st", "1st cutoff"
    SECOND = "2nd", "2nd cutoff"

from django.conf import settings
from django.db import models


class PointsLedgerEntry(models.Model):
    """A log of every points movement. The balance itself lives on the user row."""
    household = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='points_entries'
    )
    # Positive for awards, negative for redemptions
    points = models.IntegerField()
    reason = models.CharField(max_length=255)
    reference = models.CharField(max_length=64, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'points ledger entries'

    def __str__(self):
        return f"{self.household}: {self.points:+d} points for {self.reason}"

from django.db import models
import uuid


def default_progress_bar_config():
    """Day bands used by clients to colour the due-date progress bar."""
    return {'blue': 15, 'yellow': 5, 'orange': 5, 'red': 5}


class Store(models.Model):
    """A store that books gold purchases."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=120)
    code = models.CharField(max_length=32, unique=True)
    is_active = models.BooleanField(default=True)
    progress_bar_config = models.JSONField(default=default_progress_bar_config)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stores'
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_active'], name='stores_is_active_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

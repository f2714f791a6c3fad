from django.db import models
from django.db.models import F


class WriteConflict(Exception):
    """Row changed since it was read in the current transaction."""


class VersionedModel(models.Model):
    version = models.PositiveIntegerField(default=0)

    class Meta:
        abstract = True

    def save_versioned(self, *args, **kwargs):
        """
        Save with an optimistic version check.

        The UPDATE ... WHERE version=<read version> both detects a concurrent writer
        and holds the row lock until the surrounding transaction ends.
        """
        if self._state.adding:
            self.version = 1
            self.save(*args, **kwargs)
            return

        updated = type(self).objects.filter(pk=self.pk, version=self.version).update(
            version=F("version") + 1
        )
        if not updated:
            raise WriteConflict(f"{type(self).__name__} {self.pk} was modified concurrently")

        self.version += 1
        self.save(*args, **kwargs)

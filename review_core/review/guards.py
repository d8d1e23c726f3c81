# review_core/review/guards.py

from django.core.exceptions import PermissionDenied
from django.db import models


class ConditionalWriteGuardMixin(models.Model):
    """
    Prevent modification of a row outside its owning store.

    Once created, rows of models inheriting this mixin change only through
    queryset-level conditional updates (see StageStateStore.write).
    Direct .save() on an existing instance is blocked.

    Escape hatch:
      - pass _review_bypass=True to save(), OR
      - set instance._review_bypass = True
    Use sparingly (data fixes, admin repair scripts).
    """

    GUARD_MESSAGE = "Direct modification is forbidden. Use the review transition APIs."
    BYPASS_KWARG = "_review_bypass"

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        bypass = bool(
            kwargs.pop(self.BYPASS_KWARG, False)
            or getattr(self, "_review_bypass", False)
        )

        if not bypass and not self._state.adding:
            raise PermissionDenied(self.GUARD_MESSAGE)

        return super().save(*args, **kwargs)


class AppendOnlyMixin(models.Model):
    """
    Rows are insert-only: updates and deletes are refused at the model layer.
    """

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise PermissionDenied(
                f"{self.__class__.__name__} rows are append-only and cannot be modified."
            )
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionDenied(
            f"{self.__class__.__name__} rows are append-only and cannot be deleted."
        )

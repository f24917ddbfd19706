from django.db import models

class SystemSetting(models.Model):
    """
    Simple key/value settings store, editable by staff at runtime.
    Example keys:
      - BUSINESS_OPEN (e.g., '10:00')
      - BUSINESS_CLOSE (e.g., '22:00')
      - BUSINESS_CLOSE_WEEKEND (e.g., '24:00', Friday/Saturday)
    """
    key = models.CharField(max_length=100, unique=True)
    value = models.CharField(max_length=200)

    def __str__(self):
        return f"{self.key}={self.value}"

    @classmethod
    def get_value(cls, key, default=None):
        row = cls.objects.filter(key=key).first()
        return row.value if row else default

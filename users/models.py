from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Custom User Model inheriting from AbstractUser for flexibility.

    ``name`` is the display name recorded against audit log entries.
    """

    name = models.CharField(max_length=255, blank=True)

    def get_display_name(self):
        return self.name or self.get_full_name() or self.username

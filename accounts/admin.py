from django.contrib import admin
from .models import Profile

@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "full_name", "user")
    search_fields = ("name", "full_name", "user__email")

from django.apps import AppConfig


class UserDataManagementConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'UserDataManagement'

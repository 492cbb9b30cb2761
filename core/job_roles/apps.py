from django.apps import AppConfig


class JobRolesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core.job_roles'
    verbose_name = 'Job Roles'

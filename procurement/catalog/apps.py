from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'procurement.catalog'
    verbose_name = 'Purchase Categories'

from django.db import models


class Category(models.Model):
    """
    Purchase category master data (e.g. IT Equipment, Office Supplies).
    Workflow rules can route on a PR's ``category_id``.
    """
    name = models.CharField(max_length=120, unique=True)
    description = models.TextField(blank=True, default='')
    # Optional free-form categorization hints kept alongside the category
    rules = models.JSONField(null=True, blank=True)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'categories'
        ordering = ['name']
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'

    def __str__(self):
        return self.name

"""
Job Role Models
Roles are data, not constants: approver routing looks users up by the
role ``code`` that workflow rules name as their ``approver_role``.
"""
from django.db import models
from django.core.exceptions import ValidationError


class JobRole(models.Model):
    """
    Job role representing a position in the organization (e.g. "manager").
    Workflow rules reference roles by ``code``.
    """
    code = models.SlugField(
        max_length=50,
        unique=True,
        help_text="Identifier referenced by workflow rules (e.g. 'manager')"
    )
    name = models.CharField(max_length=100, unique=True, db_index=True)
    description = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'job_roles'
        verbose_name = 'Job Role'
        verbose_name_plural = 'Job Roles'
        ordering = ['name']

    def __str__(self):
        return self.name

    def delete(self, *args, **kwargs):
        """
        Prevent deletion if job role is assigned to users.
        """
        if self.users.exists():
            raise ValidationError(
                f"Cannot delete job role '{self.name}' because it is assigned to "
                f"{self.users.count()} user(s)"
            )
        return super().delete(*args, **kwargs)

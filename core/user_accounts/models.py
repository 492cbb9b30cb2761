"""
User Account Models
The user directory consulted by the approval engine: who holds which job
role in which department.
"""
from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager
from django.db import models
from django.core.exceptions import PermissionDenied


class Department(models.Model):
    """Organizational unit that owns workflows, PRs and approvers."""
    name = models.CharField(max_length=120, unique=True, db_index=True)
    description = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'departments'
        verbose_name = 'Department'
        verbose_name_plural = 'Departments'
        ordering = ['name']

    def __str__(self):
        return self.name


class CustomUserManager(BaseUserManager):
    """
    Custom user manager for CustomUser model.
    Handles user creation and the role/department directory lookup.
    """

    def create_user(self, email, name, password=None, job_role=None, department=None, **extra_fields):
        """
        Create and save a user.

        Args:
            email: User's email address (used for authentication)
            name: User's full name
            password: User's password (will be hashed)
            job_role: JobRole instance (optional)
            department: Department instance (optional)
            **extra_fields: Additional fields to set on the user

        Returns:
            CustomUser: The created user instance
        """
        if not email:
            raise ValueError('Email is required')
        if not name:
            raise ValueError('Name is required')

        email = self.normalize_email(email)

        user = self.model(
            email=email,
            name=name,
            job_role=job_role,
            department=department,
            **extra_fields
        )
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, name, password=None, **extra_fields):
        """
        Create and save a super user.
        Required by Django for the createsuperuser management command.
        """
        extra_fields['is_super_user'] = True
        return self.create_user(email=email, name=name, password=password, **extra_fields)

    def find_by_roles_and_department(self, role_codes, department_id=None):
        """
        Active users holding any of ``role_codes``.

        When ``department_id`` is given only users of that department are
        returned. Pass ``None`` to search the whole organization.
        """
        qs = self.filter(
            is_active=True,
            job_role__code__in=list(role_codes),
        ).select_related('job_role', 'department')

        if department_id is not None:
            qs = qs.filter(department_id=department_id)

        return qs.order_by('id')


class CustomUser(AbstractBaseUser):
    """Custom user model with email authentication."""
    email = models.EmailField(unique=True, db_index=True)
    name = models.CharField(max_length=255)

    job_role = models.ForeignKey(
        'job_roles.JobRole',
        on_delete=models.PROTECT,
        related_name='users',
        null=True,
        blank=True,
        help_text="Role used to route approvals to this user"
    )
    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        related_name='users',
        null=True,
        blank=True,
    )

    is_active = models.BooleanField(default=True)
    is_super_user = models.BooleanField(default=False)

    objects = CustomUserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        db_table = 'custom_users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'

    def __str__(self):
        return f"{self.name} ({self.email})"

    @property
    def role_code(self):
        return self.job_role.code if self.job_role_id else None

    # Django admin access
    @property
    def is_staff(self):
        return self.is_super_user

    def has_perm(self, perm, obj=None):
        return self.is_active and self.is_super_user

    def has_module_perms(self, app_label):
        return self.is_active and self.is_super_user

    def delete(self, *args, **kwargs):
        """
        Prevent deletion of super users.
        """
        if self.is_super_user:
            raise PermissionDenied(
                "Cannot delete super user. Super users are protected from deletion."
            )
        return super().delete(*args, **kwargs)


def approver_queryset(role_codes, department_id):
    """
    Users eligible to approve for ``role_codes`` on a PR of ``department_id``.

    Honours settings.APPROVAL_RESTRICT_TO_DEPARTMENT (default True).
    """
    restrict = getattr(settings, 'APPROVAL_RESTRICT_TO_DEPARTMENT', True)
    return CustomUser.objects.find_by_roles_and_department(
        role_codes,
        department_id if restrict else None,
    )

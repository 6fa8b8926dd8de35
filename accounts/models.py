import uuid
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin


class UserRole(models.TextChoices):
    SUPERUSER = 'superuser', 'Super User'
    ADMIN_INPUT = 'admin_input', 'Admin Input'
    ADMIN_DOC_CONTROL = 'admin_doc_control', 'Admin Document Control'
    ADMIN_VERIFICATION = 'admin_verification', 'Admin Verification'


# Roles that may upload stock-on-hand spreadsheets.
SOH_UPLOAD_ROLES = (UserRole.SUPERUSER, UserRole.ADMIN_DOC_CONTROL)

ADMIN_ROLES = (UserRole.ADMIN_INPUT, UserRole.ADMIN_DOC_CONTROL, UserRole.ADMIN_VERIFICATION)


class UserManager(BaseUserManager):
    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("The Email field must be set")

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', UserRole.SUPERUSER)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Super user must have is_staff = True")

        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Super user must have is_superuser = True")

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    email = models.EmailField(unique=True, max_length=255)
    name = models.CharField(max_length=150, blank=True)

    # The StockFlow role; unrelated to Django's is_superuser admin-site flag.
    role = models.CharField(max_length=32, choices=UserRole.choices, default=UserRole.ADMIN_INPUT)

    # The superuser who created this admin account; admins are only assignable to that superuser's projects.
    managed_by = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='managed_users',
    )

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    date_joined = models.DateTimeField(auto_now_add=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    objects = UserManager()

    def __str__(self):
        return f"{self.email} ({self.role})"

"""
Authz models: auth_user
"""
import uuid
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin


# ============================================================================
# User Management
# ============================================================================

class UserManager(BaseUserManager):
    """Custom user manager for username-based authentication."""

    def create_user(self, username, email, password=None, **extra_fields):
        if not username:
            raise ValueError('Username is required')
        if not email:
            raise ValueError('Email is required')
        email = self.normalize_email(email)
        user = self.model(username=username, email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, username, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        return self.create_user(username, email, password, **extra_fields)

    def get_by_login(self, login):
        """Resolve a login identifier that may be a username or an email."""
        return self.get(models.Q(username=login) | models.Q(email__iexact=login))

    def find_conflict(self, email, username, mobile_number):
        """
        Return ``(field, message)`` for the first identity already taken.

        Fields are checked independently, in the order email, username,
        mobile number. Returns None when all three are free.
        """
        checks = [
            ('email', models.Q(email__iexact=email), 'Email already registered'),
            ('username', models.Q(username=username), 'Username already taken'),
            ('mobile_number', models.Q(mobile_number=mobile_number), 'Mobile number already registered'),
        ]
        for field, lookup, message in checks:
            if self.filter(lookup).exists():
                return field, message
        return None


class User(AbstractBaseUser, PermissionsMixin):
    """
    Account of a note uploader/downloader.

    Fields:
    - id: UUID PK
    - username, email, mobile_number: each unique
    - first_name, last_name, date_of_birth, qualification: profile
    - password: salted one-way hash (AbstractBaseUser)
    - is_email_verified, is_mobile_verified: verification flags
    - created_at, updated_at

    Associations (reverse relations):
    - uploaded_notes: notes this user owns (Note.uploaded_by)
    - downloads: NoteDownload history, one row per note
    - note_likes: NoteLike rows
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = models.CharField(unique=True, max_length=150)
    email = models.EmailField(unique=True, max_length=255)
    mobile_number = models.CharField(unique=True, max_length=20)
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    date_of_birth = models.DateField(null=True, blank=True)
    qualification = models.CharField(max_length=255, blank=True)
    is_email_verified = models.BooleanField(default=False)
    is_mobile_verified = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)  # Required for admin access
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'username'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = ['email', 'mobile_number']

    class Meta:
        db_table = 'auth_user'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['is_active'], name='idx_user_active'),
        ]

    def __str__(self):
        return self.username

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def uploaded_note_ids(self):
        """Ids of the notes this user uploaded, oldest first."""
        return list(
            self.uploaded_notes.order_by('created_at').values_list('id', flat=True)
        )

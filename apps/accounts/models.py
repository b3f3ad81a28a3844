from django.contrib.auth.models import AbstractBaseUser, BaseUserManager
from django.core.exceptions import ValidationError
from django.db import models
import uuid


class AuthorityQuerySet(models.QuerySet):
    """Lookups for role records."""

    def find_by_name(self, name):
        return self.filter(name=name).first()


class Authority(models.Model):
    """A named role assigned to accounts. Seeded by migration, never edited here."""

    name = models.CharField(max_length=50, primary_key=True)

    objects = AuthorityQuerySet.as_manager()

    class Meta:
        db_table = 'authorities'
        ordering = ['name']
        verbose_name_plural = 'authorities'

    def __str__(self):
        return self.name


class AccountQuerySet(models.QuerySet):
    """
    Finder methods used by the account services.

    Single-record finders return None instead of raising DoesNotExist,
    so they chain after select_for_update() as well:

        Account.objects.select_for_update().find_by_reset_key(key)
    """

    def find_by_activation_key(self, key):
        return self.filter(activation_key=key).first() if key else None

    def find_by_reset_key(self, key):
        return self.filter(reset_key=key).first() if key else None

    def find_by_email(self, email):
        return self.filter(email__iexact=email).first() if email else None

    def find_by_login(self, login):
        return self.filter(login=Account.normalize_login(login)).first() if login else None

    def find_by_id(self, account_id):
        try:
            return self.filter(id=account_id).first()
        except ValidationError:
            # Malformed UUIDs cannot match any account
            return None

    def find_all_by_login_not(self, login):
        return self.exclude(login=Account.normalize_login(login))

    def find_all_unactivated_created_before(self, timestamp):
        return self.filter(activated=False, created_date__lt=timestamp)


class AccountManager(BaseUserManager.from_queryset(AccountQuerySet)):
    """Account manager with login-based natural keys."""

    def get_by_natural_key(self, username):
        return self.get(login=Account.normalize_login(username))

    def create_user(self, login, email, password=None, **extra_fields):
        if not login:
            raise ValueError('Login is required')
        if not email:
            raise ValueError('Email is required')

        account = self.model(
            login=login,
            email=self.normalize_email(email),
            **extra_fields
        )
        account.set_password(password)
        account.save(using=self._db)
        return account

    def create_superuser(self, login, email, password=None, **extra_fields):
        extra_fields.setdefault('activated', True)

        if extra_fields.get('activated') is not True:
            raise ValueError('Superuser must have activated=True')

        account = self.create_user(login, email, password, **extra_fields)
        account.authorities.add(*Authority.objects.all())
        return account


class Account(AbstractBaseUser):
    """
    User account with login-based authentication.

    `password` holds the hash produced by the configured PASSWORD_HASHERS.
    An activated account never carries an activation key, and a reset key
    is always paired with the reset_date it was issued at.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    login = models.CharField(unique=True, max_length=50)
    email = models.EmailField(unique=True, max_length=254)
    first_name = models.CharField(max_length=50, blank=True)
    last_name = models.CharField(max_length=50, blank=True)
    image_url = models.CharField(max_length=256, blank=True)
    lang_key = models.CharField(max_length=10, blank=True)

    # Lifecycle
    activated = models.BooleanField(default=False)
    activation_key = models.CharField(max_length=20, null=True, blank=True, db_index=True)
    reset_key = models.CharField(max_length=20, null=True, blank=True, db_index=True)
    reset_date = models.DateTimeField(null=True, blank=True)

    # Roles
    authorities = models.ManyToManyField(Authority, related_name='accounts', blank=True)

    # Timestamps
    created_date = models.DateTimeField(auto_now_add=True)
    last_modified_date = models.DateTimeField(auto_now=True)

    objects = AccountManager()

    USERNAME_FIELD = 'login'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = ['email']

    class Meta:
        db_table = 'accounts'
        ordering = ['created_date']
        indexes = [
            models.Index(fields=['activated', 'created_date'], name='accounts_unactivated_idx'),
        ]

    def __str__(self):
        return self.login

    def save(self, *args, **kwargs):
        self.login = self.normalize_login(self.login)
        # Unique constraint is case-sensitive; store emails lower-case
        self.email = self.email.lower() if self.email else self.email
        super().save(*args, **kwargs)

    @property
    def is_active(self):
        """Only activated accounts may authenticate."""
        return self.activated

    @classmethod
    def normalize_login(cls, login):
        return login.lower() if login else login

    def get_authority_names(self):
        return {authority.name for authority in self.authorities.all()}

    def has_authority(self, name):
        return self.authorities.filter(name=name).exists()

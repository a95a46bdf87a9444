from django.core.validators import MinValueValidator
from django.db import models
import uuid


# Largest value a PositiveIntegerField column holds on every supported backend.
MAX_AMOUNT = 2147483647


class ExpenseStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    ARCHIVED = 'ARCHIVED', 'Archived'


class ShareStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    PAID = 'PAID', 'Paid'

    @classmethod
    def toggled(cls, status):
        """Return the opposite status."""
        return cls.PENDING if status == cls.PAID else cls.PAID


class ExpenseQuerySet(models.QuerySet):

    def active(self):
        return self.filter(status=ExpenseStatus.ACTIVE)

    def archived(self):
        return self.filter(status=ExpenseStatus.ARCHIVED)


class Expense(models.Model):
    """
    A dated charge logged against a shared account.

    Amounts are integers in minor units of the configured currency.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey('accounts.Account', on_delete=models.CASCADE, related_name='expenses')
    title = models.CharField(max_length=200)
    amount = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    date = models.DateField(db_index=True)
    created_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses_created',
    )
    status = models.CharField(
        max_length=20,
        choices=ExpenseStatus.choices,
        default=ExpenseStatus.ACTIVE,
        db_index=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ExpenseQuerySet.as_manager()

    class Meta:
        db_table = 'expenses'
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.title} ({self.amount}) on {self.date}"

    @property
    def is_archived(self):
        return self.status == ExpenseStatus.ARCHIVED


class ExpenseShare(models.Model):
    """One participant's portion of an expense."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    expense = models.ForeignKey(Expense, on_delete=models.CASCADE, related_name='shares')
    user = models.ForeignKey('users.User', on_delete=models.CASCADE, related_name='expense_shares')
    amount = models.PositiveIntegerField()
    status = models.CharField(
        max_length=20,
        choices=ShareStatus.choices,
        default=ShareStatus.PENDING,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expense_shares'
        unique_together = [['expense', 'user']]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.user} owes {self.amount} for {self.expense.title} ({self.status})"

    def toggle_status(self):
        self.status = ShareStatus.toggled(self.status)
        return self.status

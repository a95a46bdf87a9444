from django.db import models
import uuid


class MembershipStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    ACCEPTED = 'ACCEPTED', 'Accepted'


class Account(models.Model):
    """Shared expense-tracking account with one owner and invited members."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    owner = models.ForeignKey('users.User', on_delete=models.CASCADE, related_name='owned_accounts')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'accounts'
        ordering = ['created_at']

    def __str__(self):
        return self.name

    def is_owner(self, user):
        return self.owner_id == user.pk

    def membership_status(self, user):
        """Return the user's membership status; the owner is always ACCEPTED."""
        if self.is_owner(user):
            return MembershipStatus.ACCEPTED
        try:
            return self.memberships.get(user=user).status
        except AccountMembership.DoesNotExist:
            return None

    def has_member(self, user):
        """True only for ACCEPTED members (including the owner)."""
        return self.membership_status(user) == MembershipStatus.ACCEPTED

    def accepted_member_ids(self):
        ids = set(
            self.memberships
            .filter(status=MembershipStatus.ACCEPTED)
            .values_list('user_id', flat=True)
        )
        ids.add(self.owner_id)
        return ids


class AccountMembership(models.Model):
    """A user's invitation to, or membership in, an account."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='memberships')
    user = models.ForeignKey('users.User', on_delete=models.CASCADE, related_name='account_memberships')
    status = models.CharField(
        max_length=20,
        choices=MembershipStatus.choices,
        default=MembershipStatus.PENDING,
        db_index=True,
    )
    invited_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_invitations',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    responded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'account_members'
        unique_together = [['account', 'user']]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.user.get_display_name()} in {self.account.name} ({self.status})"

    def save(self, *args, **kwargs):
        if self.account.owner_id == self.user_id:
            self.status = MembershipStatus.ACCEPTED
        super().save(*args, **kwargs)

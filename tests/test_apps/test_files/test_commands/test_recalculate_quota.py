"""Tests for recalculate_quota management command."""

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from server.apps.files.logic.file_operations import upload_file
from server.apps.files.models import UserQuota


@pytest.fixture
def drifted(user, mock_s3, make_upload):
    """Store one file and corrupt the user's ledger.

    Returns:
        Size of the stored file in bytes.
    """
    stored = upload_file(user, make_upload())
    UserQuota.objects.filter(user=user).update(used_bytes=999)
    return stored.size_bytes


@pytest.mark.django_db
class TestRecalculateQuotaCommand:
    """Tests for recalculate_quota management command."""

    def test_fixes_drifted_ledger(self, user, drifted):
        """Test the ledger is rebuilt from file sizes."""
        out = StringIO()
        call_command('recalculate_quota', stdout=out)

        assert UserQuota.objects.get(user=user).used_bytes == drifted
        assert f'testuser: 999 -> {drifted} bytes' in out.getvalue()
        assert 'Checked 1 users, 1 ledgers fixed' in out.getvalue()

    def test_dry_run_leaves_ledger(self, user, drifted):
        """Test a dry run only reports the drift."""
        out = StringIO()
        call_command('recalculate_quota', '--dry-run', stdout=out)

        assert UserQuota.objects.get(user=user).used_bytes == 999
        assert '1 ledgers would be fixed' in out.getvalue()

    def test_consistent_ledgers_untouched(self, user, other_user):
        """Test users without drift are counted but not reported."""
        out = StringIO()
        call_command('recalculate_quota', stdout=out)

        assert 'Checked 2 users, 0 ledgers fixed' in out.getvalue()
        assert 'testuser:' not in out.getvalue()

    def test_selected_users(self, user, other_user, drifted):
        """Test only the named users are checked."""
        out = StringIO()
        call_command('recalculate_quota', 'otheruser', stdout=out)

        assert 'Checked 1 users, 0 ledgers fixed' in out.getvalue()
        assert UserQuota.objects.get(user=user).used_bytes == 999

    def test_unknown_user(self, user):
        """Test naming an unknown user fails."""
        with pytest.raises(CommandError, match='ghost'):
            call_command('recalculate_quota', 'ghost', stdout=StringIO())

"""Management command to rebuild storage usage from file records."""

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from server.apps.files.logic.quota_operations import (
    get_or_create_quota,
    recalculate_usage,
    sum_file_sizes,
)

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Recompute ``used_bytes`` of quota ledgers from stored file sizes."""

    help = 'Recalculate storage usage from file records'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            'usernames',
            nargs='*',
            help='Users to recalculate (default: all users)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report drifting ledgers without fixing them',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the recalculation.

        Args:
            args: Positional arguments (unused).
            options: Command options.

        Raises:
            CommandError: If a requested user does not exist.
        """
        user_model = get_user_model()
        usernames = options['usernames']
        dry_run = options['dry_run']

        users = user_model.objects.order_by('id')
        if usernames:
            users = users.filter(username__in=usernames)
            missing = set(usernames) - set(
                users.values_list('username', flat=True),
            )
            if missing:
                raise CommandError(
                    f'Unknown users: {", ".join(sorted(missing))}',
                )

        checked = 0
        drifted = 0
        for user in users:
            checked += 1
            before = get_or_create_quota(user).used_bytes
            if dry_run:
                actual = sum_file_sizes(user)
            else:
                actual = recalculate_usage(user)
            if actual != before:
                drifted += 1
                self.stdout.write(
                    f'{user.username}: {before} -> {actual} bytes',
                )

        logger.info(
            'Quota recalculation: checked=%d, drifted=%d, dry_run=%s',
            checked,
            drifted,
            dry_run,
        )
        verb = 'would be fixed' if dry_run else 'fixed'
        self.stdout.write(
            self.style.SUCCESS(
                f'Checked {checked} users, {drifted} ledgers {verb}',
            ),
        )

# soh/management/commands/expire_soh_deletion_tokens.py

from django.core.management.base import BaseCommand

from soh.services import SOHDeletionService


class Command(BaseCommand):
    """
    Reverts SOH references whose deletion approval link expired without being
    used. Meant to run periodically (cron, systemd timer).
    """
    help = 'Clears expired SOH deletion tokens and restores the previous reference status.'

    def handle(self, *args, **options):
        reverted = SOHDeletionService().expire_stale_requests()
        if reverted:
            self.stdout.write(self.style.SUCCESS(f"Reverted {reverted} expired SOH deletion request(s)."))
        else:
            self.stdout.write("No expired SOH deletion requests found.")

"""
Main orchestrator for Webex Room Sync.

This module contains the reconciliation pipeline: read both rosters, work out
who is missing from the destination room, add them, and report the outcome.
It also provides the command line entry point.
"""

import sys
import json
import logging
from datetime import datetime
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_EXCEPTION
from typing import Dict, Any, List, Optional, Tuple

from room_sync.config import SyncConfig, load_config, ConfigurationError
from room_sync.differ import find_missing
from room_sync.logging_setup import setup_logging
from room_sync.memberships import fetch_roster, add_member
from room_sync.models import Member, AttemptResult, SyncReport
from room_sync.notifications import notify_recipients
from room_sync.webex_client import WebexClient, TransportError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARTIAL_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_TRANSPORT_ERROR = 3
EXIT_UNEXPECTED_ERROR = 4


class SyncOrchestrator:
    """
    Runs one source -> destination membership sync.

    The orchestrator holds no state between runs. Running it again after a
    partial failure re-reads both rooms and only retries what is still missing.
    """

    def __init__(self, config: SyncConfig, client: Optional[WebexClient] = None, notify: bool = True):
        """
        Initialize sync orchestrator.

        Args:
            config: Loaded configuration
            client: Webex client; built from the config when omitted
            notify: Send the report to the configured recipients after the run
        """
        self.config = config
        self.client = client or WebexClient(
            config.token,
            base_url=config.api_base_url,
            timeout=config.request_timeout
        )
        self.notify = notify

    def run(self) -> SyncReport:
        """
        Run the complete synchronization process.

        Returns:
            SyncReport for this run

        Raises:
            TransportError: If either roster could not be read. No members are
                added in that case.
        """
        start_time = datetime.now()
        logger.info(f"Starting room sync: {self.config.source_room_id} -> {self.config.destination_room_id}")

        source, destination = self._fetch_rosters()

        missing = find_missing(source, destination)
        logger.info(f"{len(missing)} of {len(source)} source members are missing from the destination room")

        results = self._add_members(missing)
        report = SyncReport.from_results(results)

        runtime_seconds = (datetime.now() - start_time).total_seconds()
        self._log_sync_summary(report, runtime_seconds)

        if self.notify:
            self._send_report(report)

        return report

    def _fetch_rosters(self) -> Tuple[List[Member], List[Member]]:
        """Read both rosters concurrently; the first failure aborts the run."""
        executor = ThreadPoolExecutor(max_workers=2)
        try:
            source_future = executor.submit(
                fetch_roster, self.client, self.config.source_room_id, self.config.max_members
            )
            destination_future = executor.submit(
                fetch_roster, self.client, self.config.destination_room_id, self.config.max_members
            )

            done, _ = wait([source_future, destination_future], return_when=FIRST_EXCEPTION)
            for future in (source_future, destination_future):
                if future in done and future.exception() is not None:
                    logger.error(f"Failed to read room roster: {future.exception()}")
                    raise future.exception()

            return source_future.result(), destination_future.result()
        finally:
            executor.shutdown(wait=False)

    def _add_members(self, missing: List[Member]) -> List[AttemptResult]:
        """
        Add every missing member concurrently and wait for all of them.

        Results are returned in the order of ``missing``, whatever order the
        requests complete in.
        """
        if not missing:
            return []

        results = []
        workers = min(self.config.max_workers, len(missing))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(add_member, self.client, self.config.destination_room_id, member.person_id)
                for member in missing
            ]
            for member, future in zip(missing, futures):
                try:
                    future.result()
                    results.append(AttemptResult(member=member, success=True))
                except Exception as e:
                    logger.error(f"Failed to add {member.person_display_name or member.person_id}: {e}")
                    results.append(AttemptResult(member=member, success=False, error=str(e)))

        return results

    def _send_report(self, report: SyncReport):
        """Deliver the report to the configured recipients (best effort)."""
        if not self.config.notify_emails:
            logger.debug("Report notifications disabled, no recipients configured")
            return
        try:
            notify_recipients(self.client, self.config.notify_emails, report, self.config.max_workers)
        except Exception as e:
            logger.error(f"Failed to send sync report: {e}")

    def _log_sync_summary(self, report: SyncReport, runtime_seconds: float):
        """Log final synchronization statistics."""
        logger.info("=== Sync Summary ===")
        logger.info(f"Total runtime: {runtime_seconds:.2f} seconds")
        logger.info(f"Members attempted: {report.attempted}")
        logger.info(f"Members added: {report.added}")
        logger.info(f"Members failed: {len(report.failed)}")
        for failure in report.failed:
            logger.info(f"  {failure.person_display_name or failure.person_id}: {failure.error}")

    def health_check(self) -> Dict[str, Any]:
        """
        Check that the token works and both rooms are readable.

        Returns:
            Dictionary containing health status and details
        """
        health_status = {
            'status': 'healthy',
            'timestamp': datetime.now().isoformat(),
            'checks': {
                'configuration': {
                    'status': 'pass',
                    'message': 'Configuration loaded successfully'
                }
            }
        }

        try:
            me = self.client.get_me()
            health_status['checks']['token'] = {
                'status': 'pass',
                'message': f"Token accepted for {me.get('displayName', 'unknown user')}"
            }
        except TransportError as e:
            health_status['checks']['token'] = {
                'status': 'fail',
                'message': f'Token rejected: {e}'
            }
            health_status['status'] = 'unhealthy'

        rooms = (('source_room', self.config.source_room_id),
                 ('destination_room', self.config.destination_room_id))
        for check_name, room_id in rooms:
            try:
                fetch_roster(self.client, room_id, max_members=1)
                health_status['checks'][check_name] = {
                    'status': 'pass',
                    'message': f'Room {room_id} is readable'
                }
            except TransportError as e:
                health_status['checks'][check_name] = {
                    'status': 'fail',
                    'message': f'Room {room_id} is not readable: {e}'
                }
                health_status['status'] = 'unhealthy'

        return health_status


def main(argv: Optional[List[str]] = None):
    """Main entry point for the application."""
    import argparse

    parser = argparse.ArgumentParser(description='Add members of one Webex room to another')
    parser.add_argument('--config', '-c', help='Path to configuration file')
    parser.add_argument('--reverse', action='store_true',
                        help='Swap the configured source and destination rooms for this run')
    parser.add_argument('--no-notify', action='store_true',
                        help='Do not message the report to SEND_RESULTS recipients')
    parser.add_argument('--health-check', action='store_true',
                        help='Check token and room access instead of syncing')

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    setup_logging(config.logging)

    if args.reverse:
        config = config.swapped()

    orchestrator = SyncOrchestrator(config, notify=not args.no_notify)

    if args.health_check:
        health_status = orchestrator.health_check()
        print(json.dumps(health_status, indent=2))
        sys.exit(0 if health_status['status'] == 'healthy' else 1)

    try:
        report = orchestrator.run()
    except TransportError as e:
        print(f"Sync aborted: {e}", file=sys.stderr)
        sys.exit(EXIT_TRANSPORT_ERROR)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(EXIT_UNEXPECTED_ERROR)

    print(json.dumps(report.to_dict(), indent=2))
    sys.exit(EXIT_PARTIAL_FAILURE if report.has_failures else EXIT_OK)


if __name__ == "__main__":
    main()

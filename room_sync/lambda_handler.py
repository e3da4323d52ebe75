"""
AWS Lambda entry point for Webex Room Sync.

Configure WEBEX_TOKEN, SRC_ROOM_ID, DST_ROOM_ID and optionally SEND_RESULTS
as function environment variables and point the handler at
``room_sync.lambda_handler.handler``.
"""

import json
import logging
from typing import Dict, Any, Optional

from room_sync.config import load_config
from room_sync.logging_setup import setup_logging
from room_sync.main import SyncOrchestrator

logger = logging.getLogger(__name__)


def _error_response(message: str) -> Dict[str, Any]:
    return {
        'statusCode': 500,
        'body': json.dumps({'error': message}),
    }


def handler(event: Optional[Dict[str, Any]], context: Any = None) -> Dict[str, Any]:
    """
    Run one sync and return an API Gateway style response.

    The event may carry ``sourceRoomId`` and ``destinationRoomId`` to override
    the configured rooms for this invocation only.
    """
    event = event or {}

    try:
        config = load_config()
        setup_logging(config.logging)

        source = event.get('sourceRoomId')
        destination = event.get('destinationRoomId')
        if source or destination:
            config = config.with_rooms(
                source or config.source_room_id,
                destination or config.destination_room_id
            )
            logger.info("Using room ids from the invocation event")

        report = SyncOrchestrator(config).run()
    except Exception as e:
        logger.error(f"Sync failed: {e}")
        return _error_response(str(e))

    return {
        'statusCode': 200,
        'body': json.dumps(report.to_dict()),
    }

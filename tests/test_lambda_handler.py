#!/usr/bin/env python3
"""
Unit tests for the AWS Lambda entry point.
"""

import os
import sys
import json
import unittest
from unittest.mock import Mock, patch

# Add parent directory to path to import room_sync modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from room_sync.config import SyncConfig, ConfigurationError
from room_sync.lambda_handler import handler
from room_sync.models import SyncReport
from room_sync.webex_client import TransportError


class TestLambdaHandler(unittest.TestCase):
    """Test cases for handler."""

    def setUp(self):
        self.config = SyncConfig(token='t', source_room_id='SRC', destination_room_id='DST')

        patchers = {
            'load_config': patch('room_sync.lambda_handler.load_config', return_value=self.config),
            'setup_logging': patch('room_sync.lambda_handler.setup_logging'),
            'orchestrator': patch('room_sync.lambda_handler.SyncOrchestrator'),
        }
        self.mocks = {}
        for name, patcher in patchers.items():
            self.mocks[name] = patcher.start()
            self.addCleanup(patcher.stop)

        self.orchestrator = Mock()
        self.mocks['orchestrator'].return_value = self.orchestrator

    def test_success_returns_report(self):
        self.orchestrator.run.return_value = SyncReport(attempted=2, added=2, failed=[])

        response = handler({}, None)

        self.assertEqual(response['statusCode'], 200)
        self.assertEqual(json.loads(response['body']), {'attempted': 2, 'added': 2, 'failed': []})
        self.mocks['orchestrator'].assert_called_once_with(self.config)

    def test_transport_error_returns_500(self):
        self.orchestrator.run.side_effect = TransportError('HTTP 401 - unauthorized', status=401)

        response = handler({}, None)

        self.assertEqual(response['statusCode'], 500)
        self.assertIn('401', json.loads(response['body'])['error'])

    def test_configuration_error_returns_500(self):
        self.mocks['load_config'].side_effect = ConfigurationError('Missing Webex access token')

        response = handler(None, None)

        self.assertEqual(response['statusCode'], 500)
        self.assertEqual(json.loads(response['body']), {'error': 'Missing Webex access token'})
        self.mocks['orchestrator'].assert_not_called()

    def test_event_overrides_rooms(self):
        self.orchestrator.run.return_value = SyncReport()

        handler({'sourceRoomId': 'DST', 'destinationRoomId': 'SRC'}, None)

        config = self.mocks['orchestrator'].call_args[0][0]
        self.assertEqual((config.source_room_id, config.destination_room_id), ('DST', 'SRC'))

    def test_event_override_to_same_room_fails(self):
        response = handler({'destinationRoomId': 'SRC'}, None)

        self.assertEqual(response['statusCode'], 500)
        self.assertIn('must be different', json.loads(response['body'])['error'])
        self.mocks['orchestrator'].assert_not_called()


if __name__ == '__main__':
    unittest.main()

#!/usr/bin/env python3
"""
Unit tests for the roster fetcher and member adder.
"""

import os
import sys
import unittest
from unittest.mock import Mock

# Add parent directory to path to import room_sync modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from room_sync.memberships import fetch_roster, add_member, MAX_PAGE_SIZE
from room_sync.webex_client import TransportError

from fake_webex import membership


class TestFetchRoster(unittest.TestCase):
    """Test cases for fetch_roster."""

    def test_returns_members_in_service_order(self):
        client = Mock()
        client.list_memberships.return_value = {'items': [membership('B'), membership('A')]}

        roster = fetch_roster(client, 'ROOM1')

        client.list_memberships.assert_called_once_with('ROOM1', MAX_PAGE_SIZE)
        self.assertEqual([m.person_id for m in roster], ['B', 'A'])
        self.assertEqual(roster[0].person_email, 'b@example.com')

    def test_missing_items_is_empty_roster(self):
        client = Mock()
        client.list_memberships.return_value = {}

        self.assertEqual(fetch_roster(client, 'ROOM1'), [])

    def test_null_items_is_empty_roster(self):
        client = Mock()
        client.list_memberships.return_value = {'items': None}

        self.assertEqual(fetch_roster(client, 'ROOM1'), [])

    def test_full_page_logs_warning(self):
        client = Mock()
        client.list_memberships.return_value = {'items': [membership('A'), membership('B')]}

        with self.assertLogs('room_sync.memberships', level='WARNING') as logs:
            roster = fetch_roster(client, 'ROOM1', max_members=2)

        self.assertEqual(len(roster), 2)
        self.assertIn('full page', logs.output[0])

    def test_error_propagates(self):
        client = Mock()
        client.list_memberships.side_effect = TransportError('HTTP 404', status=404)

        with self.assertRaises(TransportError) as ctx:
            fetch_roster(client, 'ROOM1')

        self.assertEqual(ctx.exception.status, 404)


class TestAddMember(unittest.TestCase):
    """Test cases for add_member."""

    def test_success(self):
        client = Mock()
        client.create_membership.return_value = {'id': 'm1'}

        self.assertTrue(add_member(client, 'ROOM1', 'PERSON1'))
        client.create_membership.assert_called_once_with('ROOM1', 'PERSON1')

    def test_duplicate_is_not_prechecked(self):
        client = Mock()
        client.create_membership.side_effect = TransportError('HTTP 409 - exists', status=409, body='exists')

        with self.assertRaises(TransportError) as ctx:
            add_member(client, 'ROOM1', 'PERSON1')

        self.assertEqual(ctx.exception.status, 409)
        client.list_memberships.assert_not_called()


if __name__ == '__main__':
    unittest.main()

"""
Roster fetching and member adding against the Webex memberships endpoint.

Neither function retries. A run that fails part way is retried by running
the whole sync again, which recomputes what is still missing.
"""

import logging
from typing import List

from room_sync.models import Member
from room_sync.webex_client import WebexClient

logger = logging.getLogger(__name__)

# Largest page the memberships endpoint will return in one request.
MAX_PAGE_SIZE = 1000


def fetch_roster(client: WebexClient, room_id: str, max_members: int = MAX_PAGE_SIZE) -> List[Member]:
    """
    Get the members of a room in a single request.

    Only the first page is read. Rooms with more than ``max_members`` members
    are only partially synced; a full page is logged as a warning.

    Args:
        client: Webex client
        room_id: Room to read
        max_members: Page size to request

    Returns:
        Members in the order the service returned them

    Raises:
        TransportError: If the request fails
    """
    logger.debug(f"Fetching members for room {room_id}")

    response = client.list_memberships(room_id, max_members)
    members = [Member.from_api(item) for item in response.get('items') or []]

    if len(members) >= max_members:
        logger.warning(f"Room {room_id} returned a full page of {len(members)} members; "
                       f"members beyond the first page are not synced")

    logger.info(f"Retrieved {len(members)} members from room {room_id}")
    return members


def add_member(client: WebexClient, room_id: str, person_id: str) -> bool:
    """
    Create a membership for a person in a room.

    The service is trusted to reject duplicates; an existing membership comes
    back as a 409 and is raised like any other failure.

    Returns:
        True if the membership was created

    Raises:
        TransportError: On any non-2xx response
    """
    client.create_membership(room_id, person_id)
    logger.info(f"Added person {person_id} to room {room_id}")
    return True

"""Membership diff between two rosters."""

from typing import List

from room_sync.models import Member


def find_missing(source: List[Member], destination: List[Member]) -> List[Member]:
    """
    Return the source members whose person_id is not in the destination.

    Source order is preserved. Repeated person_ids in the source are not
    collapsed, so each copy produces its own add attempt.
    """
    destination_ids = {member.person_id for member in destination}
    return [member for member in source if member.person_id not in destination_ids]

"""
Data types shared by the roster fetcher, differ, adder and reporter.

Members are read-only snapshots of what the Webex API returned for one run;
nothing here is persisted between runs.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional


@dataclass(frozen=True)
class Member:
    """One person's membership in a room, keyed by ``person_id``."""

    person_id: str
    person_email: str = ''
    person_display_name: str = ''
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> 'Member':
        """
        Build a Member from a Webex membership item.

        The ``personId`` is kept exactly as returned; it is an opaque key.
        """
        return cls(
            person_id=item.get('personId', ''),
            person_email=item.get('personEmail', '') or '',
            person_display_name=item.get('personDisplayName', '') or '',
            raw=dict(item),
        )


@dataclass(frozen=True)
class AttemptResult:
    """Outcome of one add-member call."""

    member: Member
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class FailedAttempt:
    """A member that could not be added, with the error that came back."""

    person_id: str
    person_display_name: str
    person_email: str
    error: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'personId': self.person_id,
            'personDisplayName': self.person_display_name,
            'personEmail': self.person_email,
            'error': self.error,
        }


@dataclass
class SyncReport:
    """
    Summary of one reconciliation run.

    ``added + len(failed) == attempted`` always holds, and ``failed`` keeps
    the order of the missing-member list the adds were issued from.
    """

    attempted: int = 0
    added: int = 0
    failed: List[FailedAttempt] = field(default_factory=list)

    @classmethod
    def from_results(cls, results: List[AttemptResult]) -> 'SyncReport':
        failed = [
            FailedAttempt(
                person_id=result.member.person_id,
                person_display_name=result.member.person_display_name,
                person_email=result.member.person_email,
                error=result.error or 'unknown error',
            )
            for result in results
            if not result.success
        ]
        return cls(
            attempted=len(results),
            added=sum(1 for result in results if result.success),
            failed=failed,
        )

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'attempted': self.attempted,
            'added': self.added,
            'failed': [failure.to_dict() for failure in self.failed],
        }

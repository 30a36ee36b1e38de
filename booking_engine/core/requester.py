"""Identity of the party calling the booking engine."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Requester:
    """
    Authenticated caller.

    ``club_id`` is set when the user acts as the manager of that club.
    Authentication itself happens upstream; the engine trusts these values.
    """

    user_id: int
    club_id: Optional[int] = None

    @property
    def acts_for_club(self) -> bool:
        return self.club_id is not None

    def manages(self, club_id: int) -> bool:
        return self.club_id is not None and self.club_id == club_id

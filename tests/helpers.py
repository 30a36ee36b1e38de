"""Constants shared by the test modules."""
from datetime import date, datetime

MONDAY = date(2026, 3, 2)
TUESDAY = date(2026, 3, 3)
# Early Monday morning, before the clubs open
NOW = datetime(2026, 3, 2, 7, 0)

PLAYER_ID = 10
OTHER_PLAYER_ID = 11
MANAGER_ID = 99
OTHER_MANAGER_ID = 98

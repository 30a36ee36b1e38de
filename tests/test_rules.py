"""Pure rule checks: windows, opening hours, tariffs and status vocabularies."""
from datetime import date, datetime, time
from decimal import Decimal

import pytest

from booking_engine.core.errors import NoPriceAvailable
from booking_engine.core.statuses import normalize_payment_status, normalize_status
from booking_engine.models import Club, Court, Reservation, TariffRule
from booking_engine.services.conflict_guard import find_conflict, windows_overlap
from booking_engine.services.operating_hours import OpeningWindow, iso_weekday, window_allowed
from booking_engine.services.tariffs import (
    SOURCE_COURT_DAY,
    SOURCE_COURT_NIGHT,
    court_price,
    is_night,
    select_rule,
    to_money,
)
from booking_engine.services.windows import BookingWindow, time_in_range

MONDAY = date(2026, 3, 2)


def window(hour, duration=1, minute=0, day=MONDAY):
    return BookingWindow.from_start(day, time(hour, minute), duration)


class TestWindows:
    def test_window_crossing_midnight(self):
        w = window(23, 2)
        assert w.end == datetime(2026, 3, 3, 1, 0)
        assert w.end_time == time(1, 0)
        assert w.ends_next_day

    def test_window_ending_at_midnight_ends_next_day(self):
        w = window(23, 1)
        assert w.end_time == time(0, 0)
        assert w.ends_next_day

    def test_touching_windows_do_not_overlap(self):
        assert not windows_overlap(window(10), window(11))
        assert not windows_overlap(window(11), window(10))

    def test_overlap(self):
        assert windows_overlap(window(10, 2), window(11))
        assert windows_overlap(window(23, 2), window(0, day=date(2026, 3, 3)))

    def test_time_in_range_wraps_midnight(self):
        assert time_in_range(time(23, 30), time(22, 0), time(6, 0))
        assert time_in_range(time(2, 0), time(22, 0), time(6, 0))
        assert not time_in_range(time(6, 0), time(22, 0), time(6, 0))
        assert not time_in_range(time(12, 0), time(22, 0), time(6, 0))

    def test_time_in_range_equal_bounds_is_whole_day(self):
        assert time_in_range(time(12, 0), time(0, 0), time(0, 0))


class TestOpeningHours:
    def test_iso_weekday(self):
        assert iso_weekday(MONDAY) == 1
        assert iso_weekday(date(2026, 3, 8)) == 7

    def test_same_day_hours(self):
        opening = OpeningWindow(opens_at=time(8, 0), closes_at=time(23, 0))
        assert window_allowed(window(8), opening)
        assert window_allowed(window(21, 2), opening)
        assert not window_allowed(window(7), opening)
        assert not window_allowed(window(22, 2), opening)

    def test_closing_after_midnight(self):
        opening = OpeningWindow(opens_at=time(8, 0), closes_at=time(2, 0))
        assert opening.closes_after_midnight
        assert window_allowed(window(23, 3), opening)
        assert not window_allowed(window(23, 4), opening)

    def test_round_the_clock(self):
        opening = OpeningWindow(opens_at=time(0, 0), closes_at=time(0, 0))
        assert window_allowed(window(0, 8), opening)
        assert window_allowed(window(23, 2), opening)

    def test_closed_day(self):
        opening = OpeningWindow(opens_at=time(8, 0), closes_at=time(23, 0), is_open=False)
        assert not window_allowed(window(10), opening)
        assert not window_allowed(window(10), None)


class TestTariffs:
    def test_to_money_rounds_half_up(self):
        assert to_money("10.005") == Decimal("10.01")
        assert to_money(3) == Decimal("3.00")

    def test_rule_must_cover_the_whole_window(self):
        rule = TariffRule(id=1, weekday=1, starts_at=time(8, 0), ends_at=time(18, 0), price_per_hour=Decimal("1500"))
        assert select_rule([rule], window(10, 2)) is rule
        assert select_rule([rule], window(17, 2)) is None

    def test_latest_start_wins_then_lowest_id(self):
        wide = TariffRule(id=1, weekday=1, starts_at=time(8, 0), ends_at=time(23, 0), price_per_hour=Decimal("1500"))
        narrow = TariffRule(id=3, weekday=1, starts_at=time(10, 0), ends_at=time(12, 0), price_per_hour=Decimal("2000"))
        twin = TariffRule(id=2, weekday=1, starts_at=time(10, 0), ends_at=time(14, 0), price_per_hour=Decimal("1800"))
        assert select_rule([wide, narrow, twin], window(10, 2)) is twin

    def test_rules_never_cover_windows_past_midnight(self):
        rule = TariffRule(id=1, weekday=1, starts_at=time(0, 0), ends_at=time(23, 59), price_per_hour=Decimal("1500"))
        assert select_rule([rule], window(23, 2)) is None

    def test_night_classification(self):
        club = Club(night_start=time(22, 0), night_end=time(6, 0))
        assert is_night(window(23, minute=30), club)
        assert not is_night(window(21, 2), club)
        assert not is_night(window(23), Club())

    def test_court_night_price_falls_back_to_day_price(self):
        club = Club(night_start=time(22, 0), night_end=time(6, 0))
        with_night = Court(id=1, day_price=Decimal("1000"), night_price=Decimal("1400"))
        without_night = Court(id=2, day_price=Decimal("1000"))

        quote = court_price(with_night, club, window(23))
        assert quote.source == SOURCE_COURT_NIGHT
        assert quote.price_per_hour == Decimal("1400.00")

        quote = court_price(without_night, club, window(23))
        assert quote.source == SOURCE_COURT_DAY
        assert quote.price_per_hour == Decimal("1000.00")
        assert quote.night_range == (time(22, 0), time(6, 0))

    def test_court_without_price(self):
        with pytest.raises(NoPriceAvailable):
            court_price(Court(id=4), Club(), window(10))


class TestConflicts:
    def reservation(self, id, hour, duration=1, estado="pendiente", day=MONDAY):
        w = window(hour, duration, day=day)
        return Reservation(
            id=id,
            date=w.day,
            start_time=w.start_time,
            end_time=w.end_time,
            ends_next_day=w.ends_next_day,
            estado=estado,
        )

    def test_only_active_reservations_conflict(self):
        rows = [self.reservation(1, 10, estado="cancelada"), self.reservation(2, 10, estado="finalizada")]
        assert find_conflict(rows, window(10)) is None

        rows.append(self.reservation(3, 9, 2, estado="confirmada"))
        assert find_conflict(rows, window(10)).id == 3

    def test_previous_evening_spills_into_the_day(self):
        rows = [self.reservation(1, 23, 2, day=date(2026, 3, 1))]
        assert find_conflict(rows, window(0)).id == 1
        assert find_conflict(rows, window(1)) is None


class TestStatuses:
    def test_payment_aliases(self):
        assert normalize_payment_status(" Sin_Abonar ") == "pendiente_pago"
        assert normalize_payment_status("seña") == "senado"
        assert normalize_payment_status("pagada") == "pagado"
        assert normalize_payment_status("rechazado") == "cancelado"
        assert normalize_payment_status("gratis") is None
        assert normalize_payment_status("  ") is None

    def test_reservation_status(self):
        assert normalize_status(" Confirmada") == "confirmada"
        assert normalize_status("borrada") is None
        assert normalize_status(3) is None

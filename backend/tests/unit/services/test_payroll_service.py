from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from bizworx import models
from bizworx.enums import PayPeriodType
from bizworx.schemas import PayrollSettingsUpdate
from bizworx.services.payroll_service import PayrollService, pay_period_containing

UTC = timezone.utc


class TestPayPeriods:

    def test_weekly_defaults_to_monday_periods(self):
        settings = models.PayrollSettings(pay_period_type=PayPeriodType.WEEKLY)
        assert pay_period_containing(settings, date(2025, 6, 11)) == (date(2025, 6, 9), date(2025, 6, 15))

    def test_biweekly_uses_configured_start(self):
        settings = models.PayrollSettings(pay_period_type=PayPeriodType.BIWEEKLY, pay_period_start_date=date(2025, 1, 3))
        assert pay_period_containing(settings, date(2025, 1, 20)) == (date(2025, 1, 17), date(2025, 1, 30))

    def test_day_before_anchor_falls_in_previous_period(self):
        settings = models.PayrollSettings(pay_period_type=PayPeriodType.WEEKLY, pay_period_start_date=date(2025, 1, 8))
        assert pay_period_containing(settings, date(2025, 1, 7)) == (date(2025, 1, 1), date(2025, 1, 7))

    def test_monthly(self):
        settings = models.PayrollSettings(pay_period_type=PayPeriodType.MONTHLY)
        assert pay_period_containing(settings, date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))


class TestPayrollService:

    def test_settings_are_created_with_defaults(self, storage):
        settings = PayrollService.get_settings(storage)
        assert settings.pay_period_type == PayPeriodType.WEEKLY
        assert Decimal(settings.overtime_threshold) == Decimal("40")
        assert PayrollService.get_settings(storage).id == settings.id

    def test_update_settings(self, storage):
        settings = PayrollService.update_settings(storage, PayrollSettingsUpdate(
            pay_period_type=PayPeriodType.BIWEEKLY, overtime_threshold=Decimal("80"),
        ))
        assert settings.pay_period_type == PayPeriodType.BIWEEKLY
        assert Decimal(settings.overtime_threshold) == Decimal("80")
        assert Decimal(settings.overtime_multiplier) == Decimal("1.5")

    def test_summary_splits_overtime(self, storage, team_member, make_member):
        part_timer = make_member(username="part", pin="2468", first_name="Pat")
        monday = datetime(2025, 6, 9, 8, tzinfo=UTC)
        for day in range(5):
            storage.save(models.TimeEntry(
                user_id=team_member.id,
                clock_in=monday + timedelta(days=day),
                clock_out=monday + timedelta(days=day, hours=9),
                total_hours=Decimal("9"),
            ))
        storage.save(models.TimeEntry(
            user_id=part_timer.id, clock_in=monday, clock_out=monday + timedelta(hours=4), total_hours=Decimal("4"),
        ))
        # next week, outside the period
        storage.save(models.TimeEntry(
            user_id=part_timer.id,
            clock_in=monday + timedelta(days=7),
            clock_out=monday + timedelta(days=7, hours=4),
            total_hours=Decimal("4"),
        ))

        summary = PayrollService.summary(storage, date(2025, 6, 12))

        assert (summary.period_start, summary.period_end) == (date(2025, 6, 9), date(2025, 6, 15))
        rows = {row.user_id: row for row in summary.employees}
        assert rows[team_member.id].total_hours == Decimal("45")
        assert rows[team_member.id].regular_hours == Decimal("40")
        assert rows[team_member.id].overtime_hours == Decimal("5")
        assert rows[part_timer.id].total_hours == Decimal("4")
        assert rows[part_timer.id].overtime_hours == Decimal("0")

#!/usr/bin/env python3
"""
Tests for YahrzeitManager: calculator results, input validation,
calendar and PDF exports, Hebrew date helpers and the command line.
"""

import os
import sys
import tempfile
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'frontend'))

from yahrzeit_manager import YahrzeitManager, main
from calendar_types import GregorianDate


SHEVAT_REQUEST = {
    'date_of_death': '2025-02-13',
    'sunset': 'before',
    'name': 'Rivka Cohen',
    'today': '2026-01-01',
}


# ══════════════════════════════════════════════════════════════
# Calculator
# ══════════════════════════════════════════════════════════════

class TestCalculate(unittest.TestCase):

    def setUp(self):
        self.mgr = YahrzeitManager(timezone='America/Toronto')

    def test_success_result(self):
        result = self.mgr.calculate(SHEVAT_REQUEST)
        self.assertEqual(result['status'], 'success')
        self.assertEqual(result['hebrew_date_of_death'], '15 Shevat 5785')
        self.assertEqual(result['hebrew_month'], 'Shevat')
        self.assertEqual(result['hebrew_day'], 15)
        self.assertEqual(result['hebrew_year'], 5785)
        self.assertEqual(result['name'], 'Rivka Cohen')
        self.assertIsNone(result['assumption'])

    def test_default_years(self):
        result = self.mgr.calculate(SHEVAT_REQUEST)
        self.assertEqual(len(result['yahrzeits']), self.mgr.default_years + 1)

    def test_next_yahrzeit(self):
        result = self.mgr.calculate(SHEVAT_REQUEST)
        upcoming = result['next_yahrzeit']
        self.assertEqual(upcoming['cycle'], 1)
        self.assertEqual(upcoming['gregorian_date'], '2026-02-02')
        self.assertEqual(upcoming['gregorian_date_formatted'], 'Monday, February 2, 2026')
        self.assertEqual(upcoming['hebrew_date'], '15 Shevat 5786')
        self.assertEqual(upcoming['days_until'], 32)
        self.assertFalse(upcoming['is_past'])
        self.assertIn('Rivka Cohen', result['share_text'])

    def test_after_sunset(self):
        data = dict(SHEVAT_REQUEST, date_of_death='2025-02-12', sunset='after')
        result = self.mgr.calculate(data)
        self.assertEqual(result['hebrew_date_of_death'], '15 Shevat 5785')
        self.assertEqual(result['date_of_death'], '2025-02-12')

    def test_unsure_sunset_reports_assumption(self):
        data = dict(SHEVAT_REQUEST)
        data.pop('sunset')
        result = self.mgr.calculate(data)
        self.assertEqual(result['sunset'], 'unsure')
        self.assertIn('before sunset', result['assumption'])

    def test_missing_date(self):
        result = self.mgr.calculate({'sunset': 'before'})
        self.assertEqual(result['status'], 'error')

    def test_invalid_date(self):
        result = self.mgr.calculate(dict(SHEVAT_REQUEST, date_of_death='2025-02-30'))
        self.assertEqual(result['status'], 'error')

    def test_invalid_sunset(self):
        result = self.mgr.calculate(dict(SHEVAT_REQUEST, sunset='noon'))
        self.assertEqual(result['status'], 'error')
        self.assertIn('Sunset', result['message'])

    def test_today_must_be_a_date(self):
        for today in (5, ['2026-01-01'], '2026-1-1'):
            result = self.mgr.calculate(dict(SHEVAT_REQUEST, today=today))
            self.assertEqual(result['status'], 'error', today)

    def test_trailing_characters_rejected(self):
        for value in ('2024-01-011', '2024-01-01T10:00', '2024-01-01 extra'):
            result = self.mgr.calculate(dict(SHEVAT_REQUEST, date_of_death=value))
            self.assertEqual(result['status'], 'error', value)

    def test_years_out_of_range(self):
        for years in ('0', '101', 'ten'):
            result = self.mgr.calculate(dict(SHEVAT_REQUEST, years=years))
            self.assertEqual(result['status'], 'error', years)

    def test_years_from_request(self):
        result = self.mgr.calculate(dict(SHEVAT_REQUEST, years='3'))
        self.assertEqual(len(result['yahrzeits']), 4)

    def test_no_upcoming_yahrzeit(self):
        result = self.mgr.calculate(dict(SHEVAT_REQUEST, years='1', today='2040-01-01'))
        self.assertEqual(result['status'], 'success')
        self.assertIsNone(result['next_yahrzeit'])
        self.assertIsNone(result['share_text'])

    def test_name_is_sanitized(self):
        result = self.mgr.calculate(dict(SHEVAT_REQUEST, name='  Rivka \n  Cohen '))
        self.assertEqual(result['name'], 'Rivka Cohen')


# ══════════════════════════════════════════════════════════════
# Exports
# ══════════════════════════════════════════════════════════════

class TestExports(unittest.TestCase):

    def setUp(self):
        self.mgr = YahrzeitManager(timezone='America/Toronto')

    def test_build_ics_next(self):
        filename, text = self.mgr.build_ics(SHEVAT_REQUEST)
        self.assertEqual(filename, 'yahrzeit-rivka-cohen-2026.ics')
        self.assertIn('DTSTART;VALUE=DATE:20260202', text)
        self.assertEqual(text.count('BEGIN:VEVENT'), 1)

    def test_build_ics_cycle(self):
        filename, text = self.mgr.build_ics(SHEVAT_REQUEST, cycle='2')
        self.assertTrue(filename.startswith('yahrzeit-rivka-cohen-'))
        self.assertEqual(text.count('BEGIN:VEVENT'), 1)

    def test_build_ics_rejects_bad_input(self):
        self.assertIsNone(self.mgr.build_ics(dict(SHEVAT_REQUEST, date_of_death='nope')))
        self.assertIsNone(self.mgr.build_ics(SHEVAT_REQUEST, cycle='x'))
        self.assertIsNone(self.mgr.build_ics(SHEVAT_REQUEST, cycle=99))

    def test_build_full_ics(self):
        filename, text = self.mgr.build_full_ics(dict(SHEVAT_REQUEST, years='4'))
        self.assertEqual(filename, 'yahrzeit-rivka-cohen-2026.ics')
        self.assertEqual(text.count('BEGIN:VEVENT'), 5)

    def test_build_schedule_pdf(self):
        filename, pdf_bytes = self.mgr.build_schedule_pdf(SHEVAT_REQUEST)
        self.assertEqual(filename, 'yahrzeit-rivka-cohen-2026-schedule.pdf')
        self.assertTrue(pdf_bytes.startswith(b'%PDF-'))

    def test_schedule_pdf_rejects_bad_input(self):
        self.assertIsNone(self.mgr.build_schedule_pdf({'date_of_death': ''}))


# ══════════════════════════════════════════════════════════════
# Hebrew Date Helpers
# ══════════════════════════════════════════════════════════════

class TestHebrewDateHelpers(unittest.TestCase):

    def setUp(self):
        self.mgr = YahrzeitManager(timezone='America/Toronto')

    def test_convert_to_hebrew_date(self):
        self.assertEqual(
            self.mgr.convert_to_hebrew_date('2025-02-13'),
            ('15 Shevat 5785', 'Shevat', 15, 5785)
        )

    def test_convert_after_sunset(self):
        converted = self.mgr.convert_to_hebrew_date('2025-02-12', 'after')
        self.assertEqual(converted[0], '15 Shevat 5785')

    def test_convert_invalid(self):
        self.assertIsNone(self.mgr.convert_to_hebrew_date('not-a-date'))
        self.assertIsNone(self.mgr.convert_to_hebrew_date('2025-02-13', 'sometime'))

    def test_next_yahrzeit_from_month_and_day(self):
        found = self.mgr.get_next_yahrzeit_gregorian('Shevat', 15, today='2026-01-01')
        self.assertEqual(found, (GregorianDate(2026, 2, 2), 5786))

    def test_next_yahrzeit_adar_moves_to_adar_ii(self):
        found = self.mgr.get_next_yahrzeit_gregorian('Adar', 10, today='2026-06-01')
        self.assertEqual(found, (GregorianDate(2027, 3, 19), 5787))

    def test_next_yahrzeit_with_death_year(self):
        found = self.mgr.get_next_yahrzeit_gregorian('Cheshvan', 30, death_year=5785, today='2025-01-01')
        self.assertEqual(found, (GregorianDate(2025, 11, 21), 5786))

    def test_next_yahrzeit_invalid(self):
        self.assertIsNone(self.mgr.get_next_yahrzeit_gregorian('Smarch', 1, today='2026-01-01'))
        self.assertIsNone(self.mgr.get_next_yahrzeit_gregorian('Shevat', 31, today='2026-01-01'))

    def test_describe_leap_year(self):
        result = self.mgr.describe_year('5784')
        self.assertEqual(result['status'], 'success')
        self.assertTrue(result['leap_year'])
        self.assertEqual(result['length'], 383)
        self.assertEqual(result['type'], 'deficient')
        self.assertEqual(len(result['months']), 13)
        self.assertEqual(result['months'][5], {'month': 'Adar I', 'days': 30})

    def test_describe_invalid_year(self):
        self.assertEqual(self.mgr.describe_year('0')['status'], 'error')
        self.assertEqual(self.mgr.describe_year('abc')['status'], 'error')

    def test_today_uses_timezone(self):
        self.assertIsInstance(self.mgr.today(), GregorianDate)


class TestConfiguration(unittest.TestCase):

    def test_environment_overrides(self):
        env = {'YAHRZEIT_DEFAULT_YEARS': '5', 'YAHRZEIT_MAX_YEARS': '20', 'YAHRZEIT_TIMEZONE': 'Asia/Jerusalem'}
        with patch.dict(os.environ, env):
            mgr = YahrzeitManager()
        self.assertEqual(mgr.timezone_name, 'Asia/Jerusalem')
        self.assertEqual(mgr.default_years, 5)
        result = mgr.calculate(dict(SHEVAT_REQUEST, years='21'))
        self.assertEqual(result['status'], 'error')
        self.assertEqual(len(mgr.calculate(SHEVAT_REQUEST)['yahrzeits']), 6)


# ══════════════════════════════════════════════════════════════
# Command Line
# ══════════════════════════════════════════════════════════════

class TestCommandLine(unittest.TestCase):

    def test_usage(self):
        self.assertEqual(main([]), 2)
        self.assertEqual(main(['bogus']), 2)

    def test_calculate_command(self):
        self.assertEqual(main(['calculate', '2025-02-13', 'before', '3', 'Rivka', 'Cohen']), 0)
        self.assertEqual(main(['calculate', '2025-13-01']), 1)

    def test_next_command(self):
        self.assertEqual(main(['next', '2025-02-13', 'after']), 0)

    def test_hebrew_command(self):
        self.assertEqual(main(['hebrew', '2025-02-13']), 0)
        self.assertEqual(main(['hebrew', 'yesterday']), 1)

    def test_year_command(self):
        self.assertEqual(main(['year', '5787']), 0)
        self.assertEqual(main(['year', '-1']), 1)

    def test_ics_command_writes_file(self):
        cwd = os.getcwd()
        with tempfile.TemporaryDirectory() as tmp:
            os.chdir(tmp)
            try:
                self.assertEqual(main(['ics', '2025-02-13', 'before', '100', 'Rivka']), 0)
                written = [f for f in os.listdir(tmp) if f.endswith('.ics')]
            finally:
                os.chdir(cwd)
        self.assertEqual(len(written), 1)
        self.assertTrue(written[0].startswith('yahrzeit-rivka-'))


if __name__ == '__main__':
    unittest.main()

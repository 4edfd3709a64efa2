"""
Tests for the date, timestamp and time binders.
"""
import datetime

import numpy as np
import pandas as pd
import pytest
from dateutil import tz
from dbbind.binders import date_binder, time_binder, timestamp_binder
from dbbind.exceptions import BindFailed, MalformedLiteral

# 2023-06-15 10:30:00 UTC
MILLIS = 1686825000000


class TestDateBinder:

    def test_date(self, statement):
        value = datetime.date(2023, 6, 15)
        date_binder().bind(statement, 1, value)
        assert statement.calls == [('set_date', 1, value)]

    def test_string(self, statement):
        date_binder().bind(statement, 1, '2023-06-15')
        assert statement.calls == [('set_date', 1, datetime.date(2023, 6, 15))]

    def test_string_single_digit_fields(self, statement):
        date_binder().bind(statement, 1, '2023-6-5')
        assert statement.bound == datetime.date(2023, 6, 5)

    def test_datetime_is_truncated(self, statement):
        date_binder().bind(statement, 1, datetime.datetime(2023, 6, 15, 23, 59, 59, 999999))
        assert statement.bound == datetime.date(2023, 6, 15)
        assert type(statement.bound) is datetime.date

    def test_timestamp_from_millis(self, statement):
        date_binder().bind(statement, 1, pd.Timestamp(MILLIS, unit='ms'))
        assert statement.bound == datetime.date(2023, 6, 15)

    def test_aware_datetime_uses_utc_date(self, statement):
        value = datetime.datetime(2023, 6, 15, 1, 0, tzinfo=tz.tzoffset(None, 3 * 3600))
        date_binder().bind(statement, 1, value)
        assert statement.bound == datetime.date(2023, 6, 14)

    def test_numpy_datetime64(self, statement):
        date_binder().bind(statement, 1, np.datetime64('2023-06-15T10:30'))
        assert statement.bound == datetime.date(2023, 6, 15)

    @pytest.mark.parametrize('text', [
        '2023-13-01',
        '2023-02-30',
        '15/06/2023',
        '2023-06-15 10:30:00',
        ' 2023-06-15',
        '',
    ])
    def test_malformed(self, text, statement):
        with pytest.raises(MalformedLiteral) as excinfo:
            date_binder().bind(statement, 1, text)
        assert excinfo.value.category == 'date'
        assert statement.calls == []

    @pytest.mark.parametrize('value', [20230615, 3.5, datetime.time(10, 30), b'2023-06-15'])
    def test_other_values_are_generic(self, value, statement):
        date_binder().bind(statement, 1, value)
        assert statement.calls == [('set_generic', 1, value)]


class TestTimestampBinder:

    def test_string(self, statement):
        timestamp_binder().bind(statement, 1, '2023-06-15 10:30:00')
        assert statement.calls == [('set_timestamp', 1, datetime.datetime(2023, 6, 15, 10, 30))]

    def test_string_with_fraction(self, statement):
        timestamp_binder().bind(statement, 1, '2023-06-15 10:30:00.5')
        assert statement.bound == datetime.datetime(2023, 6, 15, 10, 30, 0, 500000)

    def test_string_with_nanoseconds(self, statement):
        timestamp_binder().bind(statement, 1, '2023-06-15 10:30:00.123456789')
        value = statement.bound
        assert isinstance(value, pd.Timestamp)
        assert value.microsecond == 123456
        assert value.nanosecond == 789

    def test_naive_datetime_round_trip(self, statement):
        value = datetime.datetime(2023, 6, 15, 10, 30, 0, 123456)
        timestamp_binder().bind(statement, 1, value)
        assert statement.bound is value

    def test_pandas_timestamp_round_trip(self, statement):
        value = pd.Timestamp('2023-06-15 10:30:00.123456789')
        timestamp_binder().bind(statement, 1, value)
        assert statement.bound is value

    def test_aware_datetime_normalized_to_utc(self, statement):
        value = datetime.datetime(2023, 6, 15, 12, 0, 0, 123456, tzinfo=tz.tzoffset(None, 2 * 3600))
        timestamp_binder().bind(statement, 1, value)
        assert statement.bound == datetime.datetime(2023, 6, 15, 10, 0, 0, 123000)
        assert statement.bound.tzinfo is None

    def test_date_is_widened_to_midnight(self, statement):
        timestamp_binder().bind(statement, 1, datetime.date(2023, 6, 15))
        assert statement.calls == [('set_timestamp', 1, datetime.datetime(2023, 6, 15))]

    def test_numpy_datetime64(self, statement):
        timestamp_binder().bind(statement, 1, np.datetime64('2023-06-15T10:30:00'))
        assert statement.bound == datetime.datetime(2023, 6, 15, 10, 30)

    @pytest.mark.parametrize('text', [
        '2023-06-15T10:30:00',
        '2023-06-15',
        '2023-06-15 24:00:00',
        '2023-06-15 10:30',
        '2023-06-15 10:30:00.1234567890',
    ])
    def test_malformed(self, text, statement):
        with pytest.raises(MalformedLiteral, match='timestamp'):
            timestamp_binder().bind(statement, 1, text)
        assert statement.calls == []

    @pytest.mark.parametrize('value', [MILLIS, datetime.time(10, 30)])
    def test_other_values_are_generic(self, value, statement):
        timestamp_binder().bind(statement, 1, value)
        assert statement.calls == [('set_generic', 1, value)]


class TestTimeBinder:

    def test_time(self, statement):
        value = datetime.time(10, 30, 5)
        time_binder().bind(statement, 1, value)
        assert statement.calls == [('set_time', 1, value)]

    def test_string(self, statement):
        time_binder().bind(statement, 1, '10:30:05')
        assert statement.calls == [('set_time', 1, datetime.time(10, 30, 5))]

    def test_datetime_time_of_day(self, statement):
        time_binder().bind(statement, 1, datetime.datetime(2023, 6, 15, 10, 30, 5, 123456))
        assert statement.bound == datetime.time(10, 30, 5, 123000)

    def test_aware_datetime_uses_utc(self, statement):
        value = datetime.datetime(2023, 6, 15, 10, 30, tzinfo=tz.tzoffset(None, 2 * 3600))
        time_binder().bind(statement, 1, value)
        assert statement.bound == datetime.time(8, 30)

    def test_date_is_midnight(self, statement):
        time_binder().bind(statement, 1, datetime.date(2023, 6, 15))
        assert statement.bound == datetime.time(0, 0)

    @pytest.mark.parametrize('text', ['25:99:99', '24:00:00', '1:02:03', '10:30', '10:30:05.5'])
    def test_malformed(self, text, statement):
        with pytest.raises(MalformedLiteral):
            time_binder().bind(statement, 1, text)
        assert statement.calls == []

    @pytest.mark.parametrize('value', [3.5, 1030])
    def test_other_values_are_generic(self, value, statement):
        time_binder().bind(statement, 1, value)
        assert statement.calls == [('set_generic', 1, value)]


@pytest.mark.parametrize('binder', [date_binder(), timestamp_binder(), time_binder()],
                         ids=['date', 'timestamp', 'time'])
@pytest.mark.parametrize('value', [
    datetime.datetime.min.replace(tzinfo=tz.tzoffset(None, 3600)),
    datetime.datetime.max.replace(tzinfo=tz.tzoffset(None, -3600)),
], ids=['min', 'max'])
def test_aware_datetime_outside_utc_range(binder, value, statement):
    """No UTC datetime exists for the value, so nothing is bound"""
    with pytest.raises(BindFailed) as excinfo:
        binder.bind(statement, 3, value)
    assert excinfo.value.category == binder.category
    assert excinfo.value.position == 3
    assert isinstance(excinfo.value.__cause__, OverflowError)
    assert statement.calls == []


if __name__ == '__main__':
    __import__('pytest').main([__file__])

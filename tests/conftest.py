from datetime import date, datetime

import pytest


# 2024-01-01 is a Monday; 2024 is a leap year.
@pytest.fixture
def monday():
    return date(2024, 1, 1)


# Wednesday, used as the fixed "today" for natural-language parsing.
@pytest.fixture
def reference_date():
    return date(2024, 1, 10)


# Wednesday 08:00 local, before working hours start.
@pytest.fixture
def now():
    return datetime(2024, 1, 10, 8, 0)

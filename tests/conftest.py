import pytest

from tests.factories import FakeMailer, FakeSleeper


@pytest.fixture
def fake_mailer():
    return FakeMailer()


@pytest.fixture
def fake_sleep():
    return FakeSleeper()

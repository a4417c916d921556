import pytest


class FakeRater:
    """Stands in for the sentiment API: fixed ratings per text, counts calls."""

    def __init__(self, ratings=None, default=3):
        self.ratings = ratings or {}
        self.default = default
        self.calls = []

    def rate(self, text):
        self.calls.append(text)
        return self.ratings.get(text, self.default)


class FailingRater:
    def rate(self, text):
        raise AssertionError("scorer should not need the classifier")


@pytest.fixture
def fake_rater():
    return FakeRater()

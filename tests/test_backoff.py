"""Tests for the reconnect backoff policy."""

from remoteplay_inviter.backoff import Backoff


class TestBackoff:
    def test_initial_value(self):
        assert Backoff().current == 1

    def test_sequence_from_reset(self):
        backoff = Backoff()
        delays = [backoff.next() for _ in range(9)]
        assert delays == [2, 4, 8, 16, 32, 64, 120, 240, 480]

    def test_reset_restarts_sequence(self):
        backoff = Backoff()
        for _ in range(5):
            backoff.next()
        backoff.reset()
        assert backoff.current == 1
        assert backoff.next() == 2

    def test_custom_initial_and_cap(self):
        backoff = Backoff(initial=3, cap=5)
        assert [backoff.next() for _ in range(4)] == [6, 10, 20, 40]

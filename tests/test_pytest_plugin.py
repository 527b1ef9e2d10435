"""Tests for the pytest fixture and marker."""

import time

import pytest

import clockmock


FROZEN_EPOCH = 1620743400


class TestClockMockMarker:
    """Tests for @pytest.mark.clockmock_at."""

    @pytest.mark.clockmock_at("2021-05-11T14:30:00Z")
    def test_marker__freezes_clock_for_test_body(self):
        assert time.time() == FROZEN_EPOCH
        assert clockmock.get_frozen_instant().year == 2021

    @pytest.mark.clockmock_at(FROZEN_EPOCH + 3600)
    def test_marker__accepts_epoch_seconds(self):
        assert time.time() == FROZEN_EPOCH + 3600

    def test_marker__absent__clock_not_frozen(self):
        assert clockmock.get_frozen_instant() is None


class TestClockMockFixture:
    """Tests for the clock_mock fixture."""

    def test_fixture__yields_default_engine(self, clock_mock):
        assert clock_mock is clockmock.get_default_engine()
        assert clock_mock.is_active is False

    def test_fixture__freeze_inside_test(self, clock_mock):
        clock_mock.freeze("2021-05-11T14:30:00Z")
        assert int(time.time()) == FROZEN_EPOCH


class TestPluginInSession:
    """Run small test sessions to check teardown and marker validation."""

    def test_fixture__resets_after_failing_test(self, pytester):
        pytester.makepyfile(
            """
            import time

            import clockmock

            def test_fails(clock_mock):
                clock_mock.freeze("2021-05-11T14:30:00Z")
                assert False

            def test_after():
                assert clockmock.get_frozen_instant() is None
                assert time.time() > 1620743400
            """
        )

        result = pytester.runpytest()

        result.assert_outcomes(passed=1, failed=1)

    def test_marker__without_argument__reports_usage(self, pytester):
        pytester.makepyfile(
            """
            import pytest

            @pytest.mark.clockmock_at
            def test_missing_instant():
                pass
            """
        )

        result = pytester.runpytest()

        result.assert_outcomes(errors=1)
        result.stdout.fnmatch_lines(["*clockmock_at expects exactly one instant argument*"])

    def test_marker__registered_with_strict_markers(self, pytester):
        pytester.makepyfile(
            """
            import time
            import pytest

            @pytest.mark.clockmock_at("2021-05-11T14:30:00Z")
            def test_frozen():
                assert time.time() == 1620743400
            """
        )

        result = pytester.runpytest("--strict-markers")

        result.assert_outcomes(passed=1)

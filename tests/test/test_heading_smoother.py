"""
HeadingSmoother 테스트
"""

import math
import pytest

from app.algorithms.heading_smoother import (
    HeadingSmoother,
    _normalize_delta,
    select_raw_heading,
)


def _angular_gap(a, b):
    return abs(_normalize_delta(a - b))


class TestNormalizeDelta:
    @pytest.mark.parametrize(
        "delta, expected",
        [
            (0, 0),
            (180, 180),
            (-180, 180),
            (181, -179),
            (-181, 179),
            (358, -2),
            (-358, 2),
            (720, 0),
        ],
    )
    def test_range(self, delta, expected):
        assert _normalize_delta(delta) == pytest.approx(expected)


class TestSelectRawHeading:
    def test_true_heading_preferred(self):
        assert select_raw_heading(90.0, 80.0) == 90.0

    def test_zero_true_heading_falls_back(self):
        """trueHeading 0 => 보정 불가로 보고 magHeading 사용"""
        assert select_raw_heading(0.0, 80.0) == 80.0

    def test_missing_true_heading_falls_back(self):
        assert select_raw_heading(None, 45.0) == 45.0

    def test_both_missing(self):
        assert select_raw_heading(None, None) is None


class TestHeadingSmoother:
    """HeadingSmoother 테스트 클래스"""

    @pytest.fixture
    def smoother(self):
        return HeadingSmoother(smoothing_factor=0.2, max_delta=5)

    def test_initial_heading_is_zero(self, smoother):
        assert smoother.smoothed_heading == 0.0

    def test_small_change_follows_ema(self, smoother):
        """0 → 10 : EMA 2° (클램핑 미적용)"""
        result = smoother.update(10)

        assert result == pytest.approx(2.0)

    def test_large_change_clamped(self, smoother):
        """0 → 90 : EMA 18° => 5°로 제한"""
        result = smoother.update(90)

        assert result == pytest.approx(5.0)

    def test_negative_direction_clamped(self, smoother):
        """0 → 270 : 짧은 호는 -90° => -5° => 355°"""
        result = smoother.update(270)

        assert result == pytest.approx(355.0)

    def test_wraparound_takes_short_arc(self, smoother):
        """359°에서 raw 2° => +3°쪽으로 회전 (357° 역회전 아님)"""
        smoother.smoothed_heading = 359.0

        result = smoother.update(2)

        # 359 + 0.2 * 3 = 359.6
        assert result == pytest.approx(359.6)
        assert _angular_gap(result, 359.0) < 1

    def test_wraparound_crosses_zero(self, smoother):
        smoother.smoothed_heading = 358.0

        results = [smoother.update(10) for _ in range(5)]

        assert results[0] == pytest.approx(0.4)
        assert all(0 <= r < 360 for r in results)

    def test_output_always_in_range(self, smoother):
        for raw in [0, 359.9, 180, 720, -90, 45.5, 359, 1]:
            result = smoother.update(raw)
            assert 0 <= result < 360

    def test_step_never_exceeds_max_delta(self, smoother):
        previous = smoother.smoothed_heading
        for raw in [180, 10, 350, 90, 270, 0, 179, 181]:
            result = smoother.update(raw)
            assert _angular_gap(result, previous) <= 5 + 1e-9
            previous = result

    def test_converges_to_constant_input(self, smoother):
        """
        일정한 입력 => 클램핑 구간은 5°씩, 이후 EMA로 수렴
        ceil(90/5) 단계 뒤 EMA 꼬리는 0.8배씩 줄어듦
        """
        target = 90.0
        steps = math.ceil(90 / 5) + 12

        for _ in range(steps):
            smoother.update(target)

        assert _angular_gap(smoother.smoothed_heading, target) < 1.0

    def test_same_heading_is_stable(self, smoother):
        smoother.smoothed_heading = 123.0

        assert smoother.update(123.0) == pytest.approx(123.0)

    def test_reset(self, smoother):
        smoother.update(90)
        smoother.reset()

        assert smoother.smoothed_heading == 0.0

    def test_defaults_from_settings(self):
        smoother = HeadingSmoother()

        assert smoother.smoothing_factor == pytest.approx(0.2)
        assert smoother.max_delta == pytest.approx(5)

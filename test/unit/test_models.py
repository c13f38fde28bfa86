import math
import pickle

import numpy as np
import pytest

from shared.models import BurstEvent, BurstReport, InvalidInput, PowerSurface


def make_event(t_idx, f_idx=3, **kwargs) -> BurstEvent:
    defaults = dict(
        freq_index=f_idx,
        time_index=t_idx,
        time_sec=t_idx / 100.0,
        freq_hz=float(f_idx + 10),
        power=2.0,
    )
    defaults.update(kwargs)
    return BurstEvent(**defaults)


def make_report(events, bands=()) -> BurstReport:
    return BurstReport(
        thresholds=np.arange(5, dtype=np.float64),
        f0s=np.arange(10.0, 15.0),
        sample_rate=100.0,
        n_times=1000,
        events=tuple(events),
        bands=bands,
    )


class TestPowerSurface:

    def test_power_is_copied_and_readonly(self):
        power = np.ones((3, 20))
        surface = PowerSurface(power=power, f0s=[1.0, 2.0, 3.0], sample_rate=10)

        assert surface.n_freqs == 3
        assert surface.n_times == 20
        assert surface.duration == pytest.approx(2.0)
        assert not surface.power.flags.writeable
        power[0, 0] = 99.0
        assert surface.power[0, 0] == 1.0
        with pytest.raises(ValueError):
            surface.power[0, 0] = 0.0

    def test_row_count_must_match_f0s(self):
        with pytest.raises(InvalidInput, match="frequency rows"):
            PowerSurface(power=np.ones((3, 20)), f0s=[1.0, 2.0], sample_rate=10)

    @pytest.mark.parametrize("f0s", [[1.0, 3.0, 2.0], [1.0, 1.0, 2.0], [3.0, 2.0, 1.0]])
    def test_f0s_must_be_strictly_ascending(self, f0s):
        with pytest.raises(InvalidInput, match="ascending"):
            PowerSurface(power=np.ones((3, 20)), f0s=f0s, sample_rate=10)

    def test_empty_surface_rejected(self):
        with pytest.raises(InvalidInput):
            PowerSurface(power=np.ones((0, 20)), f0s=[], sample_rate=10)

    @pytest.mark.parametrize("sample_rate", [0.0, -1.0, float("nan")])
    def test_sample_rate_must_be_positive(self, sample_rate):
        with pytest.raises(InvalidInput):
            PowerSurface(power=np.ones((1, 20)), f0s=[1.0], sample_rate=sample_rate)

    def test_pickle_roundtrip(self):
        surface = PowerSurface(power=np.arange(6.0).reshape(2, 3), f0s=[1.0, 2.0], sample_rate=3)
        restored = pickle.loads(pickle.dumps(surface))
        assert np.array_equal(restored.power, surface.power)
        assert not restored.power.flags.writeable


class TestBurstEvent:

    def test_undefined_bounds_propagate(self):
        event = make_event(150, start_sec=1.4, lower_freq_hz=12.0)
        assert event.duration_ms is None
        assert event.spectral_width_hz is None

    def test_derived_fields(self):
        event = make_event(150, start_sec=1.25, end_sec=1.75, lower_freq_hz=12.0, upper_freq_hz=20.5)
        assert event.duration_ms == pytest.approx(500.0)
        assert event.spectral_width_hz == pytest.approx(8.5)

    def test_is_frozen(self):
        event = make_event(150)
        with pytest.raises(AttributeError):
            event.start_sec = 1.0

    def test_negative_indices_rejected(self):
        with pytest.raises(InvalidInput):
            make_event(-1)

    def test_to_dict_uses_output_names(self):
        record = make_event(150, band_powers=[1.0, None]).to_dict()
        assert record["tp"] == 150
        assert record["secs"] == pytest.approx(1.5)
        assert record["dur"] is None
        assert record["bands_power"] == [1.0, None]


class TestBurstReport:

    def test_events_sorted_by_time(self):
        report = make_report([make_event(300), make_event(120), make_event(200)])
        assert [ev.time_index for ev in report] == [120, 200, 300]
        assert len(report) == 3

    def test_columns_are_aligned_with_nan_for_undefined(self):
        events = [
            make_event(120, start_sec=1.1, end_sec=1.3),
            make_event(300, end_sec=3.2),
        ]
        cols = make_report(events).columns()
        assert cols["tp"].tolist() == [120, 300]
        assert cols["dur"][0] == pytest.approx(200.0)
        assert math.isnan(cols["dur"][1])
        assert math.isnan(cols["start"][1])
        assert all(len(col) == 2 for col in cols.values())

    def test_empty_report(self):
        report = BurstReport.empty(np.zeros(3), np.array([1.0, 2.0, 3.0]), 100.0, 500)
        assert len(report) == 0
        assert report.columns()["tp"].size == 0
        assert report.band_power_matrix().shape == (0, 0)
        assert report.summary()["n_bursts"] == 0
        assert report.summary()["median_duration_ms"] is None

    def test_band_power_matrix_bands_by_events(self):
        events = [make_event(120, band_powers=(1.0, None)), make_event(300, band_powers=(3.0, 4.0))]
        matrix = make_report(events, bands=((8, 12), (50, 60))).band_power_matrix()
        assert matrix.shape == (2, 2)
        assert matrix[0].tolist() == [1.0, 3.0]
        assert math.isnan(matrix[1, 0])
        assert matrix[1, 1] == 4.0

    def test_band_count_mismatch_rejected(self):
        with pytest.raises(InvalidInput):
            make_report([make_event(120, band_powers=(1.0,))], bands=((8, 12), (13, 30)))

    @pytest.mark.parametrize("sample_rate", [0.0, float("nan"), float("inf")])
    def test_sample_rate_must_be_finite_and_positive(self, sample_rate):
        with pytest.raises(InvalidInput):
            BurstReport.empty(np.zeros(2), np.array([1.0, 2.0]), sample_rate, 10)

    def test_threshold_length_must_match_f0s(self):
        with pytest.raises(InvalidInput):
            BurstReport(thresholds=np.zeros(2), f0s=np.zeros(3) + [1, 2, 3], sample_rate=100.0, n_times=10)

    def test_assembly_is_idempotent(self):
        events = [make_event(300, start_sec=2.9, end_sec=3.1), make_event(120, band_powers=())]
        first = make_report(events)
        second = make_report(events)
        assert first.to_dict() == second.to_dict()
        assert first.events == second.events
        for name, col in first.columns().items():
            np.testing.assert_array_equal(col, second.columns()[name])

    def test_summary(self):
        events = [
            make_event(120, start_sec=1.1, end_sec=1.3, lower_freq_hz=10.0, upper_freq_hz=14.0),
            make_event(300, start_sec=2.9, end_sec=3.3),
            make_event(500),
        ]
        summary = make_report(events).summary()
        assert summary["n_bursts"] == 3
        assert summary["rate_per_sec"] == pytest.approx(0.3)
        assert summary["median_duration_ms"] == pytest.approx(300.0)
        assert summary["median_spectral_width_hz"] == pytest.approx(4.0)

    def test_pickle_roundtrip(self):
        report = make_report([make_event(120, band_powers=(1.0,))], bands=((8, 12),))
        restored = pickle.loads(pickle.dumps(report))
        assert restored.to_dict() == report.to_dict()

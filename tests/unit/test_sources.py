"""Unit tests for accelerometer sample sources."""

import threading

import pytest

from cyclist_alert.detectors import AccelerationSample
from cyclist_alert.sensors import CsvSampleSource, QueueSampleSource


class TestCsvSampleSource:
    def test_reads_rows_with_header(self, tmp_path):
        path = tmp_path / "trace.csv"
        path.write_text("timestamp_ms,x,y,z\n0,0.1,0.2,9.8\n20,0.0,0.0,40.0\n")

        source = CsvSampleSource(path)
        samples = list(source)

        assert len(source) == 2
        assert samples == [
            AccelerationSample(0, 0.1, 0.2, 9.8),
            AccelerationSample(20, 0.0, 0.0, 40.0),
        ]

    def test_reads_rows_without_header(self, tmp_path):
        path = tmp_path / "trace.csv"
        path.write_text("100,1,2,3\n")

        samples = list(CsvSampleSource(path))

        assert samples == [AccelerationSample(100, 1.0, 2.0, 3.0)]
        assert isinstance(samples[0].timestamp_ms, int)

    def test_wrong_column_count(self, tmp_path):
        path = tmp_path / "trace.csv"
        path.write_text("0,1,2\n20,1,2\n")

        with pytest.raises(ValueError, match="expected 4 columns"):
            CsvSampleSource(path)

    def test_skips_rows_with_non_finite_timestamp(self, tmp_path):
        path = tmp_path / "trace.csv"
        path.write_text("inf,0,0,9.81\n-inf,0,0,9.81\n,0,0,9.81\n40,0,0,9.81\n")

        samples = list(CsvSampleSource(path))

        assert [s.timestamp_ms for s in samples] == [40]

    def test_close_stops_replay(self, tmp_path):
        path = tmp_path / "trace.csv"
        path.write_text("".join(f"{i * 20},0,0,9.81\n" for i in range(10)))
        source = CsvSampleSource(path)

        seen = []
        for sample in source:
            seen.append(sample)
            if len(seen) == 3:
                source.close()

        assert len(seen) == 3


class TestQueueSampleSource:
    def test_iterates_until_closed_and_drained(self):
        source = QueueSampleSource(poll_interval=0.01)
        source.push_values(0, 0.0, 0.0, 9.81)
        source.push_values(20, 1.0, 0.0, 9.81)
        source.close()

        samples = list(source)

        assert [s.timestamp_ms for s in samples] == [0, 20]
        assert source.closed

    def test_push_after_close_rejected(self):
        source = QueueSampleSource()
        source.close()

        assert source.push_values(0, 0, 0, 0) is False

    def test_non_finite_timestamp_rejected(self):
        source = QueueSampleSource()

        assert source.push_values(float("inf"), 0, 0, 9.81) is False
        assert source.push_values(float("nan"), 0, 0, 9.81) is False
        assert source.push_values(20, 0, 0, 9.81) is True

    def test_full_queue_drops(self):
        source = QueueSampleSource(maxsize=1)

        assert source.push_values(0, 0, 0, 0) is True
        assert source.push_values(20, 0, 0, 0) is False
        assert source.dropped == 1

    def test_producer_thread(self):
        source = QueueSampleSource(poll_interval=0.01)

        def produce():
            for i in range(100):
                source.push_values(i * 20, 0.0, 0.0, 9.81)
            source.close()

        producer = threading.Thread(target=produce)
        producer.start()
        samples = list(source)
        producer.join()

        assert [s.timestamp_ms for s in samples] == [i * 20 for i in range(100)]

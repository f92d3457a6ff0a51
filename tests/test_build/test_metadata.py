"""Tests for build metadata extraction."""

import pytest

from build_reporter.build.metadata import (
    BuildMetadata,
    BuildRun,
    ProcessEnvironment,
    extract,
)
from build_reporter.transport.errors import EnvironmentUnavailable, InvalidBuildRecord


class BrokenEnvironment:
    """Environment whose reads always fail."""

    def get(self, key):
        raise OSError("environment file unreadable")


class TestExtract:
    """Test suite for extract()."""

    def test_converts_times_to_seconds(self, successful_build, environment):
        """Test ms to s conversion for start, duration and end time."""
        metadata = extract(successful_build, environment)

        assert metadata.start_time_seconds == 1000
        assert metadata.duration_seconds == 2.5
        assert metadata.end_time_seconds == 1002

    @pytest.mark.parametrize("start_ms,duration_ms,expected_end", [
        (1000000, 0, 1000),
        (1000999, 999, 1000),
        (1000999, 1000, 1001),
        (1500000000123, 61999, 1500000061),
    ])
    def test_end_time_adds_whole_seconds_of_duration(self, start_ms, duration_ms, expected_end):
        """Test end time is start (truncated) plus floor(duration)."""
        build = BuildRun(start_ms, duration_ms, "SUCCESS", 1, "job")

        metadata = extract(build, {})

        assert metadata.end_time_seconds == expected_end
        assert metadata.end_time_seconds >= metadata.start_time_seconds

    def test_reads_build_fields(self, successful_build, environment):
        """Test result, number, job name, hostname and node are copied."""
        metadata = extract(successful_build, environment)

        assert metadata.result == "SUCCESS"
        assert metadata.build_number == 42
        assert metadata.job_name == "build-x"
        assert metadata.hostname == "h1"
        assert metadata.node == "agent-1"

    def test_missing_hostname_is_none(self, successful_build):
        """Test absent HOSTNAME stays absent rather than empty."""
        metadata = extract(successful_build, {})

        assert metadata.hostname is None
        assert metadata.node is None

    def test_git_branch_preferred(self, successful_build):
        """Test GIT_BRANCH wins over CVS_BRANCH."""
        metadata = extract(successful_build, {"GIT_BRANCH": "main", "CVS_BRANCH": "trunk"})

        assert metadata.branch == "main"

    def test_cvs_branch_fallback(self, successful_build):
        """Test CVS_BRANCH is used when GIT_BRANCH is absent."""
        metadata = extract(successful_build, {"CVS_BRANCH": "trunk"})

        assert metadata.branch == "trunk"

    def test_no_branch(self, successful_build, environment):
        """Test branch is absent when neither variable is set."""
        metadata = extract(successful_build, environment)

        assert metadata.branch is None
        assert "branch" not in metadata.summary()

    def test_missing_result_reported_as_unknown(self):
        """Test a build without result is reported as UNKNOWN."""
        build = BuildRun(1000000, 2500, None, 7, "job")

        metadata = extract(build, {})

        assert metadata.result == "UNKNOWN"

    def test_environment_unavailable(self, successful_build):
        """Test missing environment aborts extraction."""
        with pytest.raises(EnvironmentUnavailable):
            extract(successful_build, None)

    def test_environment_read_failure_propagates(self, successful_build):
        """Test environment read errors are raised, not swallowed."""
        with pytest.raises(EnvironmentUnavailable) as exc_info:
            extract(successful_build, BrokenEnvironment())

        assert isinstance(exc_info.value.__cause__, OSError)

    def test_negative_duration_is_invalid_record(self, environment):
        """Test a negative duration is reported as an invalid build record."""
        build = BuildRun(1000000, -1500, "SUCCESS", 42, "build-x")

        with pytest.raises(InvalidBuildRecord) as exc_info:
            extract(build, environment)

        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_non_numeric_build_number_is_invalid_record(self, environment):
        """Test an unparseable build number is reported as an invalid build record."""
        build = BuildRun(1000000, 1500, "SUCCESS", "forty-two", "build-x")

        with pytest.raises(InvalidBuildRecord):
            extract(build, environment)

    def test_process_environment(self, successful_build, monkeypatch):
        """Test os.environ backed environment."""
        monkeypatch.setenv("HOSTNAME", "ci-host")
        monkeypatch.delenv("GIT_BRANCH", raising=False)
        monkeypatch.setenv("CVS_BRANCH", "release")

        metadata = extract(successful_build, ProcessEnvironment())

        assert metadata.hostname == "ci-host"
        assert metadata.branch == "release"


class TestBuildMetadata:
    """Test suite for BuildMetadata."""

    def test_end_before_start_rejected(self):
        """Test end time invariant."""
        with pytest.raises(ValueError):
            BuildMetadata(
                start_time_seconds=100,
                duration_seconds=-5.0,
                end_time_seconds=95,
                result="SUCCESS",
                build_number=1,
                job_name="job"
            )

    def test_immutable(self, successful_build, environment):
        """Test metadata cannot be modified after construction."""
        metadata = extract(successful_build, environment)

        with pytest.raises(AttributeError):
            metadata.result = "FAILURE"

    def test_summary(self, successful_build):
        """Test build result summary record."""
        metadata = extract(successful_build, {"HOSTNAME": "h1", "GIT_BRANCH": "main"})

        assert metadata.summary() == {
            "host": "h1",
            "job_name": "build-x",
            "event_type": "build result",
            "timestamp": 1002,
            "result": "SUCCESS",
            "number": 42,
            "duration": 2.5,
            "node": None,
            "branch": "main",
        }

"""Unit tests for the recorder status probe."""

import os
import subprocess
import sys
import pytest
from unittest.mock import patch

from biliverec_hooks.status.probe import (
    LogFileNotFoundError,
    ProcessIdNotFoundError,
    StatusProbe,
    StatusProbeError,
    extract_process_id,
    find_latest_log,
    is_process_alive,
    read_last_line,
)


def exited_pid() -> int:
    """Pid of a child that has already been reaped."""
    child = subprocess.Popen([sys.executable, "-c", "pass"])
    child.wait()
    return child.pid


@pytest.mark.unit
class TestFindLatestLog:

    def test_picks_greatest_matching_name(self):
        names = {"bilirec20230101.txt", "bilirec20230215.txt", "other.txt"}

        assert find_latest_log(names) == "bilirec20230215.txt"

    def test_ignores_wrong_suffix_and_prefix(self):
        names = ["bilirec20990101.log", "xbilirec20990101.txt", "bilirec20230101.txt"]

        assert find_latest_log(names) == "bilirec20230101.txt"

    def test_baseline_name_is_not_a_fallback(self):
        with pytest.raises(LogFileNotFoundError):
            find_latest_log(["other.txt", "notes.md"])

    def test_empty_listing(self):
        with pytest.raises(LogFileNotFoundError):
            find_latest_log([])

    def test_real_file_older_than_baseline_is_still_found(self):
        assert find_latest_log(["bilirec19000101.txt"]) == "bilirec19000101.txt"


@pytest.mark.unit
class TestReadLastLine:

    def test_returns_last_line(self, recorder_log_dir):
        path = recorder_log_dir("bilirec20230215.txt", 'first\nsecond\n{"ProcessId": 1, "x": 2}\n')

        assert read_last_line(path) == '{"ProcessId": 1, "x": 2}'

    def test_skips_trailing_blank_lines(self, recorder_log_dir):
        path = recorder_log_dir("bilirec20230215.txt", "first\nlast\n\n  \n")

        assert read_last_line(path) == "last"

    def test_empty_file(self, recorder_log_dir):
        path = recorder_log_dir("bilirec20230215.txt", "")

        assert read_last_line(path) == ""

    def test_keeps_trailing_spaces_of_record(self, recorder_log_dir):
        path = recorder_log_dir("bilirec20230215.txt", 'first\r\n{"ProcessId": 1, "x": 2}  \t\r\n')

        assert read_last_line(path) == '{"ProcessId": 1, "x": 2}  \t'

    def test_partial_last_line_without_newline(self, recorder_log_dir):
        path = recorder_log_dir("bilirec20230215.txt", '{"ProcessId": 1, "a": 1}\n{"Proce')

        assert read_last_line(path) == '{"Proce'


@pytest.mark.unit
class TestExtractProcessId:

    def test_extracts_pid(self):
        assert extract_process_id('{"ProcessId": 4242, "foo":"bar"}') == 4242

    def test_extracts_pid_without_space(self):
        line = '{"@t":"2023-02-15T12:00:00Z","ProcessId":17,"SourceContext":"Recorder"}'

        assert extract_process_id(line) == 17

    @pytest.mark.parametrize("line", [
        "",
        "plain text log line",
        '{"ProcessId": "abc", "foo": 1}',
        '{"foo": "bar"}',
        '{"ProcessId": 4242}',
        '{"Proce',
    ])
    def test_non_matching_line_raises(self, line):
        with pytest.raises(ProcessIdNotFoundError):
            extract_process_id(line)

    def test_out_of_range_pid_raises(self):
        with pytest.raises(ProcessIdNotFoundError):
            extract_process_id('{"ProcessId": 99999999999, "a": 1}')

    def test_largest_pid_is_accepted(self):
        assert extract_process_id('{"ProcessId": 2147483647, "a": 1}') == 2147483647


@pytest.mark.unit
class TestIsProcessAlive:

    def test_own_process_is_alive(self):
        assert is_process_alive(os.getpid()) is True

    def test_exited_process_is_not_alive(self):
        assert is_process_alive(exited_pid()) is False

    def test_non_positive_pid_is_not_alive(self):
        assert is_process_alive(0) is False

    def test_permission_error_means_not_running(self):
        with patch("biliverec_hooks.status.probe.os.kill", side_effect=PermissionError):
            assert is_process_alive(1234) is False

    def test_overflow_is_a_probe_error(self):
        with pytest.raises(StatusProbeError):
            is_process_alive(99999999999)

    def test_other_os_error_is_a_probe_error(self):
        with patch("biliverec_hooks.status.probe.os.kill", side_effect=OSError(22, "Invalid argument")):
            with pytest.raises(StatusProbeError):
                is_process_alive(1234)


@pytest.mark.unit
class TestStatusProbe:

    def test_running_recorder(self, recorder_log_dir):
        recorder_log_dir("bilirec20230101.txt", '{"ProcessId": 1, "Message": "old"}\n')
        line = f'{{"ProcessId": {os.getpid()}, "Message": "Recording"}}'
        recorder_log_dir("bilirec20230215.txt", f"{{\"ProcessId\": 1, \"m\": 0}}\n{line}\n")

        report = StatusProbe(str(recorder_log_dir.path)).probe()

        assert report.running is True
        assert report.last_log == line

    def test_stopped_recorder(self, recorder_log_dir):
        line = f'{{"ProcessId": {exited_pid()}, "Message": "Recording"}}'
        recorder_log_dir("bilirec20230215.txt", line + "\n")

        report = StatusProbe(str(recorder_log_dir.path)).probe()

        assert report.running is False
        assert report.to_dict() == {"running": False, "last_log": line}

    def test_missing_directory(self, temp_data_dir):
        probe = StatusProbe(os.path.join(temp_data_dir, "missing"))

        with pytest.raises(StatusProbeError):
            probe.probe()

    def test_no_matching_file(self, recorder_log_dir):
        recorder_log_dir("other.txt", '{"ProcessId": 1, "a": 1}\n')

        with pytest.raises(LogFileNotFoundError):
            StatusProbe(str(recorder_log_dir.path)).probe()

    def test_empty_latest_file(self, recorder_log_dir):
        recorder_log_dir("bilirec20230101.txt", '{"ProcessId": 1, "a": 1}\n')
        recorder_log_dir("bilirec20230215.txt", "")

        with pytest.raises(ProcessIdNotFoundError):
            StatusProbe(str(recorder_log_dir.path)).probe()

    def test_zero_process_id_is_not_running(self, recorder_log_dir):
        line = '{"ProcessId": 0, "Message": "Recording"}'
        recorder_log_dir("bilirec20230215.txt", line + "\n")

        report = StatusProbe(str(recorder_log_dir.path)).probe()

        assert report.running is False
        assert report.last_log == line

    def test_out_of_range_process_id(self, recorder_log_dir):
        recorder_log_dir("bilirec20230215.txt", '{"ProcessId": 99999999999, "a": 1}\n')

        with pytest.raises(ProcessIdNotFoundError):
            StatusProbe(str(recorder_log_dir.path)).probe()

    def test_custom_name_pattern(self, recorder_log_dir):
        line = f'{{"ProcessId": {os.getpid()}, "a": 1}}'
        recorder_log_dir("rec-2023-02-15.log", line + "\n")

        report = StatusProbe(str(recorder_log_dir.path), prefix="rec-", suffix=".log").probe()

        assert report.running is True

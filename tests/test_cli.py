"""
CLI tests for chkoverlap.py: options, output and exit status.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import pytest
import chkoverlap
from chkoverlap import main, build_parser, resolve_options, FAULT_EXIT
from tape_fixtures import leader, field, origin, word, tape


CLEAN = tape(leader(10), field(0), origin(0o200), word(0o7200), word(0o1234), leader(10))
OVERLAPPED = tape(leader(10), origin(0o200), word(1), word(2), origin(0o201), word(3),
                  origin(0o400), word(4), origin(0o400), word(5), leader(10))


@pytest.fixture
def write_tape(tmp_path):
    def _write(data: bytes, name: str = "prog.rim") -> str:
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)
    return _write


class TestOptions:
    def _opts(self, *argv):
        return resolve_options(build_parser().parse_args(list(argv)))

    def test_rim_is_default(self):
        assert not self._opts("focal.bin").checksummed
        assert not self._opts("loader.rim").checksummed
        assert not self._opts("-r", "focal.bin").checksummed

    def test_bin_flag(self):
        assert self._opts("-b", "loader.rim").checksummed
        assert self._opts("--bin", "image").checksummed

    def test_map_flags(self):
        assert self._opts("x.rim").map_mode == "none"
        assert self._opts("-c", "x.rim").map_mode == "compressed"
        assert self._opts("-f", "x.rim").map_mode == "full"
        assert self._opts("--map", "full", "x.rim").map_mode == "full"

    def test_bin_and_rim_conflict(self):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["-b", "-r", "x.bin"])
        assert exc.value.code == FAULT_EXIT

    def test_missing_tape_argument(self):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args([])
        assert exc.value.code == FAULT_EXIT

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["-V"])
        assert exc.value.code == 0
        assert "chkoverlap version 1.00" in capsys.readouterr().out


class TestRun:
    def test_clean_tape(self, write_tape, capsys):
        assert main([write_tape(CLEAN)]) == 0
        assert capsys.readouterr().out == ""

    def test_overlaps_reported(self, write_tape, capsys):
        assert main([write_tape(OVERLAPPED)]) == 2
        assert capsys.readouterr().out.splitlines() == [
            "Overlap in area 0201 to 0201",
            "Overlap in area 0400 to 0400",
        ]

    def test_silent_keeps_exit_status(self, write_tape, capsys):
        assert main(["-s", write_tape(OVERLAPPED)]) == 2
        assert capsys.readouterr().out == ""

    def test_bin_checksum_not_counted(self, write_tape):
        data = tape(leader(10), origin(0o200), word(1), word(2), origin(0o201), word(0o7777))
        assert main([write_tape(data, "prog.bin")]) == 1
        assert main(["-b", write_tape(data, "prog.bin")]) == 0

    def test_bin_with_origin_after_last_word(self, write_tape, capsys):
        data = tape(leader(10), origin(0o200), word(1), word(2), origin(0), leader(10))
        assert main(["-b", "-f", write_tape(data, "prog.bin")]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[1] == "02 X" + "." * 127

    def test_verbose_trace(self, write_tape, capsys):
        assert main(["-v", write_tape(CLEAN)]) == 0
        assert capsys.readouterr().out.splitlines() == [
            "Leader * 10",
            "Field 0",
            "* 0200 : 7200",
            "  0201 : 1234",
            "Leader * 10",
        ]

    def test_map_after_overlaps(self, write_tape, capsys):
        assert main(["-f", write_tape(OVERLAPPED)]) == 2
        lines = capsys.readouterr().out.splitlines()
        assert lines[2] == ""
        assert len(lines) == 3 + 32
        assert lines[3 + 1].startswith("02 XO.")
        assert lines[3 + 2].startswith("04 O.")

    def test_silent_map_has_no_separator(self, write_tape, capsys):
        assert main(["-s", "-c", write_tape(OVERLAPPED)]) == 2
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 16
        assert lines[0].startswith("0000 ")

    def test_exit_status_capped(self, write_tape):
        parts = []
        for a in range(0, 600, 2):
            parts += [origin(a), word(0), origin(a), word(0)]
        assert main(["-r", write_tape(tape(*parts))]) == chkoverlap.MAX_OVERLAP_EXIT


class TestFaults:
    def test_truncated_tape(self, write_tape, capsys):
        data = tape(leader(4), origin(0), word(1), origin(0), word(1), b'\x41')
        assert main([write_tape(data)]) == FAULT_EXIT
        captured = capsys.readouterr()
        assert "Overlap" not in captured.out
        assert "Truncated" in captured.err

    def test_address_overflow(self, write_tape, capsys):
        data = tape(origin(0o7777), word(1), word(2))
        assert main([write_tape(data)]) == FAULT_EXIT
        assert capsys.readouterr().out == ""

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.bin")]) == FAULT_EXIT
        assert "Cannot open" in capsys.readouterr().err

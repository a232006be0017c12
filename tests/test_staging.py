import numpy as np
import pytest

from cooc.downsample import Occurrences
from cooc.errors import StagingError
from cooc.staging import read_header, read_rows, scratch_file, write_occurrences


def _occurrences():
    occ = Occurrences(3, 4)
    for r, c in [(0, 2), (0, 0), (2, 3), (2, 1), (2, 0)]:
        occ.add(r, c)
    return occ


class TestStaging:
    def test_layout_is_big_endian_int32(self, tmp_path):
        path = tmp_path / "raw.dat"
        size = write_occurrences(_occurrences(), path)
        data = np.frombuffer(path.read_bytes(), dtype=">i4").tolist()
        assert data == [3, 4, 2, 0, 2, 0, 3, 0, 1, 3]
        assert size == 4 * len(data)
        assert path.read_bytes()[:8] == b"\x00\x00\x00\x03\x00\x00\x00\x04"

    def test_rows_stream_back_in_order(self, tmp_path):
        path = tmp_path / "raw.dat"
        write_occurrences(_occurrences(), path)
        assert read_header(path) == (3, 4)
        assert list(read_rows(path)) == [(0, [0, 2]), (1, []), (2, [0, 1, 3])]

    def test_truncated_file(self, tmp_path):
        path = tmp_path / "raw.dat"
        write_occurrences(_occurrences(), path)
        path.write_bytes(path.read_bytes()[:-2])
        with pytest.raises(StagingError) as ei:
            list(read_rows(path))
        assert ei.value.phase == "read"
        assert ei.value.path == path

    def test_missing_file(self, tmp_path):
        with pytest.raises(StagingError) as ei:
            read_header(tmp_path / "absent.dat")
        assert ei.value.phase == "read"

    def test_write_failure_names_path(self, tmp_path):
        target = tmp_path / "no" / "such" / "dir" / "raw.dat"
        with pytest.raises(StagingError) as ei:
            write_occurrences(_occurrences(), target)
        assert ei.value.phase == "write"
        assert ei.value.path == target

    def test_scratch_file_removed_on_error(self, tmp_path):
        seen = []
        with pytest.raises(ValueError):
            with scratch_file(tmp_path) as path:
                seen.append(path)
                assert path.exists()
                raise ValueError("downstream failure")
        assert not seen[0].exists()
        assert seen[0].name.startswith("raw") and seen[0].suffix == ".dat"

    def test_scratch_dir_missing(self, tmp_path):
        with pytest.raises(StagingError) as ei:
            with scratch_file(tmp_path / "missing"):
                pass
        assert ei.value.phase == "create"

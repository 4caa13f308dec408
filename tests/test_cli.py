import numpy as np
import pytest

from sonar_drawer.cli import main
from sonar_drawer.data_loading import save_polar_npz


@pytest.fixture
def archive_path(tmp_path):
    frames = np.random.default_rng(1).integers(0, 255, size=(3, 40, 16), dtype=np.uint8)
    path = tmp_path / "scan.npz"
    save_polar_npz(path, frames, metadata={"range_min": 0.0, "range_max": 10.0, "fov_deg": 60.0})
    return path


def test_renders_png_frames(tmp_path, archive_path):
    out = tmp_path / "frames"
    assert main([str(archive_path), "--out", str(out), "--overlay", "--profile"]) == 0
    written = sorted(p.name for p in out.glob("*.png"))
    assert written == ["frame_000000.png", "frame_000001.png", "frame_000002.png"]


def test_frame_selection(tmp_path, archive_path):
    out = tmp_path / "frames"
    main([str(archive_path), "--out", str(out), "--start", "1", "--count", "1", "--colormap", "gray"])
    assert [p.name for p in out.glob("*.png")] == ["frame_000001.png"]


def test_missing_input_is_an_error(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / "missing.npz"), "--out", str(tmp_path)])
    assert exc.value.code == 2


def test_requires_an_output(archive_path):
    with pytest.raises(SystemExit):
        main([str(archive_path)])


def test_unknown_colormap(tmp_path, archive_path):
    with pytest.raises(SystemExit):
        main([str(archive_path), "--out", str(tmp_path), "--colormap", "nope"])

import numpy as np
import pytest

from boids import Flock
from tools.record import (
    build_settings, record, load_metadata, load_frame, get_completed_frames,
    compress_frame, decompress_frame, frame_path, list_recordings, show_status,
    FORMAT_KEYFRAME, FORMAT_DELTA, main
)


def small_settings(session="flock", total_frames=12):
    settings = build_settings(session, num_agents=5, total_frames=total_frames, fps=60, updates_per_frame=2)
    settings["keyframe_interval"] = 4
    settings["checkpoint_interval"] = 5
    return settings


def test_keyframe_is_lossless():
    positions = np.array([[0.0, 200.0], [20.5, 199.25]], dtype=np.float32)
    headings = np.array([0.0, 359.5], dtype=np.float32)

    data = compress_frame(positions, headings)
    assert data[0] == FORMAT_KEYFRAME

    out_pos, out_rot = decompress_frame(data)
    np.testing.assert_array_equal(out_pos, positions)
    np.testing.assert_array_equal(out_rot, headings)


def test_delta_frame_is_close():
    prev = np.array([[0.0, 200.0], [20.0, 200.0]], dtype=np.float32)
    positions = prev + np.array([[0.16666, 0.0013], [-0.1234, 0.1666]], dtype=np.float32)
    headings = np.array([1.5, 358.5], dtype=np.float32)

    data = compress_frame(positions, headings, prev)
    assert data[0] == FORMAT_DELTA

    out_pos, out_rot = decompress_frame(data, prev)
    np.testing.assert_allclose(out_pos, positions, atol=6e-4)
    np.testing.assert_array_equal(out_rot, headings)


def test_delta_frame_needs_previous_positions():
    prev = np.zeros((1, 2), dtype=np.float32)
    data = compress_frame(prev + 1.0, np.zeros(1, dtype=np.float32), prev)

    with pytest.raises(ValueError):
        decompress_frame(data)


def test_corrupt_frames_are_rejected():
    data = compress_frame(np.zeros((1, 2), dtype=np.float32), np.zeros(1, dtype=np.float32))

    with pytest.raises(ValueError):
        decompress_frame(b"")
    with pytest.raises(ValueError):
        decompress_frame(bytes([9]) + data[1:])


def test_record_writes_all_frames(tmp_path):
    settings = small_settings()
    rec_dir = record(settings, root=tmp_path, quiet=True)

    assert get_completed_frames(rec_dir) == 12
    metadata = load_metadata(rec_dir)
    assert metadata["num_agents"] == 5
    assert metadata["dt"] == pytest.approx(1.0 / 60.0)
    assert (rec_dir / "state_0004.npz").exists()
    assert (rec_dir / "state_0011.npz").exists()

    positions, headings = load_frame(rec_dir, 0)
    reference = Flock(5)
    np.testing.assert_array_equal(positions, reference.positions)
    np.testing.assert_array_equal(headings, reference.headings)


def test_recorded_frames_track_the_simulation(tmp_path):
    rec_dir = record(small_settings(), root=tmp_path, quiet=True)

    reference = Flock(5)
    for _ in range(11 * 2):
        reference.update(1.0 / 60.0)

    # Frame 11 is three deltas past the keyframe at 8
    positions, headings = load_frame(rec_dir, 11)
    np.testing.assert_allclose(positions, reference.positions, atol=6e-4)
    np.testing.assert_array_equal(headings, reference.headings)


def test_sequential_load_matches_random_access(tmp_path):
    rec_dir = record(small_settings(), root=tmp_path, quiet=True)

    prev = None
    for idx in range(12):
        sequential = load_frame(rec_dir, idx, prev)
        direct = load_frame(rec_dir, idx)
        np.testing.assert_array_equal(sequential[0], direct[0])
        prev = sequential[0]


def test_resume_reproduces_uninterrupted_recording(tmp_path):
    full_dir = record(small_settings(), root=tmp_path / "full", quiet=True)

    partial_dir = record(small_settings(total_frames=7), root=tmp_path / "partial", quiet=True)
    assert get_completed_frames(partial_dir) == 7
    record(small_settings(total_frames=12), resume=True, root=tmp_path / "partial", quiet=True)

    assert get_completed_frames(partial_dir) == 12
    for idx in range(12):
        assert frame_path(partial_dir, idx).read_bytes() == frame_path(full_dir, idx).read_bytes()


def test_missing_frame_raises(tmp_path):
    rec_dir = record(small_settings(total_frames=3), root=tmp_path, quiet=True)

    with pytest.raises(FileNotFoundError):
        load_frame(rec_dir, 3)


def test_record_rejects_empty_run(tmp_path):
    with pytest.raises(ValueError):
        record(small_settings(total_frames=0), root=tmp_path, quiet=True)


def test_status_and_listing(tmp_path, capsys):
    record(small_settings(session="demo", total_frames=3), root=tmp_path, quiet=True)

    list_recordings(root=tmp_path)
    show_status("demo", root=tmp_path)
    show_status("missing", root=tmp_path)

    out = capsys.readouterr().out
    assert "demo" in out
    assert "3/3 frames" in out
    assert "No recording found: missing" in out


def test_extend_rejects_non_positive_frame_counts(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr("tools.record.PROJECT_ROOT", tmp_path)
    rec_dir = record(small_settings(session="demo", total_frames=3), quiet=True)

    main(["demo", "--extend", "-2"])
    main(["demo", "--extend", "0"])

    assert load_metadata(rec_dir)["total_frames"] == 3
    assert get_completed_frames(rec_dir) == 3
    assert "Invalid extend frame count: -2" in capsys.readouterr().out

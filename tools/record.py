"""
Headless Flock Recorder
=======================

Runs the flock at a fixed time step without a window and saves every frame to
disk for later playback or analysis.

Usage:
    python -m tools.record demo                      # New recording, config defaults
    python -m tools.record demo -n 60 -f 3600        # 60 agents, 3600 frames
    python -m tools.record --resume demo             # Resume interrupted recording
    python -m tools.record --extend 600 demo         # Add 600 frames to a recording
    python -m tools.record --status demo             # Check recording status
    python -m tools.record --list                    # List all recordings

Output:
    recordings/<session_name>/
        metadata.json     - Recording settings
        frame_0000.zstd   - Positions + headings (zstd keyframe or delta frame)
        state_0099.npz    - Exact flock state checkpoints used by --resume
"""

import sys
import json
import time
import shutil
import argparse
import struct
import numpy as np
import zstandard as zstd
from datetime import datetime, timedelta
from pathlib import Path

from config import boids as config

# Get project root (parent of tools/)
PROJECT_ROOT = Path(__file__).parent.parent

FORMAT_KEYFRAME = 1
FORMAT_DELTA = 2

# Delta frames store position changes in thousandths of a world unit
DELTA_SCALE = 1000.0


def get_recordings_root(root: Path = None) -> Path:
    return Path(root) if root is not None else PROJECT_ROOT / "recordings"


def get_recording_dir(session_name: str, root: Path = None) -> Path:
    """Get (and create) the directory for a recording session."""
    base = get_recordings_root(root) / session_name
    base.mkdir(parents=True, exist_ok=True)
    return base


def save_metadata(rec_dir: Path, metadata: dict):
    with open(rec_dir / "metadata.json", "w") as f:
        json.dump(metadata, f, indent=2)


def load_metadata(rec_dir: Path) -> dict:
    with open(rec_dir / "metadata.json", "r") as f:
        return json.load(f)


def frame_path(rec_dir: Path, frame_idx: int) -> Path:
    return rec_dir / f"frame_{frame_idx:04d}.zstd"


def get_completed_frames(rec_dir: Path) -> int:
    """Count how many consecutive frames have been recorded from frame 0."""
    count = 0
    while frame_path(rec_dir, count).exists():
        count += 1
    return count


def save_state(rec_dir: Path, frame_idx: int, positions: np.ndarray, headings: np.ndarray):
    """Save the exact flock state at a frame (frames themselves are lossy)."""
    np.savez(
        rec_dir / f"state_{frame_idx:04d}.npz",
        positions=positions.astype(np.float32),
        headings=headings.astype(np.float32),
    )


def find_latest_state(rec_dir: Path, max_frame: int) -> tuple:
    """Find the most recent state file at or before max_frame."""
    for frame in range(max_frame, -1, -1):
        state_file = rec_dir / f"state_{frame:04d}.npz"
        if state_file.exists():
            return state_file, frame
    return None, -1


# =============================================================================
# FRAME CODEC: ZSTD + DELTA COMPRESSION
# =============================================================================

def compress_frame(positions: np.ndarray, headings: np.ndarray,
                   prev_positions: np.ndarray = None) -> bytes:
    """
    Compress one frame with zstd, delta-encoding positions when possible.

    Format:
    - 1 byte: compression format (1=keyframe, 2=delta)
    - 4 bytes: positions block size
    - N bytes: compressed positions (float32 absolute, or int32 deltas)
    - 4 bytes: headings block size
    - N bytes: compressed headings (float32, always absolute)

    Headings wrap at 360 so they are never delta-encoded.
    """
    use_delta = prev_positions is not None
    comp_format = FORMAT_DELTA if use_delta else FORMAT_KEYFRAME

    cctx = zstd.ZstdCompressor(level=19)

    if use_delta:
        delta = positions.astype(np.float64) - prev_positions.astype(np.float64)
        pos_data = np.round(delta * DELTA_SCALE).astype(np.int32).tobytes()
    else:
        pos_data = positions.astype(np.float32).tobytes()
    rot_data = headings.astype(np.float32).tobytes()

    pos_compressed = cctx.compress(pos_data)
    rot_compressed = cctx.compress(rot_data)

    result = struct.pack('<B', comp_format)
    result += struct.pack('<I', len(pos_compressed))
    result += pos_compressed
    result += struct.pack('<I', len(rot_compressed))
    result += rot_compressed
    return result


def frame_format(data: bytes) -> int:
    if len(data) < 1:
        raise ValueError("Invalid compressed data")
    return struct.unpack('<B', data[0:1])[0]


def decompress_frame(data: bytes, prev_positions: np.ndarray = None) -> tuple:
    """
    Decompress a frame produced by compress_frame.

    Args:
        data: Frame bytes
        prev_positions: Reconstructed positions of the previous frame,
            required for delta frames

    Returns:
        (positions, headings) as float32 arrays
    """
    comp_format = frame_format(data)
    if len(data) < 5:
        raise ValueError("Truncated frame header")
    offset = 1

    pos_size = struct.unpack('<I', data[offset:offset + 4])[0]
    offset += 4
    pos_compressed = data[offset:offset + pos_size]
    offset += pos_size

    if len(data) < offset + 4:
        raise ValueError("Truncated frame: missing headings block")
    rot_size = struct.unpack('<I', data[offset:offset + 4])[0]
    offset += 4
    rot_compressed = data[offset:offset + rot_size]

    dctx = zstd.ZstdDecompressor()
    pos_data = dctx.decompress(pos_compressed)
    rot_data = dctx.decompress(rot_compressed)

    headings = np.frombuffer(rot_data, dtype=np.float32).copy()

    if comp_format == FORMAT_KEYFRAME:
        positions = np.frombuffer(pos_data, dtype=np.float32).reshape(-1, 2).copy()
    elif comp_format == FORMAT_DELTA:
        if prev_positions is None:
            raise ValueError("Delta frame requires previous frame positions")
        delta = np.frombuffer(pos_data, dtype=np.int32).reshape(-1, 2)
        positions = (prev_positions.astype(np.float32)
                     + delta.astype(np.float32) / np.float32(DELTA_SCALE))
    else:
        raise ValueError(f"Unknown compression format: {comp_format}")

    if positions.shape[0] != headings.shape[0]:
        raise ValueError(
            f"Frame holds {positions.shape[0]} positions but {headings.shape[0]} headings"
        )
    return positions, headings


def write_frame(rec_dir: Path, frame_idx: int, positions: np.ndarray, headings: np.ndarray,
                prev_positions: np.ndarray = None) -> np.ndarray:
    """
    Compress and write one frame.

    Returns:
        The positions a reader will reconstruct for this frame. Pass them as
        prev_positions for the next frame so quantization error never builds up.
    """
    data = compress_frame(positions, headings, prev_positions)
    frame_path(rec_dir, frame_idx).write_bytes(data)
    reconstructed, _ = decompress_frame(data, prev_positions)
    return reconstructed


def _read_frame_bytes(rec_dir: Path, frame_idx: int) -> bytes:
    path = frame_path(rec_dir, frame_idx)
    if not path.exists():
        raise FileNotFoundError(f"Frame {frame_idx:04d} not found")
    return path.read_bytes()


def load_frame(rec_dir: Path, frame_idx: int, prev_positions: np.ndarray = None) -> tuple:
    """
    Load a single frame from disk.

    Delta frames need the previous frame; if prev_positions is not given the
    loader walks back to the nearest keyframe and replays forward.

    Returns:
        (positions, headings) tuple
    """
    data = _read_frame_bytes(rec_dir, frame_idx)

    if frame_format(data) == FORMAT_DELTA and prev_positions is None:
        chain = []
        current_idx = frame_idx - 1
        while True:
            if current_idx < 0:
                raise ValueError(
                    f"Frame {frame_idx:04d} is delta-compressed but no keyframe precedes it"
                )
            prev_data = _read_frame_bytes(rec_dir, current_idx)
            chain.append(prev_data)
            if frame_format(prev_data) == FORMAT_KEYFRAME:
                break
            current_idx -= 1

        # chain runs backwards from frame_idx-1 to the keyframe
        for prev_data in reversed(chain):
            prev_positions, _ = decompress_frame(prev_data, prev_positions)

    return decompress_frame(data, prev_positions)


# =============================================================================
# PROGRESS OUTPUT
# =============================================================================

def format_time(seconds: float) -> str:
    """Format seconds as human-readable time (ms below 1s)."""
    if seconds < 1.0:
        return f"{seconds*1000:.0f}ms"
    elif seconds < 90:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{seconds/60:.1f}m"
    else:
        return f"{seconds/3600:.1f}h"


def format_eta(seconds: float) -> str:
    """Format ETA - stays in seconds until 90s, then switches to hh:mm:ss."""
    if seconds < 0:
        return "calculating..."
    if seconds < 90:
        return f"{seconds:.0f}s"
    return str(timedelta(seconds=int(seconds)))


def print_progress(frame: int, total: int, elapsed: float, eta: float, first: bool):
    """Print a progress bar and details, redrawing the previous two lines."""
    pct = (frame + 1) / total * 100
    term_width = shutil.get_terminal_size(fallback=(80, 24)).columns

    bar_width = max(10, term_width - 2)
    filled = int(bar_width * (frame + 1) / total)
    bar = "█" * filled + "░" * (bar_width - filled)

    details = (f"{pct:5.1f}% | Frame {frame+1:4d}/{total} | "
               f"Elapsed: {format_time(elapsed):>6s} | ETA: {format_eta(eta)}")

    if not first:
        sys.stdout.write("\033[2A")  # Move up 2 lines
    sys.stdout.write(f"\033[K[{bar}]\n")
    sys.stdout.write(f"\033[K{details}\n")
    sys.stdout.flush()


# =============================================================================
# RECORDING
# =============================================================================

def build_settings(session_name: str, num_agents: int = None, total_frames: int = None,
                   fps: int = None, updates_per_frame: int = None) -> dict:
    """Recording settings from config defaults plus overrides."""
    rec = config.RECORDING
    return {
        "session_name": session_name,
        "num_agents": int(num_agents if num_agents is not None else config.FLOCK["count"]),
        "total_frames": int(total_frames if total_frames is not None else rec["total_frames"]),
        "fps": int(fps if fps is not None else rec["fps"]),
        "updates_per_frame": int(
            updates_per_frame if updates_per_frame is not None else rec["updates_per_frame"]
        ),
        "keyframe_interval": int(rec["keyframe_interval"]),
        "checkpoint_interval": int(rec["checkpoint_interval"]),
        "steering": dict(config.STEERING),
    }


def record(settings: dict, resume: bool = False, root: Path = None, quiet: bool = False) -> Path:
    """
    Run a flock headless and write its frames.

    Frame 0 is the initial layout; every later frame is the state after
    updates_per_frame updates of dt = 1 / fps.

    Returns:
        The recording directory
    """
    # Import here to keep --status/--list free of the Numba warmup
    from boids import Flock

    session_name = settings["session_name"]
    rec_dir = get_recording_dir(session_name, root)
    total_frames = settings["total_frames"]
    dt = 1.0 / settings["fps"]
    updates = settings["updates_per_frame"]
    keyframe_interval = settings["keyframe_interval"]
    checkpoint_interval = settings["checkpoint_interval"]

    if total_frames < 1:
        raise ValueError(f"total_frames must be at least 1, got {total_frames}")
    if updates < 1:
        raise ValueError(f"updates_per_frame must be at least 1, got {updates}")

    flock = None
    prev_positions = None
    start_frame = 0

    if resume:
        completed = get_completed_frames(rec_dir)
        state_file, state_frame = find_latest_state(rec_dir, min(completed, total_frames) - 1)
        if state_file is not None:
            with np.load(state_file) as data:
                flock = Flock.from_state(data["positions"], data["headings"], **settings["steering"])
            start_frame = state_frame + 1
            if start_frame % keyframe_interval != 0:
                prev_positions, _ = load_frame(rec_dir, state_frame)
            if not quiet:
                print(f"[Record] Resuming '{session_name}' from frame {start_frame}/{total_frames}")
        elif not quiet:
            print(f"[Record] No checkpoint found for '{session_name}', starting over")

    if flock is None:
        flock = Flock(settings["num_agents"], **settings["steering"])
        start_time = time.time()
        save_metadata(rec_dir, {
            **settings,
            "dt": dt,
            "start_time": start_time,
            "start_datetime": datetime.fromtimestamp(start_time).isoformat(),
        })

    if not quiet:
        print(f"[Record] {flock.num_agents} agents | {total_frames} frames | "
              f"dt={dt:.4f}s x {updates} updates per frame")
        print(f"[Record] Output: {rec_dir}\n")

    loop_start = time.time()
    for frame in range(start_frame, total_frames):
        if frame > 0:
            for _ in range(updates):
                flock.update(dt)

        positions, headings = flock.state()
        if frame % keyframe_interval == 0:
            prev_positions = None
        prev_positions = write_frame(rec_dir, frame, positions, headings, prev_positions)

        if (frame + 1) % checkpoint_interval == 0 or frame == total_frames - 1:
            save_state(rec_dir, frame, positions, headings)

        if not quiet:
            elapsed = time.time() - loop_start
            done = frame - start_frame + 1
            eta = elapsed / done * (total_frames - frame - 1)
            print_progress(frame, total_frames, elapsed, eta, first=(frame == start_frame))

    if not quiet:
        print(f"\n[Record] ✓ Complete! Playback: python -m tools.playback {session_name}")
    return rec_dir


def show_status(session_name: str, root: Path = None):
    """Show recording status for a specific session."""
    rec_dir = get_recordings_root(root) / session_name

    if not (rec_dir / "metadata.json").exists():
        print(f"[Status] No recording found: {session_name}")
        return

    metadata = load_metadata(rec_dir)
    completed = get_completed_frames(rec_dir)
    total = metadata["total_frames"]
    pct = completed / total * 100

    print(f"\n[Status] Recording: {session_name}")
    print(f"  Agents: {metadata['num_agents']:,}")
    print(f"  Step: {metadata['dt']:.4f}s x {metadata['updates_per_frame']} per frame")
    print(f"  Separation mean: {metadata['steering'].get('separation_mean', 'arithmetic')}")
    print(f"  Progress: {completed}/{total} frames ({pct:.1f}%)")
    print(f"  Started: {metadata.get('start_datetime', 'unknown')}")

    if completed < total:
        print(f"\n  To resume: python -m tools.record --resume {session_name}")
    else:
        print(f"\n  ✓ Complete! Playback: python -m tools.playback {session_name}")


def list_recordings(root: Path = None):
    """List all available recordings."""
    recordings_dir = get_recordings_root(root)

    if not recordings_dir.exists():
        print("[List] No recordings directory found")
        return

    sessions = [d.name for d in recordings_dir.iterdir() if d.is_dir() and (d / "metadata.json").exists()]

    if not sessions:
        print("[List] No recordings found")
        return

    print(f"\n[List] Found {len(sessions)} recording(s):\n")

    for session in sorted(sessions):
        rec_dir = recordings_dir / session
        metadata = load_metadata(rec_dir)
        completed = get_completed_frames(rec_dir)
        total = metadata["total_frames"]
        status = "✓" if completed >= total else f"{completed / total * 100:.0f}%"

        print(f"  {session:30s} | {metadata['num_agents']:>6,} agents | {completed:>5}/{total:<5} frames | {status}")

    print()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Headless 2D boids recorder")
    parser.add_argument("session", nargs="?", help="Session name")
    parser.add_argument("--resume", action="store_true", help="Resume interrupted recording")
    parser.add_argument("--extend", type=int, metavar="FRAMES", help="Extend existing recording by N frames")
    parser.add_argument("--status", action="store_true", help="Show recording status")
    parser.add_argument("--list", action="store_true", help="List all recordings")
    parser.add_argument("--count", "-n", type=int, help="Number of agents")
    parser.add_argument("--frames", "-f", type=int, help="Number of frames")
    parser.add_argument("--fps", type=int, help="Frames per simulated second (dt = 1/fps)")
    parser.add_argument("--updates-per-frame", "-u", type=int, help="Flock updates between frames")
    args = parser.parse_args(argv)

    if args.list:
        list_recordings()
        return

    if args.status:
        if args.session:
            show_status(args.session)
        else:
            list_recordings()
        return

    if not args.session:
        print("[Record] Error: Session name required")
        print("[Record] Usage: python -m tools.record <session_name> [options]")
        return

    rec_dir = get_recordings_root() / args.session

    if args.extend is not None and args.extend < 1:
        print(f"[Record] Invalid extend frame count: {args.extend}")
        return

    if args.extend or args.resume:
        if not (rec_dir / "metadata.json").exists():
            print(f"[Record] No recording found: {args.session}")
            return

        settings = load_metadata(rec_dir)
        if args.extend:
            old_frames = settings["total_frames"]
            settings["total_frames"] = old_frames + args.extend
            save_metadata(rec_dir, settings)
            print(f"[Record] Extending '{args.session}': {old_frames} -> {settings['total_frames']} frames")

        record(settings, resume=True)
        return

    if args.count is not None and args.count < 1:
        print(f"[Record] Invalid agent count: {args.count}")
        return
    if args.fps is not None and args.fps < 1:
        print(f"[Record] Invalid fps: {args.fps}")
        return

    settings = build_settings(
        args.session,
        num_agents=args.count,
        total_frames=args.frames,
        fps=args.fps,
        updates_per_frame=args.updates_per_frame,
    )
    try:
        record(settings, resume=False)
    except ValueError as e:
        print(f"[Record] Error: {e}")


if __name__ == "__main__":
    main()

"""
2D Boids Simulation
===================

A real-time flocking simulation. The view follows the centre of the flock.

Usage:
    python main.py                        # 20 agents, 3 updates per frame
    python main.py --count 60             # Larger flock
    python main.py --updates-per-tick 1   # Real-time speed

Controls:
    - SPACE: Pause/Resume
    - R: Reset flock to the starting row
    - +/-: More/fewer updates per frame
    - Mouse wheel: Zoom
    - ESC: Quit
"""

import argparse

from core.application import Application


def main():
    parser = argparse.ArgumentParser(description="2D boids flocking simulation")
    parser.add_argument("--count", "-n", type=int, help="Number of agents (default: config FLOCK count)")
    parser.add_argument("--updates-per-tick", "-u", type=int,
                        help="Flock updates per rendered frame (default: config SIMULATION value)")
    args = parser.parse_args()

    if args.count is not None and args.count < 1:
        print(f"[Boids] Error: --count must be at least 1, got {args.count}")
        return
    if args.updates_per_tick is not None and args.updates_per_tick < 1:
        print(f"[Boids] Error: --updates-per-tick must be at least 1, got {args.updates_per_tick}")
        return

    app = Application(num_agents=args.count, updates_per_tick=args.updates_per_tick)
    app.run()


if __name__ == "__main__":
    main()

"""Configuration for the 2D boids flocking simulation."""

WINDOW = {
    "width": 800,
    "height": 600,
    "title": "boids",
    "fps_limit": 60
}

VIEW = {
    "size": (800.0, 200.0),    # World units visible before zoom
    "zoom": 0.5,               # <1 shows less of the world (closer)
    "min_zoom": 0.1,
    "max_zoom": 8.0,
    "zoom_step": 1.1           # Multiplier per mouse wheel notch
}

FLOCK = {
    "count": 20,
    "spacing_x": 20.0,         # Agents start in a row, this far apart
    "row_y": 200.0,
    "initial_heading": 0.0
}

STEERING = {
    # Bounded turn rates, degrees per second of simulated time
    "separation_force": 90.0,
    "cohesion_force": 60.0,
    "alignment_force": 50.0,

    "movement_speed": 10.0,    # World units per second
    "separation_radius": 20.0, # Neighbours strictly closer than this repel

    # "arithmetic" averages raw bearings, "circular" averages unit vectors
    "separation_mean": "arithmetic",
}

SIMULATION = {
    "updates_per_tick": 3,     # Flock updates per rendered frame
    "max_updates_per_tick": 30,
    "max_frame_time": 0.25,    # Cap dt after a stall (window drag, breakpoint)
}

AGENT_SHAPE = {
    "length": 4.0,             # Along the heading
    "width": 1.0,
    "centroid_size": 1.5
}

RECORDING = {
    "fps": 60,
    "total_frames": 1800,
    "updates_per_frame": 3,
    "keyframe_interval": 50,   # Absolute positions every N frames
    "checkpoint_interval": 100 # Exact state snapshot every N frames (resume)
}

COLORS = {
    "background": (0.0, 0.0, 0.0, 1.0),
    "agent": (1.0, 1.0, 1.0),
    "centroid": (0.9, 0.3, 0.3),
    "text": (230, 230, 230)
}

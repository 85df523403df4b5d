"""vizloop User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the animations. Expert defaults live in vizloop.schemas.param.

Usage:
    python scripts/render_animation.py offline output/snapshots/tracer.nc tracer --config scripts/user_config.py
    python scripts/render_animation.py live --config scripts/user_config.py --format gif
"""

CONFIG = {
    # ========================================================================
    # MODE & OUTPUT
    # ========================================================================
    "MODE": "offline",        # "offline" (stored snapshots) or "live" (run the stepper)
    "BASE_DIR": "output",     # movies/, frames/, snapshots/, logs/ go here

    # ========================================================================
    # RECORDING
    # ========================================================================
    "FRAMERATE": 24,          # frames per second
    "OUTPUT_FORMAT": "mp4",   # "mp4" (ffmpeg), "gif" (pillow) or "png" (frame files)
    "FRAME_START": 1,         # first frame (1-based)
    "FRAME_STOP": None,       # last frame, inclusive (None = all)

    # ========================================================================
    # DYNAMIC COLOR RANGE
    # ========================================================================
    "WINDOW": 30,             # samples averaged ahead of the current frame
    "FRACTION": 0.5,          # scale applied to the averaged maximum

    # ========================================================================
    # FIGURE
    # ========================================================================
    "CMAP": "RdBu_r",
    "DPI": 100,

    # ========================================================================
    # LIVE MODE
    # ========================================================================
    "TICKS": 100,             # frames recorded while the simulation runs
    "STEPS_PER_TICK": 10,     # simulation iterations between frames
    "SEED": 1234,
}

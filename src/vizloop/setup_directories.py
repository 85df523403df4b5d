"""
Directory setup for rendered animations.

Flat layout under one base directory:
- movies/     finished movie files, named after the variable
- frames/     PNG frame sequences, one subdirectory per variable
- snapshots/  NetCDF snapshot files written by live runs
- logs/       vizloop.log
"""

from pathlib import Path

OUTPUT_SUBDIRS = ("movies", "frames", "snapshots", "logs")


def setup_output_directories(base_output_dir="output"):
    """
    Set up organized output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path
        Base output directory (``~`` is expanded).

    Returns
    -------
    dict
        Paths keyed by 'base', 'movies', 'frames', 'snapshots', 'logs'.
    """
    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {"base": base_output_dir}
    for name in OUTPUT_SUBDIRS:
        directories[name] = base_output_dir / name

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    return directories


def get_movie_path(output_dirs, variable, output_format="mp4"):
    """
    Output path for an animation of ``variable``.

    Parameters
    ----------
    output_dirs : dict
        Output directories from setup_output_directories()
    variable : str
        Variable name, used as the file (or directory) name.
    output_format : str
        ``mp4`` or ``gif`` give ``movies/<variable>.<ext>``; ``png`` gives
        the directory ``frames/<variable>``.

    Example
    -------
    >>> get_movie_path(dirs, 'T', 'gif')
    Path('output/movies/T.gif')
    """
    output_format = output_format.lstrip(".").lower()
    if output_format == "png":
        return output_dirs["frames"] / variable
    return output_dirs["movies"] / f"{variable}.{output_format}"


def get_snapshot_path(output_dirs, name):
    """
    NetCDF path for snapshots written during a live run.

    Example
    -------
    >>> get_snapshot_path(dirs, 'diffusion')
    Path('output/snapshots/diffusion.nc')
    """
    if not name.endswith(".nc"):
        name = name + ".nc"
    return output_dirs["snapshots"] / name


def get_log_path(output_dirs):
    """Path of the session log file."""
    log_dir = output_dirs["logs"]
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "vizloop.log"

"""Root-level pytest fixtures for the vizloop test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture. Tests build configs through these fixtures instead of raw dicts.
"""

import logging

import pytest
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from vizloop.data.time_series import ArrayTimeSeries
from vizloop.schemas import ParamConfig, UserConfig, resolve_config
from vizloop.setup_directories import setup_output_directories

from tests.helpers.fake_netcdf import make_decaying_snapshots
from tests.helpers.recording_surface import RecordingSurface


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config, tmp_path):
    """Fully validated runtime configuration writing under ``tmp_path``."""
    return resolve_config(param_config, UserConfig(base_dir=str(tmp_path)), None)


@pytest.fixture
def make_config(param_config, tmp_path):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs; output
    always goes under ``tmp_path`` unless ``base_dir`` is given.

    Examples
    --------
    >>> def test_gif(make_config):
    ...     config = make_config(output_format="gif", fps=5)
    ...     assert config.animation.format == "gif"
    """
    def _make(cli=None, **user_overrides):
        user_overrides.setdefault("base_dir", str(tmp_path))
        return resolve_config(param_config, UserConfig(**user_overrides), cli)

    return _make


# =============================================================================
# Data and rendering fixtures
# =============================================================================

@pytest.fixture
def output_dirs(tmp_path):
    """Standard output directory structure under ``tmp_path``."""
    return setup_output_directories(tmp_path)


@pytest.fixture
def store():
    """Ten decaying (4, 3) snapshots at t = 0..9."""
    return ArrayTimeSeries(make_decaying_snapshots(10, (4, 3)), name="T")


@pytest.fixture
def recording_surface():
    return RecordingSurface()


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def restore_root_logging():
    """Put back root handlers replaced by setup_logging()."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)

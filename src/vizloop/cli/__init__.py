"""Command-line interface modules for vizloop.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from vizloop.cli.render import render_time_series, render_live, load_user_config_dict

__all__ = ['render_time_series', 'render_live', 'load_user_config_dict']

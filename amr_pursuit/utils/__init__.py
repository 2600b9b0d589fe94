"""Utility helpers shared across the controller and scripts."""

from .config import load_config_dict, load_config_any, controller_section

__all__ = [
    "load_config_dict",
    "load_config_any",
    "controller_section",
]

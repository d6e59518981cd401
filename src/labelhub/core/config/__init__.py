"""Configuration for labelhub."""
from .settings import LabelhubConfig, get_config, init_config

__all__ = [
    "LabelhubConfig",
    "get_config",
    "init_config",
]

"""
Simulation settings, read from a YAML file the same way tournament
constraints are: every key is optional and falls back to a default.
"""
import os
from dataclasses import dataclass, fields
from typing import Optional

import yaml

from competition.errors import ConfigurationError


@dataclass(frozen=True)
class SimulationSettings:
    home_advantage: float = 1.33
    draw_rate: float = 0.25
    goals_avg: float = 2.5
    goals_std_dev: float = 1.7
    default_offense: int = 3
    default_defense: int = 3
    seed: Optional[int] = None

    def __post_init__(self):
        if self.home_advantage <= 0:
            raise ConfigurationError("home_advantage must be positive")
        if not 0 <= self.draw_rate < 1:
            raise ConfigurationError("draw_rate must be in [0, 1)")
        if self.goals_avg <= 0:
            raise ConfigurationError("goals_avg must be positive")
        if self.goals_std_dev <= 0:
            raise ConfigurationError("goals_std_dev must be positive")

    @classmethod
    def from_dict(cls, data):
        """Build settings from a (possibly partial) mapping."""
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown settings: {', '.join(unknown)}")
        return cls(**data)

    def with_seed(self, seed):
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values['seed'] = seed
        return SimulationSettings(**values)


def load_settings(file_path=None):
    """Load settings from ``file_path``; a missing or empty file gives the defaults."""
    if not file_path or not os.path.exists(file_path):
        return SimulationSettings()
    with open(file_path, mode='r', encoding='utf-8') as file:
        try:
            data = yaml.safe_load(file)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse {file_path}: {e}") from e
    return SimulationSettings.from_dict(data)

#!/usr/bin/env python3
"""
Scenario presets and JSON scenario loading.

Built-in scenarios are a closed Enum mapped to start conditions by the pure
lookup table SCENARIOS. Users can also drop their own presets into the
scenarios/ folder; they are picked up by the loader.

Schema (scenarios/*.json):
{
  "name": "Human-friendly preset name",
  "description": "Optional description",
  "sound_speed": 343.0,              # optional, default: keep current
  "emitted_frequency": 4.0,          # optional, default: keep current
  "source":   {"position": [100, 300], "velocity": [80, 0], "controlled": true},
  "observer": {"position": [500, 300], "velocity": [0, 0]}
}

"controlled" defaults to true when the velocity is non-zero.
"""
import json
import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from loguru import logger as log

from .constants import OBSERVER_POSITION, SOURCE_POSITION
from .utils import positive_float
from .vector_utils import ZERO, Vector2, as_vector, vec_len

SCENARIOS_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "scenarios")


class Scenario(Enum):
    FREE_PLAY = "Free Play"
    SOURCE_APPROACHING = "Source Approaching"
    SOURCE_RECEDING = "Source Receding"
    OBSERVER_APPROACHING = "Observer Approaching"
    OBSERVER_RECEDING = "Observer Receding"
    SAME_DIRECTION = "Same Direction"
    PERPENDICULAR = "Perpendicular"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def coerce(cls, value) -> "Scenario":
        """Accept a Scenario, its member name, or its display label."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for member in cls:
            if text == member.value or text.upper().replace(" ", "_") == member.name:
                return member
        raise ValueError(f"Unknown scenario {value!r}")


@dataclass(frozen=True)
class ScenarioPreset:
    """Start conditions for the source and observer."""
    name: str
    source_velocity: Vector2 = ZERO
    observer_velocity: Vector2 = ZERO
    source_controlled: bool = False
    observer_controlled: bool = False
    source_position: Vector2 = SOURCE_POSITION
    observer_position: Vector2 = OBSERVER_POSITION
    sound_speed: Optional[float] = None
    emitted_frequency: Optional[float] = None
    description: str = ""


SCENARIOS: Dict[Scenario, ScenarioPreset] = {
    Scenario.FREE_PLAY: ScenarioPreset(Scenario.FREE_PLAY.label),
    Scenario.SOURCE_APPROACHING: ScenarioPreset(
        Scenario.SOURCE_APPROACHING.label,
        source_velocity=(80.0, 0.0), source_controlled=True,
    ),
    Scenario.SOURCE_RECEDING: ScenarioPreset(
        Scenario.SOURCE_RECEDING.label,
        source_velocity=(-80.0, 0.0), source_controlled=True,
    ),
    Scenario.OBSERVER_APPROACHING: ScenarioPreset(
        Scenario.OBSERVER_APPROACHING.label,
        observer_velocity=(-80.0, 0.0), observer_controlled=True,
    ),
    Scenario.OBSERVER_RECEDING: ScenarioPreset(
        Scenario.OBSERVER_RECEDING.label,
        observer_velocity=(80.0, 0.0), observer_controlled=True,
    ),
    Scenario.SAME_DIRECTION: ScenarioPreset(
        Scenario.SAME_DIRECTION.label,
        source_velocity=(60.0, 0.0), observer_velocity=(60.0, 0.0),
        source_controlled=True, observer_controlled=True,
    ),
    Scenario.PERPENDICULAR: ScenarioPreset(
        Scenario.PERPENDICULAR.label,
        source_velocity=(0.0, 60.0), observer_velocity=(0.0, -60.0),
        source_controlled=True, observer_controlled=True,
    ),
}


def get_preset(scenario) -> ScenarioPreset:
    return SCENARIOS[Scenario.coerce(scenario)]


def _read_json(path: str) -> Optional[dict]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        log.warning(f"Could not read scenario file {path}: {exc}")
        return None


def _parse_body(data: dict, default_position: Vector2) -> Tuple[Vector2, Vector2, bool]:
    position = as_vector(data.get("position", default_position))
    velocity = as_vector(data.get("velocity", ZERO))
    controlled = bool(data.get("controlled", vec_len(velocity) > 0))
    return position, velocity, controlled


def preset_from_dict(data: dict, fallback_name: str = "Custom") -> ScenarioPreset:
    """Build a preset from parsed JSON; raises ValueError on malformed input."""
    try:
        src_pos, src_vel, src_ctl = _parse_body(data.get("source", {}), SOURCE_POSITION)
        obs_pos, obs_vel, obs_ctl = _parse_body(data.get("observer", {}), OBSERVER_POSITION)
        sound_speed = data.get("sound_speed")
        frequency = data.get("emitted_frequency")
        return ScenarioPreset(
            name=str(data.get("name") or fallback_name),
            source_velocity=src_vel,
            observer_velocity=obs_vel,
            source_controlled=src_ctl,
            observer_controlled=obs_ctl,
            source_position=src_pos,
            observer_position=obs_pos,
            sound_speed=positive_float(sound_speed, "Sound speed") if sound_speed is not None else None,
            emitted_frequency=positive_float(frequency, "Emitted frequency") if frequency is not None else None,
            description=str(data.get("description", "")),
        )
    except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Malformed scenario {fallback_name!r}: {exc}") from exc


def list_scenario_files(directory: str = SCENARIOS_DIR) -> List[Tuple[str, str]]:
    """Return list of (file_name, display_name) for available scenario files."""
    items: List[Tuple[str, str]] = []
    if not os.path.isdir(directory):
        return items
    for fn in sorted(os.listdir(directory)):
        if not fn.lower().endswith(".json"):
            continue
        data = _read_json(os.path.join(directory, fn)) or {}
        display = data.get("name") or os.path.splitext(fn)[0]
        items.append((fn, display))
    return items


def load_scenario_file(file_name: str, directory: str = SCENARIOS_DIR) -> Optional[ScenarioPreset]:
    """Load a scenario JSON by file name; returns None if it cannot be used."""
    data = _read_json(os.path.join(directory, file_name))
    if data is None:
        return None
    try:
        return preset_from_dict(data, fallback_name=os.path.splitext(file_name)[0])
    except ValueError as exc:
        log.warning(str(exc))
        return None

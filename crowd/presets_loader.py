#!/usr/bin/env python3
"""
Preset JSON loading utilities.

This module defines a simple JSON schema and loader for crowd presets
(presets/*.json): slider defaults plus the physics tuning variant.

Schema
======
{
  "name": "Human-friendly preset name",
  "description": "Optional description",
  "repulsion_force": 100,             # optional, default 100
  "character_size": 60,               # optional, default 60
  "tuning": {                         # optional, default canonical
    "center_pull": 0.08,
    "overlap_passes": 2
  }
}

Users can add their own JSON files into this folder and they'll be picked up by the loader.
"""
import json
import logging
import os
from typing import List, Optional, Tuple

from .config import CrowdSettings, PhysicsTuning
from .utils import try_float, try_int

logger = logging.getLogger(__name__)

PRESETS_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "presets")


def _read_json(path: str) -> Optional[dict]:
  try:
    with open(path, "r", encoding="utf-8") as f:
      data = json.load(f)
  except (OSError, ValueError):
    logger.warning("Could not read preset %s", path, exc_info=True)
    return None
  if not isinstance(data, dict):
    logger.warning("Preset %s is not a JSON object", path)
    return None
  return data


def _coerce_tuning(raw) -> PhysicsTuning:
  default = PhysicsTuning()
  if not isinstance(raw, dict):
    return default
  center_pull = try_float(raw.get("center_pull", default.center_pull))
  passes = try_int(raw.get("overlap_passes", default.overlap_passes))
  if center_pull is None or center_pull < 0:
    logger.warning("Invalid center_pull %r, using %.2f", raw.get("center_pull"), default.center_pull)
    center_pull = default.center_pull
  if passes is None or passes < 1:
    logger.warning("Invalid overlap_passes %r, using %d", raw.get("overlap_passes"), default.overlap_passes)
    passes = default.overlap_passes
  return PhysicsTuning(center_pull=center_pull, overlap_passes=passes)


def _coerce_positive_int(value, default: int, key: str) -> int:
  result = try_int(value)
  if result is None or result <= 0:
    logger.warning("Invalid %s %r, using %d", key, value, default)
    return default
  return result


def settings_from_dict(data: dict, base: Optional[CrowdSettings] = None) -> CrowdSettings:
  base = base if base is not None else CrowdSettings()
  return CrowdSettings(
    width=base.width,
    height=base.height,
    focal_point=base.focal_point,
    repulsion_force=_coerce_positive_int(data.get("repulsion_force", base.repulsion_force),
                                         base.repulsion_force, "repulsion_force"),
    character_size=_coerce_positive_int(data.get("character_size", base.character_size),
                                        base.character_size, "character_size"),
    tuning=_coerce_tuning(data.get("tuning")),
  )


def list_presets(presets_dir: str = PRESETS_DIR) -> List[Tuple[str, str]]:
  """Return list of (file_name, display_name) for available presets."""
  items: List[Tuple[str, str]] = []
  if not os.path.isdir(presets_dir):
    return items
  for fn in sorted(os.listdir(presets_dir)):
    if not fn.lower().endswith(".json"):
      continue
    data = _read_json(os.path.join(presets_dir, fn)) or {}
    display = data.get("name") or os.path.splitext(fn)[0]
    items.append((fn, display))
  return items


def load_preset(file_name: str, presets_dir: str = PRESETS_DIR,
                base: Optional[CrowdSettings] = None) -> Tuple[CrowdSettings, str]:
  """
  Load a preset JSON by file name.
  Returns (settings, display_name); a missing or unreadable file yields defaults.
  """
  data = _read_json(os.path.join(presets_dir, file_name)) or {}
  display_name = data.get("name") or os.path.splitext(file_name)[0]
  settings = settings_from_dict(data, base)
  logger.info("Loaded preset %s", display_name)
  return settings, display_name

"""
Configuration service for EasyCrop.

This module handles loading, saving, and managing application settings.
Configuration is stored as JSON in ~/.config/easycrop/config.json following
the XDG Base Directory Specification.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from easycrop.services.logging_service import get_logger

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "easycrop"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    # Cropped images are written here as image_<timestamp>.png
    "default_save_folder": str(Path.home() / "Pictures" / "Cropped"),
    # Crop interaction
    "minimum_stroke_length": 10,
    "edge_gesture_margin": 50,
    # "single_axis" pins only the overflowing axis, "both_axes" pins each axis
    "edge_clamp_policy": "single_axis",
    # One of "classic", "freehand", "lasso"; null asks with the crop type dialog
    "default_crop_mode": None,
    # Crop overlay appearance
    "background_color": "#ffffff",
    "crop_stroke_width": 5,
    "crop_dash_pattern": [10, 20],
    "lasso_alpha": 80,
    # Root logger level name
    "log_level": "INFO",
}


class ConfigService:
    """
    Service for managing application configuration.

    Handles loading, saving, and accessing configuration values.
    Provides sensible defaults when config file is missing or corrupted.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize the ConfigService.

        Args:
            config_path: Optional path to config file. Defaults to
                        ~/.config/easycrop/config.json
        """
        self._logger = get_logger(__name__)
        self._config_path = config_path or DEFAULT_CONFIG_FILE
        self._config: Dict[str, Any] = {}

        self._load()

    def _load(self) -> None:
        """Load configuration from file, using defaults if needed."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)

        if not self._config_path.exists():
            self._logger.info(
                f"Config file not found at {self._config_path}. Using defaults."
            )
            self._save_to_file()
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded_config = json.load(f)

            if isinstance(loaded_config, dict):
                self._deep_merge(self._config, loaded_config)
                self._logger.info(f"Configuration loaded from {self._config_path}")
                # Persist any new default keys
                self._save_to_file()
            else:
                raise ValueError("Config file does not contain a valid JSON object")

        except (json.JSONDecodeError, ValueError) as e:
            self._logger.warning(
                f"Config file corrupted or invalid: {e}. Recreating with defaults."
            )
            self._config = copy.deepcopy(DEFAULT_CONFIG)
            self._save_to_file()

        except OSError as e:
            self._logger.warning(
                f"Could not read config file: {e}. Using defaults."
            )

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Recursively merge override dict into base dict."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _save_to_file(self) -> None:
        """Save current configuration to file."""
        try:
            self._config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self._config_path, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2)

            self._logger.debug(f"Configuration saved to {self._config_path}")

        except OSError as e:
            self._logger.error(f"Could not save config file: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: The configuration key to retrieve.
            default: Default value if key doesn't exist.

        Returns:
            The configuration value, or default if not found.
        """
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value (in memory only).

        Call save() to persist changes to disk.
        """
        self._config[key] = value
        self._logger.debug(f"Config key '{key}' set to '{value}'")

    def save(self) -> None:
        """Persist current configuration to disk."""
        self._save_to_file()

    # ─── Export Settings ──────────────────────────────────────────────────

    @property
    def default_save_folder(self) -> str:
        """Get the folder cropped images are saved into."""
        return self.get("default_save_folder", DEFAULT_CONFIG["default_save_folder"])

    # ─── Crop Interaction Settings ────────────────────────────────────────

    @property
    def minimum_stroke_length(self) -> float:
        """Smallest extent (per axis) a committed crop shape must exceed."""
        return float(self.get("minimum_stroke_length", 10))

    @property
    def edge_gesture_margin(self) -> int:
        """Presses this close to the left/right canvas edge are ignored."""
        return int(self.get("edge_gesture_margin", 50))

    @property
    def edge_clamp_policy(self) -> str:
        return self.get("edge_clamp_policy", "single_axis")

    @property
    def default_crop_mode(self) -> Optional[str]:
        return self.get("default_crop_mode")

    # ─── Overlay Appearance ───────────────────────────────────────────────

    @property
    def background_color(self) -> str:
        return self.get("background_color", "#ffffff")

    @property
    def crop_stroke_width(self) -> int:
        return int(self.get("crop_stroke_width", 5))

    @property
    def crop_dash_pattern(self) -> List[float]:
        return list(self.get("crop_dash_pattern", [10, 20]))

    @property
    def lasso_alpha(self) -> int:
        """Alpha (0-255) of the translucent lasso wash."""
        return int(self.get("lasso_alpha", 80))

    # ─── Logging ──────────────────────────────────────────────────────────

    @property
    def log_level(self) -> str:
        return str(self.get("log_level", "INFO"))

"""YAML-based configuration for markergen runs.

One Config is built at startup (defaults, then an optional YAML file, then
command-line values) and handed to ``build_pipeline`` and the Driver. Stages
never look configuration up on their own.

Supports:
    - Loading from YAML files, with ``_base_`` inheritance
    - Dot notation access to nested values
    - Merging and ``key=value`` overrides

Example:
    >>> config = Config.from_file("markers.yaml")
    >>> config.get("pipeline.rotate.step", 15)
    >>> config.minsize = 50  # dot notation access
"""

import copy
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml


class ConfigDict(dict):
    """Dictionary with attribute-style access.

    Nested dictionaries are converted to ConfigDict on construction.

    Example:
        >>> cfg = ConfigDict({"pipeline": {"pad": {"width": 416}}})
        >>> cfg.pipeline.pad.width
        416
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for key, value in self.items():
            if isinstance(value, dict) and not isinstance(value, ConfigDict):
                self[key] = ConfigDict(value)
            elif isinstance(value, list):
                self[key] = self._convert_list(value)

    def _convert_list(self, items: List) -> List:
        result = []
        for item in items:
            if isinstance(item, dict) and not isinstance(item, ConfigDict):
                result.append(ConfigDict(item))
            elif isinstance(item, list):
                result.append(self._convert_list(item))
            else:
                result.append(item)
        return result

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(f"Config has no attribute '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        if isinstance(value, dict) and not isinstance(value, ConfigDict):
            value = ConfigDict(value)
        self[name] = value

    def get_nested(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-separated path, e.g. ``"pipeline.pad.width"``."""
        value = self
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set_nested(self, key: str, value: Any) -> None:
        """Set a value by dot-separated path, creating sections as needed."""
        keys = key.split(".")
        target = self
        for k in keys[:-1]:
            if k not in target or not isinstance(target[k], dict):
                target[k] = ConfigDict()
            target = target[k]
        if isinstance(value, dict) and not isinstance(value, ConfigDict):
            value = ConfigDict(value)
        target[keys[-1]] = value

    def to_dict(self) -> Dict:
        """Convert to a plain nested dictionary."""
        result = {}
        for key, value in self.items():
            if isinstance(value, ConfigDict):
                result[key] = value.to_dict()
            elif isinstance(value, list):
                result[key] = [v.to_dict() if isinstance(v, ConfigDict) else v for v in value]
            else:
                result[key] = value
        return result


class Config:
    """Configuration of a dataset generation run.

    Attributes:
        _cfg: Internal ConfigDict storing configuration values.

    Example:
        >>> config = get_default_config()
        >>> config.dst
        'dataset'
        >>> config.save("run.yaml")
    """

    def __init__(self, cfg_dict: Optional[Dict] = None):
        if cfg_dict is None:
            cfg_dict = {}
        self._cfg = ConfigDict(cfg_dict)

    @classmethod
    def from_file(cls, filepath: Union[str, Path]) -> "Config":
        """Load configuration from a YAML file.

        A ``_base_`` key (a path or list of paths, relative to the file) names
        configs to load first; this file's values override theirs.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            yaml.YAMLError: If YAML parsing fails.
        """
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"Config file not found: {filepath}")

        with open(filepath, "r", encoding="utf-8") as f:
            cfg_dict = yaml.safe_load(f)

        if cfg_dict is None:
            cfg_dict = {}
        if not isinstance(cfg_dict, dict):
            raise ValueError(f"Config file must hold a mapping: {filepath}")

        base_paths = cfg_dict.pop("_base_", [])
        if isinstance(base_paths, str):
            base_paths = [base_paths]

        config = cls(cfg_dict)
        for bp in reversed(base_paths):
            config = cls.from_file(filepath.parent / bp).merge(config)
        return config

    def merge(self, other: Union["Config", Dict]) -> "Config":
        """Return a new Config with ``other``'s values layered over these.

        Nested sections are merged key by key.
        """
        other_dict = other.to_dict() if isinstance(other, Config) else ConfigDict(other).to_dict()
        return Config(self._deep_merge(self._cfg.to_dict(), other_dict))

    def _deep_merge(self, base: Dict, update: Dict) -> Dict:
        result = copy.deepcopy(base)
        for key, value in update.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)
        return result

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value with dot notation, e.g. ``config.get("save.quality", 100)``."""
        return self._cfg.get_nested(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a value with dot notation."""
        self._cfg.set_nested(key, value)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return object.__getattribute__(self, name)
        try:
            return self._cfg[name]
        except KeyError:
            raise AttributeError(f"Config has no attribute '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            if isinstance(value, dict) and not isinstance(value, ConfigDict):
                value = ConfigDict(value)
            self._cfg[name] = value

    def __getitem__(self, key: str) -> Any:
        return self._cfg[key]

    def __len__(self) -> int:
        return len(self._cfg)

    def __contains__(self, key: str) -> bool:
        """Check if a key path exists (supports dot notation)."""
        return self.get(key) is not None

    def to_dict(self) -> Dict:
        return self._cfg.to_dict()

    def save(self, filepath: Union[str, Path]) -> None:
        """Save configuration to a YAML file."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def __repr__(self) -> str:
        return f"Config({self._cfg})"


def load_config(filepath: Union[str, Path]) -> Config:
    """Load configuration from a YAML file, on top of the defaults."""
    return get_default_config().merge(Config.from_file(filepath))


def merge_config(config: Config, overrides: Dict[str, Any]) -> Config:
    """Apply overrides to a config and return the result.

    Keys may be nested dicts or dot-separated paths::

        merge_config(config, {"save": {"quality": 90}})
        merge_config(config, {"save.quality": 90})
    """
    merged = config.merge({})
    for key, value in overrides.items():
        if "." in key:
            merged.set(key, value)
        else:
            merged = merged.merge({key: value})
    return merged


def parse_overrides(opts: List[str]) -> Dict[str, Any]:
    """Parse ``key=value`` strings from the command line.

    Values are read as YAML scalars, so ``12``, ``0.5``, ``true`` and
    ``null`` become int, float, bool and None.

    Raises:
        ValueError: If an option has no ``=``.
    """
    overrides = {}
    for opt in opts:
        if "=" not in opt:
            raise ValueError(f"Invalid option format: {opt}. Use key=value format.")
        key, value = opt.split("=", 1)
        overrides[key.strip()] = yaml.safe_load(value) if value else ""
    return overrides


def get_default_config() -> Config:
    """Get the default marker dataset configuration.

    Top-level keys mirror the command-line options; the ``pipeline`` section
    holds the fixed stage parameters of the augmentation policy.
    """
    default_cfg = {
        "src": "dataset",
        "dst": "dataset",
        "markers_dir": "markers",
        "minsize": 30,
        "maxsize": 416 // 2,
        "stepsize": 40,
        "show": False,
        "num_workers": 0,
        "seed": None,
        "pipeline": {
            "shear": {"min": 0.0, "max": 1.0, "step": 0.5},
            "rotate": {"min": -45.0, "max": 45.0, "step": 15.0},
            "pad": {"width": 416, "height": 416, "fill": 127.0},
            "brightness": {"min": -16.0 * 2, "max": 16.0 * 10, "step": 16.0 * 4},
            "blur": {"min": 0, "max": 1, "step": 1},
            "noise": {"mean": 10.0, "sigma": 10.0},
        },
        "save": {
            "subdir": "positive",
            "image_ext": "jpg",
            "quality": 100,
            "box_format": "xywh",
        },
        "preview": {
            "window": "img",
            "delay_ms": 1,
        },
    }
    return Config(default_cfg)

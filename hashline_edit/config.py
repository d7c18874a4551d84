import os
from dataclasses import dataclass, replace
from typing import Optional

@dataclass(frozen=True)
class EditSettings:
    autocorrect: bool = True       # run the replacement-line repair pipeline
    require_hashes: bool = False   # reject bare "N" references

SETTINGS_PRESETS = {
    "default": EditSettings(),
    # Agents that always read before editing: refuse references without a hash
    "strict": EditSettings(require_hashes=True),
    # Apply replacement text exactly as given
    "raw": EditSettings(autocorrect=False),
}

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _env_flag(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None:
        return None
    value = value.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {value!r}")


def load_settings(preset: Optional[str] = None) -> EditSettings:
    name = preset or os.environ.get("HASHLINE_PRESET") or "default"
    if name not in SETTINGS_PRESETS:
        raise ValueError(f"unknown settings preset {name!r}; choose from {', '.join(SETTINGS_PRESETS)}")
    settings = SETTINGS_PRESETS[name]
    autocorrect = _env_flag("HASHLINE_AUTOCORRECT")
    if autocorrect is not None:
        settings = replace(settings, autocorrect=autocorrect)
    require_hashes = _env_flag("HASHLINE_REQUIRE_HASHES")
    if require_hashes is not None:
        settings = replace(settings, require_hashes=require_hashes)
    return settings

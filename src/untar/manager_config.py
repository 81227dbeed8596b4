import json
from untar import logger
from typing import Any, Callable, Dict, List

SECTION = "UNTAR"

DEFAULTS = {
    "DEBUG_LEVEL": logger.INFO,
    "LOG_FILE": "",
    "DIRECTORY": "",
    "SAFE_PATHS": False,
}


# --- Configuration Management ---
class ConfigManager:
    """Handles reading/writing config using JSON format (Singleton)."""
    _instance = None
    _initialized = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, filename_config: str = ""):
        if self._initialized:
            return # Prevent re-initialization
        logger.debug(f"Initializing ConfigManager with filename: {filename_config or '(none)'}")
        self.filename_config = filename_config
        self.config = {} # Holds the parsed config (dict of dicts with types)
        # Observer pattern: Store listeners keyed by "section.key"
        self._listeners: Dict[str, List[Callable[[Any], None]]] = {}
        self._load_config()
        self._initialized = True # Mark as initialized

    @classmethod
    def reset_instance(cls):
        cls._instance = None
        cls._initialized = False

    def _load_config(self):
        """Loads config from JSON file. No file name means defaults only."""
        if not self.filename_config:
            self.config = {}
            return

        try:
            with open(self.filename_config, 'r') as f:
                loaded_data = json.load(f)
            if isinstance(loaded_data, dict):
                self.config = loaded_data
                logger.debug(f"Loaded config from {self.filename_config}")
            else:
                logger.warning(f"Invalid config format in {self.filename_config} (not a dictionary). Using defaults.")
                self.config = {}
        except (OSError, ValueError) as e:
            # OSError -> File not found or read error
            # ValueError -> Invalid JSON
            logger.warning(f"Could not load config from {self.filename_config} ({e}). Using defaults.")
            self.config = {}

    def save_config(self):
        """Save the current configuration to the JSON config file."""
        if not self.filename_config:
            logger.error("Cannot save config: no config file given.")
            return False
        try:
            with open(self.filename_config, 'w') as f:
                json.dump(self.config, f, indent=2)
            logger.debug(f"Config successfully saved to {self.filename_config}")
            return True
        except OSError as e:
            logger.error(f"Error saving config to {self.filename_config}: {e}")
            return False

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Gets value, remembering the default if missing. Preserves type from load/default."""
        section_dict = self.config.get(section)

        if isinstance(section_dict, dict) and key in section_dict:
            return section_dict[key] # Return existing value (already typed)
        if default is not None:
            logger.trace(f"Config key '{section}.{key}' not found. Using default: {repr(default)}")
            self.config.setdefault(section, {})
            if not isinstance(self.config[section], dict):
                self.config[section] = {}
            self.config[section][key] = default
            return default
        raise ValueError(f"Config key '{section}.{key}' not found and no default provided.")

    def get_untar(self, key: str) -> Any:
        """Shortcut for the UNTAR section with the built-in defaults."""
        return self.get(SECTION, key, DEFAULTS[key])

    def set(self, section: str, key: str, value: Any):
        """Sets the value (preserving type) and notifies listeners if changed."""
        # Ensure section exists
        if section not in self.config or not isinstance(self.config[section], dict):
            self.config[section] = {}

        current_value = self.config[section].get(key, None)
        value_changed = (key not in self.config[section]) or (current_value != value)

        if value_changed:
            self.config[section][key] = value # Assign value directly (preserves type)
            logger.trace(f"Config set: {section}.{key} = {value}")
            self._notify_listeners(section, key, value)

    def _notify_listeners(self, section: str, key: str, new_value: Any):
        """Notifies registered listeners about a configuration change."""
        key_path = f"{section}.{key}"
        for callback in self._listeners.get(key_path, []):
            callback(new_value)

    def subscribe(self, key_path: str, callback: Callable[[Any], None]):
        """Registers a callback function to be notified of changes to a specific config key.

        Args:
            key_path (str): The configuration key path (e.g., "SECTION.KEY").
            callback (Callable[[Any], None]): The function to call when the value changes.
                                                It will receive the new value as an argument.
        """
        if key_path not in self._listeners:
            self._listeners[key_path] = []
        if callback not in self._listeners[key_path]:
            self._listeners[key_path].append(callback)


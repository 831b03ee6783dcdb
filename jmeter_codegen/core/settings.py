"""Generator settings loaded from jmeter-codegen.yaml.

Example file:

    class_name: CheckoutLoadTest
    test_method_name: checkout
    include_run: true
    comment_disabled: false
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from jmeter_codegen.exceptions import SettingsException

SETTINGS_FILE_NAMES = ("jmeter-codegen.yaml", ".jmeter-codegen.yaml")


@dataclass
class GeneratorSettings:
    """Settings of generated Java test classes.

    Attributes:
        class_name: Name of the generated test class (default: PerformanceTest)
        test_method_name: Name of the JUnit test method (default: test)
        include_run: Whether the test plan is run in the test method (default: True)
        comment_disabled: Whether disabled elements are kept as commented
            code instead of being dropped (default: True)
    """

    class_name: str = "PerformanceTest"
    test_method_name: str = "test"
    include_run: bool = True
    comment_disabled: bool = True

    def with_overrides(self, **overrides: Any) -> "GeneratorSettings":
        """Copy of settings replacing the given non None values.

        Raises:
            SettingsException: If an override is unknown or invalid
        """
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return parse_settings(data, "overrides")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "class_name": self.class_name,
            "test_method_name": self.test_method_name,
            "include_run": self.include_run,
            "comment_disabled": self.comment_disabled,
        }


def find_settings_file(directory: Union[str, Path] = ".") -> Optional[Path]:
    """Find the settings file in a directory, if any."""
    for name in SETTINGS_FILE_NAMES:
        path = Path(directory) / name
        if path.is_file():
            return path
    return None


def load_settings(path: Optional[Union[str, Path]] = None) -> GeneratorSettings:
    """Load generator settings.

    Args:
        path: Settings file, discovered in the working directory when None

    Returns:
        GeneratorSettings from file, or defaults when no file is found

    Raises:
        SettingsException: If file is missing, isn't valid YAML or has
            unknown keys or values of wrong type
    """
    if path is None:
        path = find_settings_file()
        if path is None:
            return GeneratorSettings()
    settings_path = Path(path)
    if not settings_path.is_file():
        raise SettingsException(f"Settings file not found: {settings_path}")

    try:
        with open(settings_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SettingsException(f"Invalid YAML syntax in {settings_path}: {e}") from e

    if data is None:
        return GeneratorSettings()
    if not isinstance(data, dict):
        raise SettingsException(f"Invalid settings format in {settings_path}: expected dictionary")
    return parse_settings(data, str(settings_path))


def parse_settings(data: dict[str, Any], source: str = "settings") -> GeneratorSettings:
    """Validate and convert a settings dictionary.

    Raises:
        SettingsException: If there are unknown keys or values of wrong type
    """
    known = {f.name: f for f in fields(GeneratorSettings)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise SettingsException(f"Unknown settings in {source}: {', '.join(unknown)}")
    defaults = GeneratorSettings()
    for key, value in data.items():
        expected = type(getattr(defaults, key))
        if not isinstance(value, expected):
            raise SettingsException(
                f"Invalid '{key}' in {source}: expected {expected.__name__}, got {type(value).__name__}"
            )
        if expected is str and not value.isidentifier():
            raise SettingsException(f"Invalid '{key}' in {source}: '{value}' is not a valid Java identifier")
    return GeneratorSettings(**data)

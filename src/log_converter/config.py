"""
Configuration management for the log converter.
Handles ESS credentials (YAML file or .env) and export settings.
"""

import os
import yaml
import logging
from pathlib import Path
from typing import Optional, List
from dataclasses import dataclass, asdict, field
import getpass

from dotenv import load_dotenv

from .models import ExportParams
from .sheet_renderer import SheetStyle, MONTH_CASES

ENV_BASE_URL = "BASE_URL"
ENV_USERNAME = "USERNAME_ESS"
ENV_PASSWORD = "PASSWORD_ESS"
ENV_EMPLOYEE_ID = "EMPLOYEE_ID_ESS"


@dataclass
class ESSConfig:
    """ESS API connection configuration."""
    base_url: str = ""
    username: str = ""
    password: str = ""
    employee_id: str = ""

    def is_valid(self) -> bool:
        """Check if configuration has required fields."""
        return bool(self.base_url and self.username and self.password)

    def merge(self, other: "ESSConfig") -> "ESSConfig":
        """Return a copy where every field set in other overrides this one."""
        return ESSConfig(
            base_url=other.base_url or self.base_url,
            username=other.username or self.username,
            password=other.password or self.password,
            employee_id=other.employee_id or self.employee_id,
        )


@dataclass
class ExportConfig:
    """Timesheet export configuration."""
    project_name: str = ""
    months: List[int] = field(default_factory=list)
    year: int = 0
    randomize: bool = False
    min_duration: int = 4
    max_duration: int = 8
    styled: bool = True
    month_case: str = "upper"
    output_file: str = "timesheet.xlsx"

    def to_export_params(self) -> ExportParams:
        return ExportParams(
            project_filter=self.project_name,
            is_randomize_duration=self.randomize,
            min_duration=self.min_duration,
            max_duration=self.max_duration,
        )

    def to_sheet_style(self) -> SheetStyle:
        return SheetStyle(styled=self.styled, month_case=self.month_case)


def load_env_config(env_file: Optional[str] = None) -> ESSConfig:
    """
    Load ESS settings from the environment, reading a .env file first.

    Args:
        env_file: Path to a .env file (defaults to searching from the working directory)

    Returns:
        ESS configuration with whatever the environment provides
    """
    if env_file:
        if not os.path.exists(env_file):
            logging.warning(f"Environment file not found: {env_file}")
        load_dotenv(env_file)
    else:
        load_dotenv()

    return ESSConfig(
        base_url=os.getenv(ENV_BASE_URL, ""),
        username=os.getenv(ENV_USERNAME, ""),
        password=os.getenv(ENV_PASSWORD, ""),
        employee_id=os.getenv(ENV_EMPLOYEE_ID, ""),
    )


class ConfigManager:
    """Manage application configuration files."""

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_dir: Custom configuration directory (optional)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path.home() / ".log_converter"

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file = self.config_dir / "config.yaml"

    def _read(self) -> dict:
        if not self.config_file.exists():
            return {}
        with open(self.config_file, 'r') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            logging.warning(f"Ignoring {self.config_file}: expected a mapping, got {type(data).__name__}")
            return {}
        return data

    def save_ess_config(self, config: ESSConfig, save_password: bool = False) -> bool:
        """
        Save ESS configuration to file.

        Args:
            config: ESS configuration object
            save_password: Whether to save password (not recommended)

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            config_data = self._read()
            ess_data = asdict(config)

            if not save_password:
                ess_data.pop('password', None)

            config_data['ess'] = ess_data
            with open(self.config_file, 'w') as f:
                yaml.dump(config_data, f, default_flow_style=False)

            logging.info(f"ESS configuration saved to {self.config_file}")
            return True

        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to save ESS configuration: {e}")
            return False

    def load_ess_config(self) -> ESSConfig:
        """
        Load ESS configuration from file.

        Returns:
            ESS configuration object (defaults when missing or unreadable)
        """
        config = ESSConfig()

        try:
            data = self._read()
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to load ESS configuration: {e}")
            return config

        try:
            ess_data = data.get('ess') or {}
            base_url = str(ess_data.get('base_url', '') or '')
            username = str(ess_data.get('username', '') or '')
            password = str(ess_data.get('password', '') or '')
            employee_id = str(ess_data.get('employee_id', '') or '')
        except (TypeError, ValueError, AttributeError) as e:
            logging.warning(f"Invalid ESS section in {self.config_file}, using defaults: {e}")
            return config

        config.base_url = base_url
        config.username = username
        config.password = password
        config.employee_id = employee_id
        return config

    def save_export_config(self, config: ExportConfig) -> bool:
        """
        Save export configuration to file.

        Args:
            config: Export configuration object

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            config_data = self._read()
            config_data['export'] = asdict(config)

            with open(self.config_file, 'w') as f:
                yaml.dump(config_data, f, default_flow_style=False)

            logging.info(f"Export configuration saved to {self.config_file}")
            return True

        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to save export configuration: {e}")
            return False

    def load_export_config(self) -> ExportConfig:
        """
        Load export configuration from file.

        Returns:
            Export configuration object (defaults when missing or unreadable)
        """
        config = ExportConfig()

        try:
            data = self._read()
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to load export configuration: {e}")
            return config

        try:
            export_data = data.get('export') or {}
            loaded = ExportConfig(
                project_name=export_data.get('project_name', config.project_name),
                months=[int(m) for m in export_data.get('months', config.months) or []],
                year=int(export_data.get('year', config.year) or 0),
                randomize=bool(export_data.get('randomize', config.randomize)),
                min_duration=int(export_data.get('min_duration', config.min_duration)),
                max_duration=int(export_data.get('max_duration', config.max_duration)),
                styled=bool(export_data.get('styled', config.styled)),
                output_file=export_data.get('output_file', config.output_file),
            )
        except (TypeError, ValueError, AttributeError) as e:
            logging.warning(f"Invalid export section in {self.config_file}, using defaults: {e}")
            return config

        config = loaded
        month_case = export_data.get('month_case', config.month_case)
        if month_case in MONTH_CASES:
            config.month_case = month_case
        else:
            logging.warning(f"Ignoring unsupported month_case '{month_case}' in {self.config_file}")

        return config

    def interactive_ess_setup(self) -> ESSConfig:
        """
        Interactive setup for ESS connection configuration.

        Returns:
            ESS configuration object
        """
        print("ESS API Configuration Setup")
        print("=" * 30)

        config = ESSConfig()
        existing_config = self.load_ess_config()

        default_url = existing_config.base_url
        url_prompt = f"ESS API Base URL{f' [{default_url}]' if default_url else ''}: "
        config.base_url = input(url_prompt).strip() or default_url

        default_username = existing_config.username
        username_prompt = f"Username{f' [{default_username}]' if default_username else ''}: "
        config.username = input(username_prompt).strip() or default_username

        config.password = getpass.getpass("Password: ")

        default_employee = existing_config.employee_id
        employee_prompt = f"Employee ID{f' [{default_employee}]' if default_employee else ''} (optional): "
        config.employee_id = input(employee_prompt).strip() or default_employee

        return config

    def interactive_export_setup(self) -> ExportConfig:
        """
        Interactive setup for export configuration.

        Returns:
            Export configuration object
        """
        print("\nExport Configuration Setup")
        print("=" * 30)

        config = self.load_export_config()

        project_prompt = f"Project name [{config.project_name}]: "
        config.project_name = input(project_prompt).strip() or config.project_name

        randomize_prompt = f"Randomize durations? (y/n) [{'y' if config.randomize else 'n'}]: "
        randomize_input = input(randomize_prompt).strip().lower()
        if randomize_input:
            config.randomize = randomize_input.startswith('y')

        if config.randomize:
            min_input = input(f"Minimum duration in hours [{config.min_duration}]: ").strip()
            if min_input.isdigit():
                config.min_duration = int(min_input)
            max_input = input(f"Maximum duration in hours [{config.max_duration}]: ").strip()
            if max_input.isdigit():
                config.max_duration = int(max_input)

        styled_prompt = f"Apply fonts, borders and alignment? (y/n) [{'y' if config.styled else 'n'}]: "
        styled_input = input(styled_prompt).strip().lower()
        if styled_input:
            config.styled = styled_input.startswith('y')

        case_input = input(f"Month name case ({'/'.join(MONTH_CASES)}) [{config.month_case}]: ").strip().lower()
        if case_input in MONTH_CASES:
            config.month_case = case_input

        output_input = input(f"Output file [{config.output_file}]: ").strip()
        config.output_file = output_input or config.output_file

        return config

    def create_sample_config(self) -> bool:
        """
        Create a sample configuration file.

        Returns:
            True if created successfully, False otherwise
        """
        try:
            sample_config = {
                'ess': {
                    'base_url': 'https://your-ess-server.example.com/api',
                    'username': 'your-username',
                    'employee_id': '1234'
                },
                'export': asdict(ExportConfig(
                    project_name='Your Project',
                    months=[7, 8, 9],
                    year=2025,
                ))
            }

            sample_file = self.config_dir / "config_sample.yaml"
            with open(sample_file, 'w') as f:
                yaml.dump(sample_config, f, default_flow_style=False)

            print(f"Sample configuration created at: {sample_file}")
            print("Copy this to config.yaml and modify as needed.")
            return True

        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to create sample configuration: {e}")
            return False

    def show_config_status(self) -> None:
        """Display current configuration status."""
        print(f"Configuration Directory: {self.config_dir}")
        print(f"Configuration File: {self.config_file}")
        print()

        ess_config = self.load_ess_config()
        print("ESS API Configuration:")
        print(f"  Base URL: {ess_config.base_url or 'Not set'}")
        print(f"  Username: {ess_config.username or 'Not set'}")
        print(f"  Password: {'Set' if ess_config.password else 'Not set'}")
        print(f"  Employee ID: {ess_config.employee_id or 'Not set'}")
        print(f"  Valid: {'Yes' if ess_config.is_valid() else 'No'}")
        print()

        export_config = self.load_export_config()
        print("Export Configuration:")
        print(f"  Project: {export_config.project_name or 'Not set'}")
        print(f"  Months: {', '.join(str(m) for m in export_config.months) or 'Not set'}")
        print(f"  Year: {export_config.year or 'Not set'}")
        print(f"  Randomize: {export_config.randomize}")
        if export_config.randomize:
            print(f"  Duration Range: {export_config.min_duration}-{export_config.max_duration}")
        print(f"  Styled: {export_config.styled}")
        print(f"  Month Case: {export_config.month_case}")
        print(f"  Output File: {export_config.output_file}")

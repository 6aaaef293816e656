"""
Configuration Manager Module

Handles loading, saving, and managing application configuration.
Provides bi-directional mapping between dataclass sections and JSON persistence.
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

from infrastructure.logger import get_logger

logger = get_logger("ConfigManager")

PAIRING_POLICIES = ("positional", "strict")
SORT_OPTIONS = ("name", "total_hours", "department")


@dataclass
class WorkRules:
    """Working-time rules used by the monthly aggregation."""
    standard_day_hours: float = 8.0      # hours before a day accrues overtime
    standard_working_days: int = 22      # working days expected per month
    excessive_day_hours: float = 12.0    # days above this are flagged
    pairing_policy: str = "positional"   # "positional" or "strict"

    @property
    def expected_monthly_hours(self) -> float:
        return self.standard_day_hours * self.standard_working_days


@dataclass
class LocaleSettings:
    """Civil-date policy: punches are bucketed by date in this timezone."""
    timezone: str = "America/Sao_Paulo"
    date_format: str = "%d/%m/%Y"


@dataclass
class Paths:
    """File paths configuration."""
    store_workbook: str = ""
    custom_font_path: str = ""  # Custom TTF font for PDF generation
    log_file: str = ""  # Extra log file attached to every logger


@dataclass
class OutputSettings:
    """Output settings for generated reports."""
    output_dir: str = ""  # Default empty = current directory
    generate_pdf: bool = True
    generate_excel: bool = False
    pdf_filename_pattern: str = "attendance_report_{year}_{month}.pdf"
    excel_filename_pattern: str = "attendance_report_{year}_{month}.xlsx"

    # Employee order in reports: "name", "total_hours" or "department"
    sort_by: str = "name"


@dataclass
class AppConfig:
    """Main application configuration container."""
    work_rules: WorkRules = field(default_factory=WorkRules)
    locale: LocaleSettings = field(default_factory=LocaleSettings)
    paths: Paths = field(default_factory=Paths)
    output_settings: OutputSettings = field(default_factory=OutputSettings)


class ConfigManager:
    """
    Manages application configuration with JSON persistence.

    Responsibilities:
    - Load configuration from JSON file
    - Save configuration to JSON file
    - Provide default configuration
    - Convert between dataclass and dict representations
    """

    DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: AppConfig = AppConfig()

    @property
    def config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def load(self) -> AppConfig:
        """Load configuration from JSON file."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self._config = self._dict_to_config(data)
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Failed to load config {self.config_path}, using defaults: {e}")
                self._config = AppConfig()
        else:
            self._config = AppConfig()
        return self._config

    def save(self) -> None:
        """Save current configuration to JSON file."""
        data = self._config_to_dict(self._config)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def update(self, **kwargs) -> None:
        """Update specific configuration sections."""
        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
        self.save()

    def _config_to_dict(self, config: AppConfig) -> dict:
        """Convert AppConfig dataclass to dictionary."""
        return asdict(config)

    def _dict_to_config(self, data: dict) -> AppConfig:
        """Convert dictionary to AppConfig dataclass, defaulting missing keys."""
        rules_data = data.get("work_rules", {})
        locale_data = data.get("locale", {})
        paths_data = data.get("paths", {})
        output_data = data.get("output_settings", {})

        defaults = WorkRules()
        pairing_policy = rules_data.get("pairing_policy", defaults.pairing_policy)
        if pairing_policy not in PAIRING_POLICIES:
            logger.warning(f"Unknown pairing policy '{pairing_policy}', using positional")
            pairing_policy = defaults.pairing_policy

        work_rules = WorkRules(
            standard_day_hours=float(rules_data.get("standard_day_hours", defaults.standard_day_hours)),
            standard_working_days=int(rules_data.get("standard_working_days", defaults.standard_working_days)),
            excessive_day_hours=float(rules_data.get("excessive_day_hours", defaults.excessive_day_hours)),
            pairing_policy=pairing_policy
        )

        locale = LocaleSettings(
            timezone=locale_data.get("timezone", "America/Sao_Paulo"),
            date_format=locale_data.get("date_format", "%d/%m/%Y")
        )

        paths = Paths(
            store_workbook=paths_data.get("store_workbook", ""),
            custom_font_path=paths_data.get("custom_font_path", ""),
            log_file=paths_data.get("log_file", "")
        )

        sort_by = output_data.get("sort_by", "name")
        if sort_by not in SORT_OPTIONS:
            sort_by = "name"

        output_settings = OutputSettings(
            output_dir=output_data.get("output_dir", ""),
            generate_pdf=output_data.get("generate_pdf", True),
            generate_excel=output_data.get("generate_excel", False),
            pdf_filename_pattern=output_data.get(
                "pdf_filename_pattern", "attendance_report_{year}_{month}.pdf"
            ),
            excel_filename_pattern=output_data.get(
                "excel_filename_pattern", "attendance_report_{year}_{month}.xlsx"
            ),
            sort_by=sort_by
        )

        return AppConfig(
            work_rules=work_rules,
            locale=locale,
            paths=paths,
            output_settings=output_settings
        )

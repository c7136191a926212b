"""Configuration loader and validation for reconciliation settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class StatementInputConfig(BaseModel):
    """Configuration for bank statement parsing."""

    encoding: str = "utf-8"
    delimiter: str = ","
    header_scan_rows: int = 30
    dayfirst: bool = True
    min_header_terms: int = 2
    header_terms: list[str] = Field(default_factory=list)
    column_aliases: dict[str, list[str]] = Field(default_factory=dict)


class OrdersInputConfig(BaseModel):
    """Configuration for the CSV order store."""

    encoding: str = "utf-8"
    delimiter: str = ","
    column_mappings: dict[str, str] = Field(default_factory=dict)


class InputConfig(BaseModel):
    """Configuration for input files."""

    statement: StatementInputConfig = Field(default_factory=StatementInputConfig)
    orders: OrdersInputConfig = Field(default_factory=OrdersInputConfig)


class MatchingConfig(BaseModel):
    """Thresholds used by the reference comparator and match scorer."""

    exact_embedded_min_digits: int = 6
    strong_partial_digits: int = 8
    substring_min_digits: int = 6
    suffix_digits: int = 6
    prefix_digits: int = 8

    min_reference_digits: int = 6
    strong_amount_tolerance: float = 1000.0
    weak_amount_tolerance: float = 100.0

    exact_confidence: int = 100
    strong_confidence: int = 95
    weak_confidence: int = 85

    @field_validator("exact_confidence", "strong_confidence", "weak_confidence")
    @classmethod
    def _confidence_in_range(cls, value: int) -> int:
        if not 0 <= value <= 100:
            raise ValueError("confidence must be between 0 and 100")
        return value


class SettlementConfig(BaseModel):
    """Configuration for auto-settlement of verified payments."""

    channel: str = "cashea"
    pending_status: str = "En proceso"
    verified_status: str = "A despachar"
    auto_approve_threshold: int = 80
    initialize_freight: bool = True
    pending_freight_amount: float = 0.01
    pending_freight_status: str = "Pendiente"

    @field_validator("auto_approve_threshold")
    @classmethod
    def _threshold_in_range(cls, value: int) -> int:
        if not 0 <= value <= 100:
            raise ValueError("auto_approve_threshold must be between 0 and 100")
        return value


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "payment_verification_{date}_{time}.xlsx"
    include_timestamp: bool = True


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    matches: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Matches"))
    manual_review: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Manual Review")
    )
    settlement: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Settlement"))
    unmatched: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Unmatched Transactions")
    )


class OutputConfig(BaseModel):
    """Configuration for output."""

    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ReconConfig(BaseModel):
    """Main configuration model for payment reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    settlement: SettlementConfig = Field(default_factory=SettlementConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "input": {
            "statement": {
                "encoding": "utf-8",
                "delimiter": ",",
                "header_scan_rows": 30,
                "dayfirst": True,
                "min_header_terms": 2,
                "header_terms": [
                    "referencia",
                    "reference",
                    "ref",
                    "numero",
                    "número",
                    "no.",
                    "nro",
                    "monto",
                    "importe",
                    "amount",
                    "valor",
                    "haber",
                    "crédito",
                    "credito",
                    "débito",
                    "debito",
                    "fecha",
                    "date",
                    "dia",
                ],
                "column_aliases": {
                    "reference": [
                        "Referencia",
                        "referencia",
                        "Número de Referencia",
                        "Numero de Referencia",
                        "N° Referencia",
                        "No. Referencia",
                        "Num Referencia",
                        "Ref",
                        "Reference",
                        "REFERENCIA",
                    ],
                    "amount": [
                        "Monto",
                        "monto",
                        "Importe",
                        "importe",
                        "Cantidad",
                        "cantidad",
                        "Amount",
                        "amount",
                        "Valor",
                        "valor",
                        "Haber",
                        "haber",
                        "Crédito",
                        "credito",
                        "Débito",
                        "debito",
                        "MONTO",
                        "IMPORTE",
                        "HABER",
                    ],
                    "date": ["Fecha", "fecha", "FECHA", "Date", "date"],
                    "description": [
                        "Descripcion",
                        "descripcion",
                        "Descripción",
                        "DESCRIPCION",
                        "Concepto",
                        "concepto",
                        "Detalle",
                        "detalle",
                        "Observaciones",
                        "observaciones",
                        "Description",
                    ],
                },
            },
            "orders": {
                "encoding": "utf-8",
                "delimiter": ",",
                "column_mappings": {
                    "id": "id",
                    "order_number": "orden",
                    "customer_name": "nombre",
                    "channel": "canal",
                    "reference": "referencia",
                    "amount_local": "montoBs",
                    "status": "estadoEntrega",
                    "freight_amount_usd": "montoFleteUsd",
                    "free_freight": "fleteGratis",
                    "freight_status": "statusFlete",
                },
            },
        },
        "matching": {
            "exact_embedded_min_digits": 6,
            "strong_partial_digits": 8,
            "substring_min_digits": 6,
            "suffix_digits": 6,
            "prefix_digits": 8,
            "min_reference_digits": 6,
            "strong_amount_tolerance": 1000.0,
            "weak_amount_tolerance": 100.0,
            "exact_confidence": 100,
            "strong_confidence": 95,
            "weak_confidence": 85,
        },
        "settlement": {
            "channel": "cashea",
            "pending_status": "En proceso",
            "verified_status": "A despachar",
            "auto_approve_threshold": 80,
            "initialize_freight": True,
            "pending_freight_amount": 0.01,
            "pending_freight_status": "Pendiente",
        },
        "output": {
            "excel": {
                "filename_template": "payment_verification_{date}_{time}.xlsx",
                "include_timestamp": True,
            },
            "sheets": {
                "summary": {"enabled": True, "name": "Summary"},
                "matches": {"enabled": True, "name": "Matches"},
                "manual_review": {"enabled": True, "name": "Manual Review"},
                "settlement": {"enabled": True, "name": "Settlement"},
                "unmatched": {"enabled": True, "name": "Unmatched Transactions"},
            },
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    }


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Configuration file {config_path} must contain a mapping"
            )

        # Deep merge user config into defaults
        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Order payment reconciliation configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(
        config_dict, default_flow_style=False, sort_keys=False, allow_unicode=True
    )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")

"""Structured logging with correlation tracking and sensitive data masking."""

import logging
import re
import sys
from typing import Any, Dict, Iterable

import structlog

from ..config.settings import LoggingConfig

MASK_VALUE = "***MASKED***"

# Verification tokens and JWTs leak into messages through URLs and headers.
_TOKEN_IN_TEXT = re.compile(r"(token=)[^&\s\"']+")
_BEARER_IN_TEXT = re.compile(r"(Bearer\s+)[A-Za-z0-9\-_.]+")


class SensitiveDataMasker:
    """Masks sensitive data in log records."""

    def __init__(self, sensitive_fields: Iterable[str]):
        self.sensitive_fields = {field.lower() for field in sensitive_fields}

    def mask_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively mask sensitive fields in dictionary."""
        masked_data = {}

        for key, value in data.items():
            if isinstance(key, str) and key.lower() in self.sensitive_fields:
                masked_data[key] = MASK_VALUE
            elif isinstance(value, dict):
                masked_data[key] = self.mask_dict(value)
            elif isinstance(value, list):
                masked_data[key] = [
                    self.mask_dict(item) if isinstance(item, dict) else item
                    for item in value
                ]
            elif isinstance(value, str):
                masked_data[key] = self.mask_string(value)
            else:
                masked_data[key] = value

        return masked_data

    @staticmethod
    def mask_string(text: str) -> str:
        """Mask token-like patterns embedded in free text."""
        text = _TOKEN_IN_TEXT.sub(rf"\g<1>{MASK_VALUE}", text)
        return _BEARER_IN_TEXT.sub(rf"\g<1>{MASK_VALUE}", text)


class SensitiveDataProcessor:
    """structlog processor wrapping a SensitiveDataMasker."""

    def __init__(self, masker: SensitiveDataMasker):
        self.masker = masker

    def __call__(self, logger, method_name, event_dict):
        return self.masker.mask_dict(event_dict)


def build_processors(config: LoggingConfig) -> list:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        SensitiveDataProcessor(SensitiveDataMasker(config.sensitive_fields)),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if config.format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def configure_logging(config: LoggingConfig) -> None:
    """Configure stdlib logging and structlog from settings.

    Safe to call more than once; the last call wins.
    """
    level = getattr(logging, config.level)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)

    structlog.configure(
        processors=build_processors(config),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    structlog.get_logger(__name__).info(
        "Structured logging configured",
        level=config.level,
        format=config.format,
        sensitive_fields_count=len(config.sensitive_fields),
    )

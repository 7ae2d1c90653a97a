"""Consistency checks run before any external process is started."""

import re
import logging
from typing import Optional

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

MODEL_PATTERN = re.compile(r"(tiny|base|small|medium|large|large-v1|large-v2)(\.[A-Za-z]{2})?")
LANGUAGE_PATTERN = re.compile(r"([A-Za-z]{2}|auto)")
QUANTIZATION_TYPES = ("q4_0", "q4_1", "q5_0", "q5_1", "q8_0")
ENGLISH_ONLY_SUFFIX = ".en"
AUTO_INSTALL_MODES = (True, False, "manual")


def validate_model(model: str) -> None:
    if not isinstance(model, str) or not MODEL_PATTERN.fullmatch(model):
        raise ConfigurationError(f"Speech recognition model '{model}' not recognised")


def validate_language(language: str) -> None:
    if not isinstance(language, str) or not LANGUAGE_PATTERN.fullmatch(language):
        raise ConfigurationError(f"Unknown language shortcode '{language}'")


def validate_model_language(model: str, language: str) -> None:
    """An English-only model cannot transcribe any other language."""
    if model.endswith(ENGLISH_ONLY_SUFFIX) and language != "en":
        raise ConfigurationError(
            f"English only model '{model}' can't transcribe in '{language}' language")


def validate_quantization(quantize: Optional[str]) -> None:
    if quantize is None:
        return
    if quantize not in QUANTIZATION_TYPES:
        raise ConfigurationError(
            f"Quantization type '{quantize}' not recognised, use one of {', '.join(QUANTIZATION_TYPES)}")


def validate_settings(config) -> None:
    """Validate a configuration snapshot.

    Raises:
        ConfigurationError: on the first inconsistency found
    """
    model = config.get('whisper.model')
    language = config.get('whisper.language')

    validate_model(model)
    validate_language(language)
    validate_model_language(model, language)
    validate_quantization(config.get('whisper.quantize'))

    threads = config.get('whisper.threads')
    if threads is not None and (isinstance(threads, bool) or not isinstance(threads, int) or threads < 1):
        raise ConfigurationError(f"Thread count must be a positive integer, got '{threads}'")

    timeout = config.get('capture.timeout_seconds')
    if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0):
        raise ConfigurationError(f"Recording timeout must be a positive number, got '{timeout}'")

    auto_install = config.get_auto_install()
    if auto_install not in AUTO_INSTALL_MODES:
        raise ConfigurationError(
            f"install.auto_install must be true, false or manual, got '{auto_install}'")

    logger.debug(f"Configuration valid: model={model}, language={language}")

"""Filesystem layout of an installed whisper.cpp engine and its models."""

import os
import logging
from pathlib import Path
from typing import Optional

from ..models.install import InstallationState

logger = logging.getLogger(__name__)

ENGINE_DIR_NAME = "whisper.cpp"
BINARY_NAMES = ("main", "main.exe")
MODELS_DIR_NAME = "models"
DOWNLOAD_SCRIPT = "download-ggml-model.sh"


def engine_dir(config) -> Path:
    return config.get_install_directory() / ENGINE_DIR_NAME


def default_binary_name() -> str:
    return "main.exe" if os.name == "nt" else "main"


def find_engine_binary(config) -> Optional[Path]:
    """Return the built engine binary if it exists."""
    directory = engine_dir(config)
    for name in BINARY_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def model_file(config, quantize: Optional[str] = None) -> Path:
    """Path of ggml-<model>[-<quant>].bin inside the engine's models directory."""
    model = config.get('whisper.model')
    suffix = f"-{quantize}" if quantize else ""
    return engine_dir(config) / MODELS_DIR_NAME / f"ggml-{model}{suffix}.bin"


def quantized_model_file(config) -> Optional[Path]:
    quantize = config.get('whisper.quantize')
    if not quantize:
        return None
    return model_file(config, quantize)


def resolved_model_file(config) -> Path:
    """Model handed to the engine: explicit override, else quantized, else base."""
    override = config.get('whisper.model_path')
    if override:
        return Path(os.path.expanduser(str(override)))
    return quantized_model_file(config) or model_file(config)


def probe(config) -> InstallationState:
    """Inspect the disk and report what is installed right now."""
    directory = engine_dir(config)
    override = config.get('whisper.model_path')
    if override:
        base = resolved_model_file(config)
        quantized = None
    else:
        base = model_file(config)
        quantized = quantized_model_file(config)
    state = InstallationState(
        engine_dir=directory,
        binary=find_engine_binary(config),
        model_file=base,
        quantized_file=quantized,
        source_present=(directory / "Makefile").is_file(),
        model_present=base.is_file(),
        quantized_present=quantized is not None and quantized.is_file(),
        model_override=bool(override),
    )
    logger.debug(f"Probed installation: {state}")
    return state

"""Installation state models."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class InstallStage(Enum):
    """Bootstrap stage, in the order they are worked through."""
    BUILD_ENGINE = "build_engine"
    DOWNLOAD_MODEL = "download_model"
    QUANTIZE_MODEL = "quantize_model"
    READY = "ready"


class Reentry(Enum):
    """Why the installer is being run."""
    INITIAL = "initial"
    FINISHED = "finished"
    INTERRUPTED = "interrupted"
    FAILED = "failed"


class InstallAction(Enum):
    SPAWN = "spawn"          # start the stage's subprocess
    READY = "ready"          # everything present, go on to capture
    ROLLBACK = "rollback"    # remove partial artifacts and stop
    FAIL = "fail"            # report an error and stop


@dataclass(frozen=True)
class InstallationState:
    """What is present on disk right now. Always probed, never cached."""
    engine_dir: Path
    binary: Optional[Path]        # existing engine binary, if any
    model_file: Path
    quantized_file: Optional[Path]  # None when no quantization is configured
    source_present: bool
    model_present: bool
    quantized_present: bool
    model_override: bool = False  # model_file comes from whisper.model_path

    @property
    def binary_present(self) -> bool:
        return self.binary is not None

    @property
    def pending_stage(self) -> InstallStage:
        if not self.binary_present:
            return InstallStage.BUILD_ENGINE
        if not self.model_present:
            return InstallStage.DOWNLOAD_MODEL
        if self.quantized_file is not None and not self.quantized_present:
            return InstallStage.QUANTIZE_MODEL
        return InstallStage.READY


@dataclass(frozen=True)
class Transition:
    """Next step decided by the installer state machine."""
    action: InstallAction
    stage: InstallStage
    confirm: bool = False
    message: Optional[str] = None

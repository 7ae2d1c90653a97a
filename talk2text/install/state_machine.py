"""Installer state machine.

`decide` is a pure function of what is on disk, why the installer runs now
and which stage ran last. It never looks at anything else, so a crash or
restart halfway through an install resumes from whatever the disk shows.
"""

from typing import Optional, Union

from ..models.install import (
    InstallAction,
    InstallationState,
    InstallStage,
    Reentry,
    Transition,
)

STAGE_LABELS = {
    InstallStage.BUILD_ENGINE: "Building whisper.cpp",
    InstallStage.DOWNLOAD_MODEL: "Downloading model",
    InstallStage.QUANTIZE_MODEL: "Quantizing model",
    InstallStage.READY: "Installation check",
}

FRESH_MODEL_STAGES = (InstallStage.DOWNLOAD_MODEL, InstallStage.QUANTIZE_MODEL)


def decide(state: InstallationState,
           reentry: Reentry = Reentry.INITIAL,
           last_stage: Optional[InstallStage] = None,
           auto_install: Union[bool, str] = True) -> Transition:
    """Return the next installer transition."""
    if reentry is Reentry.INTERRUPTED:
        if last_stage is None:
            # Which step was in flight is inferred from the binary being there.
            last_stage = InstallStage.DOWNLOAD_MODEL if state.binary_present else InstallStage.BUILD_ENGINE
        return Transition(InstallAction.ROLLBACK, last_stage,
                          message=f"{STAGE_LABELS[last_stage]} interrupted")

    if reentry is Reentry.FAILED:
        stage = last_stage or state.pending_stage
        return Transition(InstallAction.FAIL, stage, message=f"{STAGE_LABELS[stage]} failed")

    stage = state.pending_stage

    if stage is InstallStage.BUILD_ENGINE:
        if auto_install == "manual":
            return Transition(InstallAction.FAIL, stage,
                              message=f"whisper.cpp not found in {state.engine_dir}, install it yourself "
                                      f"or set install.auto_install to true")
        if auto_install is False:
            return Transition(InstallAction.FAIL, stage,
                              message="Automatic installation is disabled, configure whisper.command "
                                      "to bring your own inference engine")
        return Transition(InstallAction.SPAWN, stage, confirm=True,
                          message=f"whisper.cpp not found in {state.engine_dir}. Install it now?")

    if stage is InstallStage.DOWNLOAD_MODEL:
        if state.model_override:
            return Transition(InstallAction.FAIL, stage,
                              message=f"Model file not found: {state.model_file}")
        return Transition(InstallAction.SPAWN, stage, confirm=True,
                          message=f"Speech recognition model {state.model_file.name} isn't available. "
                                  f"Download it now?")

    if stage is InstallStage.QUANTIZE_MODEL:
        return Transition(InstallAction.SPAWN, stage,
                          message=f"Quantizing into {state.quantized_file.name}")

    fresh_model = reentry is Reentry.FINISHED and last_stage in FRESH_MODEL_STAGES
    return Transition(InstallAction.READY, stage, confirm=fresh_model,
                      message="Model ready. Start recording now?" if fresh_model else None)

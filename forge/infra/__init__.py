# -----------------------------------------------------------------------------
# INFRASTRUCTURE LAYER
# -----------------------------------------------------------------------------
# Contains low-level infrastructure wrappers:
# - process: child process launch, output streaming, command lookup
# -----------------------------------------------------------------------------

from .process import ProcessLaunchError, build_command, stream_process, which

__all__ = ["ProcessLaunchError", "build_command", "stream_process", "which"]

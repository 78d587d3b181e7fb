# -----------------------------------------------------------------------------
# SAAS FORGE
# -----------------------------------------------------------------------------
# Manifest-driven scaffolding orchestrator for SaaS project skeletons.
# -----------------------------------------------------------------------------

__version__ = "2.0.0"

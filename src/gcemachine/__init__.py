import warnings

# Suppress Google SDK FutureWarning messages about interpreter deprecation.
# These clutter the orchestrator logs on every reconcile pass.
warnings.filterwarnings("ignore", category=FutureWarning, module="google.api_core")
warnings.filterwarnings("ignore", category=FutureWarning, module="google.cloud")

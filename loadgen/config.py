import os

# Target and request settings
TARGET_URL = os.getenv("LOADGEN_TARGET_URL", "https://calc.test.trahan.dev/calculated")
REQUEST_TIMEOUT_S = float(os.getenv("REQUEST_TIMEOUT_S", "30.0"))
USER_AGENT = os.getenv("LOADGEN_USER_AGENT", "Mozilla/5.0")

# Run shape
DEFAULT_BATCH_SIZE = int(os.getenv("DEFAULT_BATCH_SIZE", "75"))

# Observability
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_TRACING = os.getenv("ENABLE_TRACING", "false").lower() == "true"
SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "loadgen")

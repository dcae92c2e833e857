# Operation polling defaults.
# Zone operations for instance insert/delete usually settle within a minute.
OPERATION_TIMEOUT_SECONDS = 180
OPERATION_RETRY_WAIT_SECONDS = 5

# Environment overrides for the poller
OPERATION_TIMEOUT_ENV = "GCE_OPERATION_TIMEOUT_SECONDS"
OPERATION_RETRY_WAIT_ENV = "GCE_OPERATION_POLL_INTERVAL_SECONDS"

# Terminal status reported by zoneOperations.get
OPERATION_DONE = "DONE"

# Secret keys read from the secret store
USER_DATA_SECRET_KEY = "userData"
CREDENTIALS_SECRET_KEY = "service_account.json"

# Metadata key carrying base64 encoded boot data
USER_DATA_METADATA_KEY = "user-data"

# e.g. gce://my-project/us-central1-a/worker-0
PROVIDER_ID_PREFIX = "gce://"

# Event reasons
CREATE_EVENT_ACTION = "Create"
CREATED_EVENT_REASON = "Created"


def provider_id(project_id: str, zone: str, name: str) -> str:
    return f"{PROVIDER_ID_PREFIX}{project_id}/{zone}/{name}"

from __future__ import annotations

# Publisher API calls (401 and 5xx are retried with a fixed wait)
API_RETRY_ATTEMPTS = 7
API_RETRY_DELAY_SECONDS = 2.0

# Remote service account key download
KEY_DOWNLOAD_RETRY_ATTEMPTS = 4
KEY_DOWNLOAD_RETRY_DELAY_SECONDS = 3.0
KEY_DOWNLOAD_TIMEOUT_SECONDS = 30.0

# Resumable media uploads
UPLOAD_CHUNK_SIZE = 10 * 1024 * 1024

# envman export
ENVMAN_TIMEOUT_SECONDS = 30.0

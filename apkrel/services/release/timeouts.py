from __future__ import annotations

# gh reads and metadata edits
GH_TIMEOUT_SECONDS = 60.0

# gh create/upload move whole APKs over the network
GH_UPLOAD_TIMEOUT_SECONDS = 30 * 60.0

"""Turn processing, notification dispatch and component logging."""

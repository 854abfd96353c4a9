"""Version 1 of the BookBridge HTTP API, one router per resource."""

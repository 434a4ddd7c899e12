"""Web API for the admin console."""

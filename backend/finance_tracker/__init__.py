"""Personal finance tracker API."""

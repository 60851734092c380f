"""HTTP API for MediCrew."""

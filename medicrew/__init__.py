"""MediCrew: multi-agent health navigation and doctor review portal."""

__version__ = "1.0.0"

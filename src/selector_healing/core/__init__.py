"""
Core module for the selector healing engine.

This module contains:
- config.py: Environment settings
- config_loader.py: YAML healing configuration
- logging_config.py: Logging configuration
- healing_events.py: Trace events and observers
- models/: Tree model and healing data models
"""

__all__ = ["config", "config_loader", "logging_config", "healing_events", "models"]

"""
hydra-browser: orchestration core for a multi-pane, partition-isolated browser.
"""

__version__ = "0.3.0"

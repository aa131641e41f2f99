"""Core orchestration: errors and the top-level bundle parser."""

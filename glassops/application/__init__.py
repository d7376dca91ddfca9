"""Run context and run input handling for the command-line boundary."""

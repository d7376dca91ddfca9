"""Pure governance policy types and decision functions."""

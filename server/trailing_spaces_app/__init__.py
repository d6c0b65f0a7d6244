"""HTTP service exposing the trailing spaces engine."""

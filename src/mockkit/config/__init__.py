"""Settings for mockkit."""

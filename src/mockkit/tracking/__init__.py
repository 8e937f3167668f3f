"""Call counting and bound verification."""

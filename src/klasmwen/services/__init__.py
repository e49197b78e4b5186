"""Domain services for the KlasMwen API."""

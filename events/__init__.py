"""Event rules, their line grammar, catalog and evaluation."""

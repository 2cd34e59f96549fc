"""Output layer — renders handler results for humans (rich) or machines (--json)."""

"""Templates copied into projects by ``proctor --init``."""

"""core – shared infrastructure (config, logging, audit trail, contracts)."""

"""core.audit – content hashes and the persisted audit trail."""

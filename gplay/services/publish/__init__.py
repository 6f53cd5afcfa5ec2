"""Google Play publishing: inputs, uploads, track reconciliation, edits."""

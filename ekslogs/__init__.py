"""Diagnostic log bundle collector for container-runtime / cluster-agent hosts."""

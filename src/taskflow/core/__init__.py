"""Domain models, ports and the remote/local parsing orchestrator."""

"""Protocol adapters around WebToolsService."""

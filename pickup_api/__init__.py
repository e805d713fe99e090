"""PickupForge API: the compute engine over JSON."""

"""API dependencies."""
from ..core.simulation import get_batch_simulator, BatchSimulator


def get_simulator() -> BatchSimulator:
    """Dependency for the batch simulator."""
    return get_batch_simulator()

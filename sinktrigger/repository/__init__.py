from .base import JobRepository
from .memory import InMemoryJobRepository


def get_job_repository(repository_type: str, config: dict) -> JobRepository:
    """
    Factory function to create job repository instances.

    Args:
        repository_type: Type of repository ('inventory')
        config: Repository-specific settings

    Example config:
        {
            'type': 'inventory',
            'path': './configs/inventory.yaml'
        }
    """
    repository_type = repository_type.lower()

    if repository_type == 'inventory':
        path = config.get('path')
        if not path:
            return InMemoryJobRepository()
        return InMemoryJobRepository.from_yaml(path)
    else:
        raise ValueError(f"Unsupported job repository type: {repository_type}. Supported: 'inventory'")


__all__ = ['JobRepository', 'InMemoryJobRepository', 'get_job_repository']

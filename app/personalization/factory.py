"""
Factory for creating the personalization module.
"""
from pathlib import Path

from config_manager import PersonalizationConfig
from personalization_service import ContentCatalog
from .services import PersonalizationManager
from .routes import create_personalization_routes


def create_personalization_module(
    user_data_dir: Path,
    catalog: ContentCatalog,
    config: PersonalizationConfig
) -> dict:
    """Create personalization module with service and routes.

    Args:
        user_data_dir: Directory holding one sub-directory of records per visitor
        catalog: Content catalog used for recommendations
        config: Personalization engine settings

    Returns:
        Dictionary containing the service and blueprint
    """
    user_data_dir.mkdir(parents=True, exist_ok=True)

    manager = PersonalizationManager(
        user_data_dir, catalog, config, max_services=config.max_active_visitors
    )
    blueprint = create_personalization_routes(manager)

    return {
        "service": manager,
        "blueprint": blueprint
    }
